"""Shared pytest fixtures."""

import asyncio
from collections.abc import Mapping
from typing import Any

import pytest


class FakeAtom:
    """Atom that records its calls and can be held in flight."""

    def __init__(self, result: Any = None, error: Exception | None = None, hold: bool = False):
        self.calls: list[dict[str, Any]] = []
        self.finished = 0
        self._result = result
        self._error = error
        self._gate = asyncio.Event()
        if not hold:
            self._gate.set()

    async def __call__(self, props: Mapping[str, Any]) -> Any:
        self.calls.append(dict(props))
        await self._gate.wait()
        self.finished += 1
        if self._error is not None:
            raise self._error
        return self._result(props) if callable(self._result) else self._result

    def release(self) -> None:
        self._gate.set()


@pytest.fixture
def fake_atom():
    """Factory for controllable atoms."""
    return FakeAtom


@pytest.fixture
def inputs():
    """A fixed input mapping (same reference for every advance)."""
    return {"project_id": "hi"}
