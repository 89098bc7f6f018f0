"""
Session types.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from catalyst.cell import Props


class ChainReactionState(StrEnum):
    """Overall state of the session."""

    EXECUTING = "executing"
    INVALIDATING = "invalidating"
    ERROR = "error"
    FINISHED = "finished"


@dataclass(frozen=True, slots=True)
class Observation:
    """
    What the session looks like after one advance.

    Unpacks as a pair:
        state, props = await catalyst.advance(inputs)
    """

    state: ChainReactionState
    props: Props

    def __iter__(self) -> Iterator[Any]:
        return iter((self.state, self.props))


class ClosedError(RuntimeError):
    """The catalyst was released."""


__all__ = ("ChainReactionState", "Observation", "ClosedError")
