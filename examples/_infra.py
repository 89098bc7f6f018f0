"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field

from kungfu import Result, Ok, Error

from catalyst import cell as V
from catalyst.cell import Props


# Types
@dataclass(frozen=True, slots=True)
class Workflow:
    id: str
    design_space_id: str
    predictor_id: str


@dataclass(frozen=True, slots=True)
class DesignSpace:
    id: str
    dimensions: int


@dataclass(frozen=True, slots=True)
class Predictor:
    id: str
    version: int


# Errors
@dataclass(frozen=True, slots=True)
class NotFound(Exception):
    entity: str
    id: str

    def __str__(self) -> str:
        return f"{self.entity}:{self.id} not found"


# Fake API
@dataclass(slots=True)
class FakeApi:
    workflows: dict[str, Workflow] = field(default_factory=lambda: {
        "wf-1": Workflow("wf-1", "ds-1", "pr-1"),
        "wf-2": Workflow("wf-2", "ds-2", "pr-missing"),
    })
    spaces: dict[str, DesignSpace] = field(default_factory=lambda: {
        "ds-1": DesignSpace("ds-1", 4),
        "ds-2": DesignSpace("ds-2", 7),
    })
    predictors: dict[str, Predictor] = field(default_factory=lambda: {
        "pr-1": Predictor("pr-1", 1),
    })
    latency: float = 0.05

    async def get_workflow(self, workflow_id: str) -> Workflow:
        await asyncio.sleep(self.latency)
        if workflow_id not in self.workflows:
            raise NotFound("Workflow", workflow_id)
        return self.workflows[workflow_id]

    async def get_design_space(self, space_id: str) -> DesignSpace:
        await asyncio.sleep(self.latency)
        if space_id not in self.spaces:
            raise NotFound("DesignSpace", space_id)
        return self.spaces[space_id]

    async def get_predictor(self, predictor_id: str) -> Result[Predictor, NotFound]:
        await asyncio.sleep(self.latency)
        predictor = self.predictors.get(predictor_id)
        return Ok(predictor) if predictor else Error(NotFound("Predictor", predictor_id))


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def describe(props: Props) -> str:
    parts = []
    for name, cell in props.items():
        match cell:
            case V.Absent():
                parts.append(f"{name}=·")
            case V.Refreshing(_, previous):
                parts.append(f"{name}=↻{previous!r}")
            case V.Pending():
                parts.append(f"{name}=…")
            case V.Resolved(value):
                parts.append(f"{name}={value!r}")
            case V.Failed(error):
                parts.append(f"{name}=✗{error}")
    return " ".join(parts)


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    asyncio.run(main())
