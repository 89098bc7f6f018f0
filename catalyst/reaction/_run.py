"""
Reaction — one pass through a molecule, stage by stage.

Explicit state machine: dispatch() then settle() for each stage.

    reaction = Reaction(molecule)
    while not reaction.done:
        inflight = await reaction.dispatch(inputs)   # show a spinner
        settled = await reaction.settle()            # show the values
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from types import MappingProxyType
from typing import Any

from catalyst._types import Inputs, Molecule
from catalyst.cell import (
    ABSENT,
    Cell,
    Failed,
    InFlight,
    Pending,
    Props,
    Refreshing,
    Resolved,
)
from catalyst.reaction._group import dispatch, join, settle_carry_over

logger = logging.getLogger(__name__)


class Outcome(Enum):
    """How a pass ended, if it did."""

    RUNNING = auto()
    FAILED = auto()
    COMPLETED = auto()


def input_cells(inputs: Inputs) -> dict[str, Cell[Any]]:
    """Caller inputs as cells. None means absent."""
    return {
        name: ABSENT if value is None else Resolved(value)
        for name, value in inputs.items()
    }


class Reaction:
    """
    Stage executor for a single pass.

    Owns its props bag exclusively. Inputs are merged over engine cells
    on every dispatch, inputs winning.
    """

    __slots__ = ("_molecule", "_cells", "_inputs", "_stage", "_inflight", "_before", "_outcome")

    def __init__(
        self,
        molecule: Molecule,
        cells: Props | None = None,
        inputs: Inputs | None = None,
    ) -> None:
        self._molecule = tuple(molecule)
        self._cells: dict[str, Cell[Any]] = {
            name: ABSENT for group in self._molecule for name in group
        }
        if cells is not None:
            self._cells.update(cells)
        self._inputs: dict[str, Cell[Any]] = input_cells(inputs or {})
        self._stage = 0
        self._inflight: dict[str, InFlight[Any]] = {}
        self._before: dict[str, Cell[Any]] | None = None
        self._outcome = Outcome.RUNNING if self._molecule else Outcome.COMPLETED

    @property
    def stage(self) -> int:
        return self._stage

    @property
    def outcome(self) -> Outcome:
        return self._outcome

    @property
    def done(self) -> bool:
        return self._outcome is not Outcome.RUNNING

    @property
    def settling(self) -> bool:
        """A stage was dispatched and awaits settle()."""
        return self._before is not None

    @property
    def props(self) -> Props:
        """Read-only snapshot of the whole bag."""
        return MappingProxyType({**self._cells, **self._inputs})

    def carried(self) -> dict[str, Cell[Any]]:
        """
        Engine cells with the current dispatch rolled back.

        Seed for the next reaction. No abandoned operation leaks through.
        """
        cells = dict(self._cells)
        if self._before is not None:
            cells.update(self._before)
        return cells

    async def dispatch(self, inputs: Inputs) -> Props:
        """Start the current stage. Returns the in-flight snapshot."""
        if self.done or self.settling:
            raise RuntimeError(
                f"Cannot dispatch stage {self._stage}: "
                f"{'pass ended' if self.done else 'previous dispatch not settled'}"
            )

        group = self._molecule[self._stage]
        self._inputs = input_cells(inputs)
        merged = await settle_carry_over({**self._cells, **self._inputs}, group)
        for name in self._cells:
            if name not in self._inputs:
                self._cells[name] = merged[name]

        started = dispatch(group, merged)
        self._before = {name: self._cells.get(name, ABSENT) for name in group}
        self._inflight = {
            name: cell
            for name, cell in started.items()
            if isinstance(cell, (Pending, Refreshing))
        }
        self._cells.update(started)

        logger.debug("stage %d dispatched %d atom(s)", self._stage, len(self._inflight))
        return self.props

    async def settle(self) -> Props:
        """Wait for the current stage. Returns the settled snapshot."""
        if not self.settling:
            raise RuntimeError(f"Cannot settle stage {self._stage}: nothing dispatched")

        group = self._molecule[self._stage]
        self._cells.update(await join(self._inflight))
        self._inflight = {}
        self._before = None

        failed = [name for name in group if isinstance(self._cells[name], Failed)]
        if failed:
            # dependents can't run without these
            self._outcome = Outcome.FAILED
            logger.debug("stage %d failed: %s", self._stage, failed)
        elif self._stage == len(self._molecule) - 1:
            self._outcome = Outcome.COMPLETED
            logger.debug("stage %d settled, pass completed", self._stage)
        else:
            logger.debug("stage %d settled", self._stage)
            self._stage += 1

        return self.props


__all__ = ("Outcome", "Reaction", "input_cells")
