"""
Core types for catalyst.

Re-exports from kungfu + the shapes of atoms and molecules.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Atoms
# ═══════════════════════════════════════════════════════════════════════════════

type Atom = Callable[[Mapping[str, Any]], Awaitable[Any]]
"""
A single named fetch.

Receives the best-known values of the props bag, returns an awaitable of
the value, `None` (absent) or a kungfu `Result`.
"""

type AtomGroup = Mapping[str, Atom]
"""Atoms that run concurrently (one stage)."""

type Molecule = Sequence[AtomGroup]
"""Ordered stages. Stage i+1 may read anything stages 0..i produced."""

type Inputs = Mapping[str, Any]
"""Caller-supplied values. Compared by identity, never by value."""


@dataclass(frozen=True, slots=True)
class Guarded:
    """
    Atom with declared required inputs.

    The executor skips the call (cell stays Absent) while any of
    `needs` has no known value.
    """

    fn: Atom
    needs: tuple[str, ...]

    def __call__(self, props: Mapping[str, Any]) -> Awaitable[Any]:
        return self.fn(props)

    def ready(self, props: Mapping[str, Any]) -> bool:
        return all(name in props for name in self.needs)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Graph shapes
    "Atom",
    "AtomGroup",
    "Molecule",
    "Inputs",
    "Guarded",
)
