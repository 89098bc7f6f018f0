"""
Lift — helpers for building atoms.

    from catalyst import lift as L

    molecule = [
        {"workflow": L.requires("project_id", "workflow_id")(fetch_workflow)},
        {"predictor": L.requires("workflow")(fetch_predictor)},
    ]
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from kungfu import Result

from catalyst._types import Atom, Guarded


def requires(*names: str) -> Callable[[Atom], Guarded]:
    """
    Declare the inputs an atom cannot run without.

    While any is missing, the atom is not called and its cell stays Absent.
    """
    def wrap(atom: Atom) -> Guarded:
        if isinstance(atom, Guarded):
            return Guarded(atom.fn, (*atom.needs, *names))
        return Guarded(atom, names)
    return wrap


def from_sync[T](fn: Callable[[Mapping[str, Any]], T]) -> Atom:
    """Lift a plain function into an atom."""
    async def atom(props: Mapping[str, Any]) -> T:
        return fn(props)
    return atom


def from_result[T, E](fn: Callable[[Mapping[str, Any]], Result[T, E]]) -> Atom:
    """Lift a function returning a Result. Error(e) becomes a failed cell."""
    async def atom(props: Mapping[str, Any]) -> Result[T, E]:
        return fn(props)
    return atom


def pure[T](value: T) -> Atom:
    """Atom that always resolves to value."""
    async def atom(props: Mapping[str, Any]) -> T:
        return value
    return atom


def fail(error: Exception) -> Atom:
    """Atom that always raises error."""
    async def atom(props: Mapping[str, Any]) -> Any:
        raise error
    return atom


__all__ = (
    "requires",
    "from_sync",
    "from_result",
    "pure",
    "fail",
)
