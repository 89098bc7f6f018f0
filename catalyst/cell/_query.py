"""
Queries over cells and props bags.
"""

from __future__ import annotations

import asyncio
from typing import Any

from catalyst.cell._types import (
    Absent,
    Cell,
    Failed,
    Pending,
    Props,
    Refreshing,
    Resolved,
    Settled,
)


def is_absent(cell: Cell[Any]) -> bool:
    return isinstance(cell, Absent)


def is_pending(cell: Cell[Any]) -> bool:
    """In flight: pending or refreshing."""
    return isinstance(cell, (Pending, Refreshing))


def is_refreshing(cell: Cell[Any]) -> bool:
    """In flight with a previously resolved value."""
    return isinstance(cell, Refreshing)


def is_resolved(cell: Cell[Any]) -> bool:
    """A value is known: resolved, or refreshing with a previous value."""
    return isinstance(cell, (Resolved, Refreshing))


def is_failed(cell: Cell[Any]) -> bool:
    return isinstance(cell, Failed)


is_rejected = is_failed


def resolved_value[T](cell: Cell[T]) -> T | None:
    """
    Best-known value of a cell.

    Previous value while refreshing, the value once resolved,
    None while pending, absent or failed.
    """
    match cell:
        case Resolved(value):
            return value
        case Refreshing(_, previous):
            return previous
        case _:
            return None


async def settle[T](cell: Cell[T]) -> Cell[T]:
    """Wait for an in-flight cell. Settled cells are returned as-is."""
    match cell:
        case Pending(future) | Refreshing(future, _):
            # the task may be shared with an abandoned pass
            settled: Settled[T] = await asyncio.shield(future)
            return settled
        case _:
            return cell


def known(props: Props) -> dict[str, Any]:
    """Plain name → value mapping of everything with a best-known value."""
    values: dict[str, Any] = {}
    for name, cell in props.items():
        value = resolved_value(cell)
        if value is not None:
            values[name] = value
    return values


__all__ = (
    "is_absent",
    "is_pending",
    "is_refreshing",
    "is_resolved",
    "is_failed",
    "is_rejected",
    "resolved_value",
    "settle",
    "known",
)
