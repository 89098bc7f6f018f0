"""
Atom group execution — one stage of a molecule.

Note: Uses combinators for error capture and joining instead of raw
try/except and asyncio.gather.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

from combinators import parallel as C_parallel, lift as L
from kungfu import Ok, Error

from catalyst._types import Atom, AtomGroup, Guarded
from catalyst.cell import (
    ABSENT,
    Cell,
    Failed,
    InFlight,
    Pending,
    Props,
    Refreshing,
    Resolved,
    Settled,
    known,
    settle,
)

_running: set[asyncio.Task[Settled[Any]]] = set()
"""Atom tasks not finished yet, abandoned or not. The loop only holds weak references."""


def outstanding() -> int:
    """Number of atom tasks still running."""
    return len(_running)


# ═══════════════════════════════════════════════════════════════════════════════
# to_cell() — Normalize an atom result
# ═══════════════════════════════════════════════════════════════════════════════


def to_cell(value: object) -> Settled[Any]:
    """
    Map what an atom produced onto a settled cell.

    None → Absent, Ok(v) → cell of v, Error(e) → Failed(e), else Resolved.
    """
    match value:
        case None:
            return ABSENT
        case Ok(inner):
            return to_cell(inner)
        case Error(error):
            return Failed(error)
        case _:
            return Resolved(value)


async def invoke(atom: Atom, props: Mapping[str, Any]) -> Settled[Any]:
    """Call an atom, capturing any exception as Failed."""
    result = await L.catching_async(lambda: atom(props), on_error=lambda e: e)
    match result:
        case Ok(value):
            return to_cell(value)
        case Error(error):
            return Failed(error)


# ═══════════════════════════════════════════════════════════════════════════════
# settle_carry_over() — Settle earlier stages
# ═══════════════════════════════════════════════════════════════════════════════


async def settle_carry_over(props: Props, owned: AtomGroup) -> dict[str, Cell[Any]]:
    """
    Settle refreshing cells from earlier stages.

    Pending cells without a previous value are left alone.
    """
    settled: dict[str, Cell[Any]] = dict(props)
    for name, cell in props.items():
        if name not in owned and isinstance(cell, Refreshing):
            settled[name] = await settle(cell)
    return settled


# ═══════════════════════════════════════════════════════════════════════════════
# dispatch() — Start a stage
# ═══════════════════════════════════════════════════════════════════════════════


def dispatch(group: AtomGroup, props: Props) -> dict[str, Cell[Any]]:
    """
    Start every atom of the group without waiting.

    Failed cells are never re-invoked. Guarded atoms with missing inputs
    are not invoked and become Absent. Each call runs as its own task so
    it completes even if nobody waits for it.
    """
    values = known(props)
    loop = asyncio.get_running_loop()
    cells: dict[str, Cell[Any]] = {}

    for name, atom in group.items():
        current = props.get(name, ABSENT)
        if isinstance(current, Failed):
            # don't re-request what already failed
            continue
        if isinstance(atom, Guarded) and not atom.ready(values):
            cells[name] = ABSENT
            continue

        future = loop.create_task(invoke(atom, values), name=f"atom:{name}")
        _running.add(future)
        future.add_done_callback(_running.discard)
        match current:
            case Resolved(previous):
                cells[name] = Refreshing(future, previous)
            case _:
                cells[name] = Pending(future)

    return cells


# ═══════════════════════════════════════════════════════════════════════════════
# join() — Wait for a stage
# ═══════════════════════════════════════════════════════════════════════════════


async def join(inflight: Mapping[str, InFlight[Any]]) -> dict[str, Settled[Any]]:
    """Wait for every in-flight cell of a stage."""
    if not inflight:
        return {}

    names = list(inflight)

    def make_op(cell: InFlight[Any]):
        """Wrap a running task into LazyCoroResult."""
        # shielded: an abandoned join must not cancel the atom itself
        return L.catching_async(
            lambda: asyncio.shield(cell.future), on_error=lambda e: e
        )

    joined = await C_parallel(*[make_op(inflight[name]) for name in names])

    match joined:
        case Ok(cells):
            return dict(zip(names, cells))
        case Error(error):
            # tasks capture their own errors, so this is the join itself failing
            return {name: Failed(error) for name in names}


__all__ = ("outstanding", "to_cell", "invoke", "settle_carry_over", "dispatch", "join")
