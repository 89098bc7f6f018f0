"""
Value cell — the five states of one named result.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

# ═══════════════════════════════════════════════════════════════════════════════
# Settled States
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Absent:
    """Required inputs missing, or the atom produced nothing."""


@dataclass(frozen=True, slots=True)
class Resolved[T]:
    """Atom completed successfully."""

    value: T


@dataclass(frozen=True, slots=True)
class Failed[E]:
    """Atom raised or returned an Error. The error is kept verbatim."""

    error: E


type Settled[T] = Absent | Resolved[T] | Failed[Any]


# ═══════════════════════════════════════════════════════════════════════════════
# In-flight States
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True, eq=False)
class Pending[T]:
    """Atom invoked, nothing known yet."""

    future: asyncio.Future[Settled[T]]


@dataclass(frozen=True, slots=True, eq=False)
class Refreshing[T]:
    """
    Atom re-invoked while a previous value is known.

    `previous` is dropped if the new invocation fails.
    """

    future: asyncio.Future[Settled[T]]
    previous: T


type InFlight[T] = Pending[T] | Refreshing[T]

type Cell[T] = Absent | Pending[T] | Refreshing[T] | Resolved[T] | Failed[Any]

type Props = Mapping[str, Cell[Any]]
"""The props bag: name → cell, inputs and outputs alike."""

ABSENT = Absent()


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Absent",
    "Resolved",
    "Failed",
    "Settled",
    "Pending",
    "Refreshing",
    "InFlight",
    "Cell",
    "Props",
    "ABSENT",
)
