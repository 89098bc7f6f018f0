"""
Session policies.

Namespace: P.*

Examples:
    from catalyst.catalyze import policy as P

    catalyze(molecule, policy=P.poll(seconds=10))
    catalyze(molecule, policy=P.never())
"""

from __future__ import annotations

from catalyst.catalyze.policy._poll import (
    DEFAULT_INTERVAL,
    PollPolicy,
    poll,
    never,
)

__all__ = (
    "DEFAULT_INTERVAL",
    "PollPolicy",
    "poll",
    "never",
)
