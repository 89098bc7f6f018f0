"""
Poll policy.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

DEFAULT_INTERVAL = timedelta(seconds=5)


@dataclass(frozen=True, slots=True)
class PollPolicy:
    """Delay before re-running a finished pass. None waits for input changes only."""
    interval: timedelta | None

    @property
    def seconds(self) -> float | None:
        return None if self.interval is None else self.interval.total_seconds()


def poll(seconds: float | None = None, duration: timedelta | None = None) -> PollPolicy:
    """
    Re-run the whole graph after a finished pass.

    Example:
        catalyze(molecule, policy=P.poll(seconds=30))
        catalyze(molecule, policy=P.poll(duration=timedelta(minutes=1)))
    """
    if duration is None:
        duration = DEFAULT_INTERVAL if seconds is None else timedelta(seconds=seconds)
    if duration < timedelta(0):
        raise ValueError(f"Poll interval must not be negative, got {duration}")
    return PollPolicy(duration)


def never() -> PollPolicy:
    """Only restart when inputs change."""
    return PollPolicy(None)


__all__ = ("DEFAULT_INTERVAL", "PollPolicy", "poll", "never")
