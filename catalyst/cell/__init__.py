"""
Cell — the state of one named result in the props bag.

    from catalyst import cell as V

    match props["user"]:
        case V.Resolved(user): ...
        case V.Refreshing(_, previous): ...
        case V.Failed(error): ...

    V.resolved_value(props["user"])  # best-known value or None
"""

from catalyst.cell._types import (
    Absent,
    Resolved,
    Failed,
    Settled,
    Pending,
    Refreshing,
    InFlight,
    Cell,
    Props,
    ABSENT,
)
from catalyst.cell._query import (
    is_absent,
    is_pending,
    is_refreshing,
    is_resolved,
    is_failed,
    is_rejected,
    resolved_value,
    settle,
    known,
)

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
