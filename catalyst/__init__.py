"""
catalyst — staged fetch graphs that refresh themselves.

    from catalyst import cell as V       # Value cells and queries
    from catalyst import reaction as R   # One pass, stage by stage
    from catalyst import catalyze as K   # Sessions: status, invalidation, polling
    from catalyst import watch as W      # Background driver
"""

from catalyst import cell
from catalyst import reaction
from catalyst import catalyze
from catalyst import watch
from catalyst import lift
from catalyst._types import (
    Atom,
    AtomGroup,
    Molecule,
    Inputs,
    Guarded,
)
from catalyst.catalyze import (
    Catalyst,
    ChainReactionState,
    Observation,
    ClosedError,
)

__version__ = "0.1.0"

__all__ = (
    "cell",
    "reaction",
    "catalyze",
    "watch",
    "lift",
    "Atom",
    "AtomGroup",
    "Molecule",
    "Inputs",
    "Guarded",
    "Catalyst",
    "ChainReactionState",
    "Observation",
    "ClosedError",
)
