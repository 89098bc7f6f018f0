"""
Catalyze — the session controller.

    from catalyst import catalyze as K

    catalyst = K.catalyze(molecule, policy=K.policy.poll(seconds=5))
    await catalyst.advance(inputs)          # starts the session
    state, props = await catalyst.advance(inputs)
"""

from catalyst.catalyze._types import (
    ChainReactionState,
    Observation,
    ClosedError,
)
from catalyst.catalyze._run import (
    Catalyst,
    catalyze,
)
from catalyst.catalyze import policy

__all__ = (
    "ChainReactionState",
    "Observation",
    "ClosedError",
    "Catalyst",
    "catalyze",
    "policy",
)
