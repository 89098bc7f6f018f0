"""
Reaction — the stage executor.

    from catalyst import reaction as R

    reaction = R.Reaction(molecule)
    pending = await reaction.dispatch({"project_id": "p1"})
    settled = await reaction.settle()
"""

from catalyst.reaction._group import (
    outstanding,
    to_cell,
    invoke,
    settle_carry_over,
    dispatch,
    join,
)
from catalyst.reaction._run import (
    Outcome,
    Reaction,
    input_cells,
)

__all__ = (
    "outstanding",
    "to_cell",
    "invoke",
    "settle_carry_over",
    "dispatch",
    "join",
    "Outcome",
    "Reaction",
    "input_cells",
)
