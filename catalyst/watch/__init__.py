"""
Watch — background driver for a session.

    from catalyst import watch as W

    async with W.watch(molecule, inputs) as w:
        w.subscribe(print)
        await w.until(ChainReactionState.FINISHED)
"""

from catalyst.watch._watch import (
    Subscriber,
    Watch,
    watch,
)

__all__ = ("Subscriber", "Watch", "watch")
