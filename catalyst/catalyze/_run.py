"""
Catalyst — repeated reactions with status, invalidation and polling.

The session owns the only suspension point callers see: advance().
"""

from __future__ import annotations

import asyncio
import logging

from catalyst._types import Inputs, Molecule
from catalyst.catalyze._types import ChainReactionState, ClosedError, Observation
from catalyst.catalyze.policy import PollPolicy, poll
from catalyst.reaction import Outcome, Reaction

logger = logging.getLogger(__name__)

_NO_INPUTS: Inputs = {}


class Catalyst:
    """
    Session controller over a molecule.

    Pull model: every advance() moves the graph one segment (a stage's
    dispatch or its settlement) and returns (state, props). The first
    call only starts the session.

    Input changes are detected by identity: pass a new mapping to
    signal a change, reuse the same one otherwise.

    Example:
        async with catalyze(molecule) as catalyst:
            inputs = {"project_id": "p1"}
            await catalyst.advance(inputs)
            state, props = await catalyst.advance(inputs)
    """

    __slots__ = (
        "_molecule",
        "_policy",
        "_reaction",
        "_state",
        "_inputs",
        "_seen",
        "_wake",
        "_closed",
        "_passes",
    )

    def __init__(self, molecule: Molecule, policy: PollPolicy | None = None) -> None:
        self._molecule = tuple(molecule)
        self._policy = policy if policy is not None else poll()
        self._reaction: Reaction | None = None
        self._state = ChainReactionState.EXECUTING
        self._inputs: Inputs = _NO_INPUTS
        self._seen: Inputs = _NO_INPUTS
        self._wake = asyncio.Event()
        self._closed = False
        self._passes = 0

    @property
    def state(self) -> ChainReactionState:
        return self._state

    @property
    def passes(self) -> int:
        """Completed passes."""
        return self._passes

    @property
    def closed(self) -> bool:
        return self._closed

    def update(self, inputs: Inputs) -> None:
        """Record new inputs. Wakes a poll delay or an error halt."""
        if inputs is self._inputs:
            return
        self._inputs = inputs
        self._wake.set()

    async def advance(self, inputs: Inputs | None = None) -> Observation:
        """Move one segment forward. None reuses the latest inputs."""
        self._ensure_open()
        if inputs is not None:
            self.update(inputs)

        if self._reaction is None:
            return self._start()

        changed = self._inputs is not self._seen
        self._seen = self._inputs

        match self._state:
            case ChainReactionState.ERROR:
                if not changed:
                    await self._sleep(None)
                # retry everything, failures included
                return self._invalidate(carry=False)
            case ChainReactionState.FINISHED:
                if not changed:
                    await self._sleep(self._policy.seconds)
                self._restart()
            case ChainReactionState.INVALIDATING:
                self._state = ChainReactionState.EXECUTING
            case ChainReactionState.EXECUTING if changed:
                return self._invalidate(carry=True)

        return await self._step()

    def close(self) -> None:
        """Release the session. Running atoms finish unobserved."""
        if self._closed:
            return
        self._closed = True
        self._reaction = None
        self._wake.set()

    async def __aenter__(self) -> Catalyst:
        return self

    async def __aexit__(self, *args: object) -> None:
        self.close()

    def __aiter__(self) -> Catalyst:
        return self

    async def __anext__(self) -> Observation:
        try:
            return await self.advance()
        except ClosedError:
            raise StopAsyncIteration from None

    # ───────────────────────────────────────────────────────────────────────────
    # Internals
    # ───────────────────────────────────────────────────────────────────────────

    def _ensure_open(self) -> None:
        if self._closed:
            raise ClosedError("Catalyst is closed")

    def _observe(self, reaction: Reaction) -> Observation:
        return Observation(self._state, reaction.props)

    def _start(self) -> Observation:
        self._seen = self._inputs
        self._reaction = Reaction(self._molecule, inputs=self._inputs)
        self._state = ChainReactionState.EXECUTING
        logger.debug("started session over %d stage(s)", len(self._molecule))
        return self._observe(self._reaction)

    def _restart(self) -> None:
        assert self._reaction is not None
        self._reaction = Reaction(
            self._molecule, self._reaction.carried(), inputs=self._inputs
        )
        self._state = ChainReactionState.EXECUTING
        logger.debug("restarting pass %d", self._passes + 1)

    def _invalidate(self, carry: bool) -> Observation:
        """Abandon the current reaction without waiting for its atoms."""
        assert self._reaction is not None
        cells = self._reaction.carried() if carry else None
        self._reaction = Reaction(self._molecule, cells, inputs=self._inputs)
        self._state = ChainReactionState.INVALIDATING
        logger.info("inputs changed, invalidating (carry=%s)", carry)
        return self._observe(self._reaction)

    async def _sleep(self, timeout: float | None) -> None:
        """Wait for an input change, or the timeout if given."""
        if self._inputs is self._seen:
            self._wake.clear()
            logger.debug("waiting for inputs (timeout=%s)", timeout)
            try:
                await asyncio.wait_for(self._wake.wait(), timeout)
            except TimeoutError:
                pass
        self._ensure_open()
        self._seen = self._inputs

    async def _settle(self, reaction: Reaction) -> bool:
        """
        Settle the current stage unless the inputs change first.

        Returns False when abandoned. The stage's atoms keep running.
        """
        settling = asyncio.ensure_future(reaction.settle())
        woken: asyncio.Future[object] | None = None
        try:
            while True:
                self._wake.clear()
                if self._inputs is not self._seen:
                    return False
                woken = asyncio.ensure_future(self._wake.wait())
                done, _ = await asyncio.wait(
                    {settling, woken}, return_when=asyncio.FIRST_COMPLETED
                )
                if settling in done:
                    settling.result()
                    return True
                self._ensure_open()
        finally:
            if woken is not None:
                woken.cancel()
            if not settling.done():
                settling.cancel()

    async def _step(self) -> Observation:
        reaction = self._reaction
        assert reaction is not None

        if reaction.done:
            # empty molecule
            self._state = ChainReactionState.FINISHED
            self._passes += 1
            return self._observe(reaction)

        if not reaction.settling:
            await reaction.dispatch(self._inputs)
            return self._observe(reaction)

        if not await self._settle(reaction):
            self._seen = self._inputs
            return self._invalidate(carry=True)

        match reaction.outcome:
            case Outcome.FAILED:
                self._state = ChainReactionState.ERROR
                logger.info("pass ended in error at stage %d", reaction.stage)
            case Outcome.COMPLETED:
                self._state = ChainReactionState.FINISHED
                self._passes += 1
        return self._observe(reaction)


def catalyze(molecule: Molecule, policy: PollPolicy | None = None) -> Catalyst:
    """
    Create a session over a molecule.

    Example:
        from catalyst import catalyze as K

        catalyst = K.catalyze(
            [
                {"workflow": fetch_workflow},
                {"design_space": fetch_space, "predictor": fetch_predictor},
            ],
            policy=K.policy.poll(seconds=10),
        )
    """
    return Catalyst(molecule, policy)


__all__ = ("Catalyst", "catalyze")
