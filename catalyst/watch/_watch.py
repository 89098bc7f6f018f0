"""
Watch — drive a Catalyst in the background and publish observations.

Framework-neutral stand-in for a UI binding: keep the latest
(state, props), notify subscribers, forward input changes.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from catalyst._types import Inputs, Molecule
from catalyst.catalyze import (
    Catalyst,
    ChainReactionState,
    Observation,
)
from catalyst.catalyze.policy import PollPolicy

logger = logging.getLogger(__name__)

type Subscriber = Callable[[Observation], None]


class Watch:
    """
    Background driver for one session.

    Example:
        async with watch(molecule, {"project_id": "p1"}) as w:
            w.subscribe(render)
            state, props = await w.until(ChainReactionState.FINISHED)
            w.update({"project_id": "p2"})
    """

    def __init__(
        self,
        molecule: Molecule,
        inputs: Inputs,
        policy: PollPolicy | None = None,
    ) -> None:
        self._policy = policy
        self._catalyst = Catalyst(molecule, policy)
        self._inputs = inputs
        self._subscribers: list[Subscriber] = []
        self._task: asyncio.Task[None] | None = None
        self._changed = asyncio.Condition()
        self._version = 0
        self._latest: Observation | None = None
        self._failure: Exception | None = None

    @property
    def latest(self) -> Observation:
        """Most recent observation."""
        if self._latest is None:
            raise RuntimeError("Watch not started")
        return self._latest

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def failure(self) -> Exception | None:
        """What stopped the driver, if it died."""
        return self._failure

    async def start(self) -> Watch:
        if self._task is not None:
            raise RuntimeError("Watch already started")
        self._failure = None
        self._latest = await self._catalyst.advance(self._inputs)
        self._task = asyncio.get_running_loop().create_task(self._drive(), name="catalyst:watch")
        return self

    def update(self, inputs: Inputs) -> None:
        """New inputs. The running pass is abandoned."""
        self._inputs = inputs
        self._catalyst.update(inputs)

    async def replace(self, molecule: Molecule) -> None:
        """
        Swap the molecule.

        The current session is dropped with all its cells and a new one
        starts with the latest inputs. Subscribers are kept.
        """
        await self._stop()
        self._catalyst = Catalyst(molecule, self._policy)
        logger.debug("molecule replaced")
        await self.start()

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        """Call fn on every observation. Returns an unsubscribe callable."""
        self._subscribers.append(fn)

        def unsubscribe() -> None:
            if fn in self._subscribers:
                self._subscribers.remove(fn)

        return unsubscribe

    async def until(self, *states: ChainReactionState) -> Observation:
        """
        Wait for the next observation in one of `states`.

        Raises RuntimeError if the driver dies first.
        """
        async with self._changed:
            after = self._version
            await self._changed.wait_for(
                lambda: self._failure is not None
                or (self._version > after and self.latest.state in states)
            )
            if self._failure is not None:
                raise RuntimeError("Watch driver failed") from self._failure
            return self.latest

    async def close(self) -> None:
        await self._stop()

    async def __aenter__(self) -> Watch:
        return await self.start()

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def _stop(self) -> None:
        self._catalyst.close()
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _drive(self) -> None:
        try:
            async for observation in self._catalyst:
                await self._publish(observation)
        except Exception as exc:
            logger.exception("watch driver failed")
            self._failure = exc
            async with self._changed:
                self._changed.notify_all()
            return
        logger.debug("watch stopped")

    async def _publish(self, observation: Observation) -> None:
        self._latest = observation
        for fn in list(self._subscribers):
            try:
                fn(observation)
            except Exception:
                logger.warning("subscriber %r raised", fn, exc_info=True)
        async with self._changed:
            self._version += 1
            self._changed.notify_all()


def watch(molecule: Molecule, inputs: Inputs, policy: PollPolicy | None = None) -> Watch:
    """Create a watch. Start it with `await w.start()` or `async with`."""
    return Watch(molecule, inputs, policy)


__all__ = ("Subscriber", "Watch", "watch")
