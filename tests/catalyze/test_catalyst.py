"""Tests for the session controller."""

import asyncio

import pytest

from catalyst import cell as V
from catalyst import lift as L
from catalyst.catalyze import ChainReactionState, ClosedError, catalyze
from catalyst.catalyze import policy as P

EXECUTING = ChainReactionState.EXECUTING
INVALIDATING = ChainReactionState.INVALIDATING
ERROR = ChainReactionState.ERROR
FINISHED = ChainReactionState.FINISHED


def chain():
    return [
        {"first": L.pure("first")},
        {
            "second": L.from_sync(lambda p: f"second {p['first']}" if "first" in p else None),
            "third": L.from_sync(lambda p: f"third {p['first']}" if "first" in p else None),
        },
    ]


async def drain(catalyst, inputs):
    """Advance until the state leaves EXECUTING."""
    observations = []
    while True:
        observation = await catalyst.advance(inputs)
        observations.append(observation)
        if observation.state is not EXECUTING:
            return observations


class TestPass:
    @pytest.mark.asyncio
    async def test_first_advance_only_starts(self, inputs):
        catalyst = catalyze(chain(), policy=P.never())
        state, props = await catalyst.advance(inputs)
        assert state is EXECUTING
        assert dict(props) == {
            "project_id": V.Resolved("hi"),
            "first": V.ABSENT,
            "second": V.ABSENT,
            "third": V.ABSENT,
        }

    @pytest.mark.asyncio
    async def test_pending_then_resolved_per_stage(self, inputs):
        catalyst = catalyze(chain(), policy=P.never())
        await catalyst.advance(inputs)

        state, props = await catalyst.advance(inputs)
        assert state is EXECUTING
        assert V.is_pending(props["first"])

        state, props = await catalyst.advance(inputs)
        assert state is EXECUTING
        assert props["first"] == V.Resolved("first")
        assert props["second"] == V.ABSENT

        state, props = await catalyst.advance(inputs)
        assert state is EXECUTING
        assert V.is_pending(props["second"])
        assert V.is_pending(props["third"])

        state, props = await catalyst.advance(inputs)
        assert state is FINISHED
        assert dict(props) == {
            "project_id": V.Resolved("hi"),
            "first": V.Resolved("first"),
            "second": V.Resolved("second first"),
            "third": V.Resolved("third first"),
        }
        assert catalyst.passes == 1

    @pytest.mark.asyncio
    async def test_two_observations_per_stage(self, inputs):
        catalyst = catalyze(chain(), policy=P.never())
        await catalyst.advance(inputs)
        observations = await drain(catalyst, inputs)
        assert len(observations) == 4
        assert observations[-1].state is FINISHED

    @pytest.mark.asyncio
    async def test_single_atom(self):
        catalyst = catalyze([{"a": L.pure("x")}], policy=P.never())
        inputs = {}
        await catalyst.advance(inputs)
        observations = await drain(catalyst, inputs)
        assert [o.state for o in observations] == [EXECUTING, FINISHED]
        assert dict(observations[-1].props) == {"a": V.Resolved("x")}

    @pytest.mark.asyncio
    async def test_empty_molecule_finishes(self):
        catalyst = catalyze([], policy=P.never())
        await catalyst.advance({})
        state, props = await catalyst.advance()
        assert state is FINISHED
        assert dict(props) == {}


class TestErrors:
    @pytest.mark.asyncio
    async def test_error_halts_and_skips_later_stages(self, fake_atom, inputs):
        boom = ValueError("boom")
        b = fake_atom("y")
        catalyst = catalyze([{"a": L.fail(boom)}, {"b": b}], policy=P.never())
        await catalyst.advance(inputs)

        observations = await drain(catalyst, inputs)
        state, props = observations[-1]
        assert state is ERROR
        assert props["a"] == V.Failed(boom)
        assert props["b"] == V.ABSENT
        assert b.calls == []

        with pytest.raises(TimeoutError):
            await asyncio.wait_for(catalyst.advance(inputs), 0.05)
        assert catalyst.state is ERROR

    @pytest.mark.asyncio
    async def test_input_change_retries_after_error(self, fake_atom, inputs):
        a = fake_atom(error=ValueError("boom"))
        catalyst = catalyze([{"a": a}], policy=P.never())
        await catalyst.advance(inputs)
        await drain(catalyst, inputs)

        changed = {"project_id": "changed"}
        state, props = await catalyst.advance(changed)
        assert state is INVALIDATING
        assert props["a"] == V.ABSENT

        state, props = await catalyst.advance(changed)
        assert state is EXECUTING
        assert V.is_pending(props["a"])
        assert not V.is_refreshing(props["a"])
        await asyncio.sleep(0.01)
        assert a.calls[-1] == {"project_id": "changed"}

    @pytest.mark.asyncio
    async def test_update_wakes_error_halt(self, inputs):
        catalyst = catalyze([{"a": L.fail(ValueError("boom"))}], policy=P.never())
        await catalyst.advance(inputs)
        await drain(catalyst, inputs)

        waiting = asyncio.create_task(catalyst.advance())
        await asyncio.sleep(0.01)
        assert not waiting.done()

        catalyst.update({"project_id": "changed"})
        state, _ = await waiting
        assert state is INVALIDATING


class TestInvalidation:
    @pytest.mark.asyncio
    async def test_change_mid_stage_abandons_operation(self, fake_atom, inputs):
        a = fake_atom(lambda props: props["project_id"], hold=True)
        catalyst = catalyze([{"a": a}], policy=P.never())
        await catalyst.advance(inputs)

        state, props = await catalyst.advance(inputs)
        assert state is EXECUTING
        assert V.is_pending(props["a"])

        changed = {"project_id": "changed"}
        state, props = await catalyst.advance(changed)
        assert state is INVALIDATING
        assert props["a"] == V.ABSENT

        state, props = await catalyst.advance(changed)
        assert state is EXECUTING
        assert V.is_pending(props["a"])
        await asyncio.sleep(0.01)
        assert a.calls == [{"project_id": "hi"}, {"project_id": "changed"}]

        a.release()
        state, props = await catalyst.advance(changed)
        assert state is FINISHED
        assert props["a"] == V.Resolved("changed")

    @pytest.mark.asyncio
    async def test_update_during_settlement_abandons_pass(self, fake_atom, inputs):
        a = fake_atom(lambda props: props["project_id"], hold=True)
        catalyst = catalyze([{"a": a}], policy=P.never())
        await catalyst.advance(inputs)
        await catalyst.advance(inputs)

        settling = asyncio.create_task(catalyst.advance(inputs))
        await asyncio.sleep(0.01)
        assert not settling.done()

        changed = {"project_id": "changed"}
        catalyst.update(changed)
        state, props = await asyncio.wait_for(settling, 1)
        assert state is INVALIDATING
        assert props["a"] == V.ABSENT
        assert props["project_id"] == V.Resolved("changed")

        state, props = await catalyst.advance(changed)
        assert state is EXECUTING
        assert V.is_pending(props["a"])

        a.release()
        state, props = await catalyst.advance(changed)
        assert state is FINISHED
        assert props["a"] == V.Resolved("changed")

        await asyncio.sleep(0.01)
        # the abandoned call ran to completion
        assert a.finished == 2

    @pytest.mark.asyncio
    async def test_change_after_stage_carries_values(self, inputs):
        catalyst = catalyze(chain(), policy=P.never())
        await catalyst.advance(inputs)
        await catalyst.advance(inputs)
        await catalyst.advance(inputs)

        changed = {"project_id": "changed"}
        state, props = await catalyst.advance(changed)
        assert state is INVALIDATING
        assert props["first"] == V.Resolved("first")
        assert props["project_id"] == V.Resolved("changed")

        state, props = await catalyst.advance(changed)
        assert state is EXECUTING
        assert V.is_refreshing(props["first"])
        assert props["first"].previous == "first"

    @pytest.mark.asyncio
    async def test_same_values_new_reference_is_a_change(self, inputs):
        catalyst = catalyze(chain(), policy=P.never())
        await catalyst.advance(inputs)
        await catalyst.advance(inputs)

        state, _ = await catalyst.advance(dict(inputs))
        assert state is INVALIDATING


class TestPolling:
    @pytest.mark.asyncio
    async def test_restarts_with_refreshing_cells(self, inputs):
        catalyst = catalyze(chain(), policy=P.poll(seconds=0))
        await catalyst.advance(inputs)
        await drain(catalyst, inputs)

        state, props = await catalyst.advance(inputs)
        assert state is EXECUTING
        assert V.is_refreshing(props["first"])
        assert props["first"].previous == "first"
        assert props["second"] == V.Resolved("second first")

        state, props = await catalyst.advance(inputs)
        assert props["first"] == V.Resolved("first")

        state, props = await catalyst.advance(inputs)
        assert V.is_refreshing(props["second"])
        assert V.is_refreshing(props["third"])

        state, props = await catalyst.advance(inputs)
        assert state is FINISHED
        assert props["second"] == V.Resolved("second first")
        assert catalyst.passes == 2

    @pytest.mark.asyncio
    async def test_waits_for_interval(self, inputs):
        catalyst = catalyze([{"a": L.pure("x")}], policy=P.poll(seconds=10))
        await catalyst.advance(inputs)
        await drain(catalyst, inputs)

        with pytest.raises(TimeoutError):
            await asyncio.wait_for(catalyst.advance(inputs), 0.05)

    @pytest.mark.asyncio
    async def test_input_change_skips_delay(self, fake_atom, inputs):
        a = fake_atom(lambda props: props["project_id"])
        catalyst = catalyze([{"a": a}], policy=P.poll(seconds=10))
        await catalyst.advance(inputs)
        await drain(catalyst, inputs)

        waiting = asyncio.create_task(catalyst.advance())
        await asyncio.sleep(0.01)
        catalyst.update({"project_id": "changed"})

        state, props = await waiting
        assert state is EXECUTING
        assert V.is_refreshing(props["a"])
        await asyncio.sleep(0.01)
        assert a.calls[-1] == {"project_id": "changed", "a": "hi"}

    @pytest.mark.asyncio
    async def test_absent_until_dependency_resolves(self):
        molecule = [
            {"a": L.pure("x")},
            {"b": L.from_sync(lambda p: "y" if "a" in p else None)},
        ]
        catalyst = catalyze(molecule, policy=P.never())
        first = {}
        await catalyst.advance(first)
        observations = await drain(catalyst, first)
        assert [o.props["b"] for o in observations[:2]] == [V.ABSENT, V.ABSENT]
        assert observations[-1].props["b"] == V.Resolved("y")

        second = {"k": 1}
        observations = await drain(catalyst, second)
        assert observations[-1].state is FINISHED
        assert observations[-1].props["b"] == V.Resolved("y")
        assert observations[-1].props["k"] == V.Resolved(1)


class TestRelease:
    @pytest.mark.asyncio
    async def test_advance_after_close(self, inputs):
        catalyst = catalyze(chain())
        await catalyst.advance(inputs)
        catalyst.close()
        assert catalyst.closed
        with pytest.raises(ClosedError):
            await catalyst.advance(inputs)

    @pytest.mark.asyncio
    async def test_close_wakes_waiting_advance(self, inputs):
        catalyst = catalyze([{"a": L.pure("x")}], policy=P.never())
        await catalyst.advance(inputs)
        await drain(catalyst, inputs)

        waiting = asyncio.create_task(catalyst.advance())
        await asyncio.sleep(0.01)
        catalyst.close()
        with pytest.raises(ClosedError):
            await waiting

    @pytest.mark.asyncio
    async def test_iteration_stops_when_closed(self, inputs):
        states = []
        async with catalyze(chain(), policy=P.never()) as catalyst:
            catalyst.update(inputs)
            async for state, _ in catalyst:
                states.append(state)
                if state is FINISHED:
                    catalyst.close()
        assert states == [EXECUTING] * 4 + [FINISHED]
