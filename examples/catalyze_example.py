"""
Catalyze — a staged fetch graph, driven by hand.

The workflow is fetched first; its design space and predictor are
fetched in parallel once it is known.

Level 3: catalyst.catalyze
Level 2: catalyst.reaction
Level 1: kungfu types
"""

from catalyst import lift as L
from catalyst.catalyze import ChainReactionState, catalyze, policy as P
from examples._infra import FakeApi, banner, describe, run

api = FakeApi()


@L.requires("workflow_id")
async def workflow(props):
    return await api.get_workflow(props["workflow_id"])


@L.requires("workflow")
async def design_space(props):
    return await api.get_design_space(props["workflow"].design_space_id)


@L.requires("workflow")
async def predictor(props):
    # Error(NotFound) becomes a failed cell, no exception needed
    return await api.get_predictor(props["workflow"].predictor_id)


MOLECULE = [
    {"workflow": workflow},
    {"design_space": design_space, "predictor": predictor},
]


async def main() -> None:
    banner("Catalyze: one pass")

    catalyst = catalyze(MOLECULE, policy=P.poll(seconds=0.2))
    inputs = {"workflow_id": "wf-1"}
    await catalyst.advance(inputs)

    while True:
        state, props = await catalyst.advance(inputs)
        print(f"  [{state}] {describe(props)}")
        if state is ChainReactionState.FINISHED:
            break

    banner("Catalyze: polling refresh")

    # Same inputs: after the poll delay everything refreshes
    for _ in range(4):
        state, props = await catalyst.advance(inputs)
        print(f"  [{state}] {describe(props)}")

    banner("Catalyze: failing predictor")

    inputs = {"workflow_id": "wf-2"}
    while True:
        state, props = await catalyst.advance(inputs)
        print(f"  [{state}] {describe(props)}")
        if state is ChainReactionState.ERROR:
            break

    catalyst.close()


if __name__ == "__main__":
    run(main)
