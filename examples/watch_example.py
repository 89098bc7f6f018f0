"""
Watch — keep a graph fresh in the background.

Subscribers see every observation; updating the inputs abandons the
running pass and starts over.
"""

from catalyst import lift as L
from catalyst.catalyze import ChainReactionState, policy as P
from catalyst.watch import watch
from examples._infra import FakeApi, banner, describe, run

api = FakeApi(latency=0.02)

MOLECULE = [
    {
        "workflow": L.requires("workflow_id")(
            lambda props: api.get_workflow(props["workflow_id"])
        ),
    },
    {
        "design_space": L.requires("workflow")(
            lambda props: api.get_design_space(props["workflow"].design_space_id)
        ),
    },
]


async def main() -> None:
    banner("Watch: live inputs")

    async with watch(MOLECULE, {"workflow_id": "wf-1"}, policy=P.poll(seconds=1)) as w:
        w.subscribe(lambda o: print(f"  [{o.state}] {describe(o.props)}"))
        await w.until(ChainReactionState.FINISHED)

        print("\n  → switching to wf-2")
        w.update({"workflow_id": "wf-2"})
        await w.until(ChainReactionState.FINISHED)

        print("\n  → unknown workflow")
        w.update({"workflow_id": "wf-404"})
        await w.until(ChainReactionState.ERROR)


if __name__ == "__main__":
    run(main)
