"""Dynamic Batching Example for dagflow.

A node function may set values on its own dataflow while it runs. The new
batch is queued and processed before the outer ``set()`` returns, which makes
it possible to drive feedback loops without a dependency cycle.

Here ``step`` halves the error of an estimate each time it changes, feeding
the improved estimate back in until it settles.
"""

import asyncio

import dagflow

flow = dagflow.Dataflow()


async def step(target: float, estimate: float) -> float:
    error = target - estimate
    if abs(error) > 0.01:
        await flow.set({"estimate": estimate + error / 2})
    return error


flow.define(
    {
        "step": step,
        "report": lambda step: f"error {step:+.3f}",
    },
)


async def main() -> None:
    await flow.set({"target": 10.0, "estimate": 0.0})
    # Every queued batch has been processed by now
    print(flow.values["estimate"], flow.values["report"])


if __name__ == "__main__":
    asyncio.run(main())
