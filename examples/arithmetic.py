"""Arithmetic Example for dagflow.

A small chain of dependent calculations. Node functions name their inputs by
parameter name, so ``out`` is recomputed whenever ``a``, ``d`` or ``e`` change.

Run it with the CLI:
    dagflow run examples/arithmetic.py --set a=6 --set b=7 --set c=8
    dagflow run examples/arithmetic.py -i examples/inputs/arithmetic.toml -o results.toml
    dagflow tree out examples/arithmetic.py
"""

import asyncio

import dagflow


def difference(a: float, b: float) -> float:
    return a - b


def excess(a: float, b: float, c: float) -> float:
    return a * b - c


def ratio(a: float, e: float, d: float) -> float:
    return (a - e) / d


flow = dagflow.Dataflow(
    {
        "d": difference,
        "e": excess,
        "out": ratio,
    },
)


async def main() -> None:
    await flow.set({"a": 6, "b": 7, "c": 8})
    print(f"out = {await flow.get('out')}")  # out = 28.0

    # d becomes zero: ratio fails, but d and e still update
    await flow.set({"b": 6, "c": 1})
    for error in flow.errors:
        print(f"failed: {error}")
    print(dict(flow.values))


if __name__ == "__main__":
    asyncio.run(main())
