"""Power Budget Example for dagflow.

This example demonstrates a small satellite power budget:
- Async node functions standing in for slow lookups (e.g. a database)
- Explicit dependency declaration with ``dagflow.depends``
- Memoization: changing an input only re-runs the nodes downstream of it

Run it directly, or through the CLI:
    dagflow run examples/power_budget.py --set battery_capacity=120 --set cell_type=gaas \\
        --set solar_panel_area=1.5 --set "consumers={\\"obc\\": 4.0, \\"comms\\": 12.5}"
"""

import asyncio
import logging

import dagflow

# Solar flux at 1 AU in W/m^2
SOLAR_CONSTANT = 1361.0

# Efficiency lookup by cell technology
CELL_EFFICIENCY = {
    "si": 0.18,
    "gaas": 0.28,
}


async def efficiency(cell_type: str | None) -> float:
    # Pretend this is a slow lookup
    await asyncio.sleep(0.1)
    return CELL_EFFICIENCY[cell_type or "gaas"]


def generation(solar_panel_area: float, efficiency: float) -> float:
    """Peak generated power in W."""
    return solar_panel_area * SOLAR_CONSTANT * efficiency


@dagflow.depends("consumers")
def consumption(loads: dict[str, float]) -> float:
    """Total power drawn by all consumers in W."""
    return sum(loads.values())


def margin(generation: float, consumption: float) -> float:
    return generation - consumption


def eclipse_hours(battery_capacity: float, consumption: float) -> float:
    """Hours the battery can supply every consumer without sunlight."""
    return battery_capacity / consumption


flow = dagflow.Dataflow(
    {
        "efficiency": efficiency,
        "generation": generation,
        "consumption": consumption,
        "margin": margin,
        "eclipse_hours": eclipse_hours,
    },
    is_equal=dagflow.equal,
)


async def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    await flow.set(
        {
            "cell_type": "gaas",
            "solar_panel_area": 0.5,
            "battery_capacity": 120.0,
            "consumers": {"obc": 4.0, "comms": 12.5, "adcs": 6.0},
        },
    )
    print(f"margin = {flow.values['margin']:.1f} W")

    # Only consumption and its dependents re-run; efficiency is not looked up again
    await flow.set({"consumers": {"obc": 4.0, "comms": 25.0, "adcs": 6.0}})
    print(f"margin = {flow.values['margin']:.1f} W")
    print(f"eclipse = {flow.values['eclipse_hours']:.2f} h")


if __name__ == "__main__":
    asyncio.run(main())
