"""Smoke tests for the example dataflows."""

from pathlib import Path

import pytest

from dagflow._cli.discover import load_flow_from_script

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"


@pytest.mark.asyncio
async def test_arithmetic() -> None:
    flow = load_flow_from_script(EXAMPLES_DIR / "arithmetic.py")
    await flow.set({"a": 6, "b": 7, "c": 8})
    assert await flow.get("out") == 28


@pytest.mark.asyncio
async def test_power_budget() -> None:
    flow = load_flow_from_script(EXAMPLES_DIR / "power_budget.py", "flow")
    await flow.set(
        {
            "cell_type": "si",
            "solar_panel_area": 1.0,
            "battery_capacity": 100.0,
            "consumers": {"obc": 10.0, "comms": 15.0},
        },
    )

    assert flow.values["consumption"] == 25.0
    assert flow.values["eclipse_hours"] == 4.0
    assert flow.values["margin"] == pytest.approx(1361.0 * 0.18 - 25.0)
    assert flow.errors == ()


@pytest.mark.asyncio
async def test_dynamic_batching() -> None:
    flow = load_flow_from_script(EXAMPLES_DIR / "dynamic_batching.py")
    await flow.set({"target": 1.0, "estimate": 0.0})

    assert flow.values["estimate"] == pytest.approx(1.0, abs=0.01)
    assert abs(flow.values["step"]) <= 0.01
