"""Tests for I/O serialization logic in dagflow._io."""

import tomllib
from datetime import date
from pathlib import Path

import pytest

import dagflow
from dagflow._errors import NodeExecutionError
from dagflow._io import _serialize_value, values_to_dict


class Point:
    def __repr__(self) -> str:
        return "Point(1, 2)"


class TestSerializeValue:
    def test_scalars_pass_through(self) -> None:
        assert _serialize_value(1) == 1
        assert _serialize_value(1.5) == 1.5
        assert _serialize_value("text") == "text"
        assert _serialize_value(True) is True
        assert _serialize_value(date(2024, 1, 2)) == date(2024, 1, 2)

    def test_containers(self) -> None:
        assert _serialize_value((1, 2)) == [1, 2]
        assert _serialize_value({"a": [1, (2, 3)]}) == {"a": [1, [2, 3]]}
        assert _serialize_value({1: "one"}) == {"1": "one"}

    def test_sets_are_sorted(self) -> None:
        assert _serialize_value({3, 1, 2}) == [1, 2, 3]

    def test_none_dropped_from_tables(self) -> None:
        assert _serialize_value({"a": 1, "b": None}) == {"a": 1}

    def test_other_objects_use_repr(self) -> None:
        assert _serialize_value(Point()) == "Point(1, 2)"
        assert _serialize_value([Point()]) == ["Point(1, 2)"]


class TestValuesToDict:
    def test_values_only(self) -> None:
        result = values_to_dict({"x": 1, "out": 3})
        assert result == {"values": {"x": 1, "out": 3}}

    def test_none_values_omitted(self) -> None:
        result = values_to_dict({"x": None, "y": 2})
        assert result == {"values": {"y": 2}}

    def test_errors_table(self) -> None:
        error = NodeExecutionError(node_name="checked", args=(-1, "a"), reason=ValueError("negative"))
        result = values_to_dict({"x": -1}, [error])

        assert result["errors"] == {
            "checked": {
                "args": ["-1", "'a'"],
                "reason": "ValueError('negative')",
            },
        }


class TestExportToToml:
    @pytest.mark.asyncio
    async def test_export(self, tmp_path: Path) -> None:
        def checked(x: int) -> int:
            if x < 0:
                msg = "negative"
                raise ValueError(msg)
            return x

        flow = dagflow.Dataflow({"checked": checked, "doubled": lambda x: [x, x]})
        await flow.set({"x": -2})

        output = tmp_path / "results" / "out.toml"
        dagflow.export_to_toml(flow, output)

        with output.open("rb") as f:
            data = tomllib.load(f)

        assert data["values"] == {"x": -2, "doubled": [-2, -2]}
        assert data["errors"]["checked"]["args"] == ["-2"]
        assert data["errors"]["checked"]["reason"] == "ValueError('negative')"


class TestLoadValuesFromToml:
    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "input.toml"
        path.write_text(
            """\
a = 6
name = "sensor"
ratios = [0.5, 0.25]

[limits]
low = 1
high = 10
""",
        )

        values = dagflow.load_values_from_toml(path)

        assert values == {
            "a": 6,
            "name": "sensor",
            "ratios": [0.5, 0.25],
            "limits": {"low": 1, "high": 10},
        }

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "input.toml"
        path.write_text("a = \n")

        with pytest.raises(tomllib.TOMLDecodeError):
            dagflow.load_values_from_toml(path)
