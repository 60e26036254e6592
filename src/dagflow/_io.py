from __future__ import annotations

import logging
import tomllib
from datetime import date, datetime, time
from pathlib import Path
from typing import TYPE_CHECKING, Any

import tomli_w

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ._engine import Dataflow
    from ._errors import NodeExecutionError

logger = logging.getLogger(__name__)

_TOML_SCALARS = (str, int, float, bool, date, datetime, time)


def _serialize_value(value: Any) -> Any:
    """Recursively serialize a value for TOML export.

    Handles:
    - dict: Recursively serializes values (keys converted to str)
    - list/tuple/set: Recursively serializes items
    - TOML-native scalars: Returned as-is
    - Anything else: Converted with repr()

    None has no TOML representation; callers drop it before serializing.
    """
    if isinstance(value, _TOML_SCALARS):
        return value
    if isinstance(value, dict):
        return {str(k): _serialize_value(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_serialize_value(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return [_serialize_value(v) for v in sorted(value, key=repr)]
    return repr(value)


def values_to_dict(
    values: Mapping[str, Any],
    errors: Iterable[NodeExecutionError] = (),
) -> dict[str, Any]:
    """Convert settled node values and node failures into a TOML-ready dict.

    The result has a ``values`` table keyed by node name (None values are
    omitted) and, when any node failed, an ``errors`` table keyed by the
    failing node's name.
    """
    data: dict[str, Any] = {
        "values": {name: _serialize_value(value) for name, value in values.items() if value is not None},
    }

    error_table = {
        error.node_name: {
            "args": [repr(arg) for arg in error.args],
            "reason": repr(error.reason),
        }
        for error in errors
    }
    if error_table:
        data["errors"] = error_table

    return data


def export_to_toml(flow: Dataflow, output_path: Path | str) -> None:
    """Export the values and errors of a settled dataflow to a TOML file.

    Args:
        flow: The dataflow to export. Await its ``set()`` first.
        output_path: Path to the output TOML file

    """
    toml_data = values_to_dict(flow.values, flow.errors)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("wb") as f:
        tomli_w.dump(toml_data, f)

    logger.debug(f"Exported results to {output_path}")


def load_values_from_toml(input_path: Path | str) -> dict[str, Any]:
    """Load input values from a TOML file.

    Top-level keys are node names; values are used as parsed (TOML tables
    become dicts).

    Args:
        input_path: Path to the input TOML file

    Returns:
        A dictionary mapping node names to values, ready for ``Dataflow.set()``

    """
    input_path = Path(input_path)
    with input_path.open("rb") as f:
        values = tomllib.load(f)

    logger.debug(f"Loaded {len(values)} input value(s) from {input_path}")
    return values
