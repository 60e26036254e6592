"""Incremental dataflow engine for graphs of async functions."""

__all__ = [
    "ConfigError",
    "CycleDetectedError",
    "Dataflow",
    "DataflowError",
    "DataflowSettings",
    "DuplicateNodeError",
    "GraphRegistry",
    "NodeExecutionError",
    "NodeKind",
    "NodeSpec",
    "NotCallableError",
    "PendingValueError",
    "depends",
    "equal",
    "export_to_toml",
    "get_config",
    "load_config",
    "load_values_from_toml",
    "same_value",
]

from ._config import ConfigError, DataflowSettings, get_config, load_config
from ._decorators import depends
from ._engine import Dataflow
from ._equality import equal, same_value
from ._errors import (
    CycleDetectedError,
    DataflowError,
    DuplicateNodeError,
    NodeExecutionError,
    NotCallableError,
    PendingValueError,
)
from ._graph import GraphRegistry, NodeKind, NodeSpec
from ._io import export_to_toml, load_values_from_toml
