"""Exceptions and error records raised or collected by the dataflow engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable


class DataflowError(Exception):
    """Base class for structural errors of a dataflow graph.

    These reject the operation that triggered them. Failures raised by node
    functions are not of this kind: they are collected as
    :class:`NodeExecutionError` records instead.
    """


class DuplicateNodeError(DataflowError, ValueError):
    """A node name was defined twice."""

    def __init__(self, name: str) -> None:
        self.name = name
        msg = f"Node is already defined: {name!r}"
        super().__init__(msg)


class NotCallableError(DataflowError, TypeError):
    """A node was defined with something that cannot be called."""

    def __init__(self, name: str, value: object) -> None:
        self.name = name
        self.value = value
        msg = f"Node {name!r} is not callable: {value!r}"
        super().__init__(msg)


class CycleDetectedError(DataflowError):
    """The graph reachable from an update contains a directed cycle.

    Attributes:
        path: The names forming the cycle, starting and ending with the
            repeated name (e.g. ``("a", "b", "a")``).

    """

    def __init__(self, path: Iterable[Any]) -> None:
        self.path: tuple[Any, ...] = tuple(path)
        msg = "Cycle detected, consisting of nodes: " + " -> ".join(map(str, self.path))
        super().__init__(msg)


class PendingValueError(DataflowError, TypeError):
    """A value set directly on a node is still an unsettled awaitable."""

    def __init__(self, name: str, value: object) -> None:
        self.name = name
        self.value = value
        msg = f"Value of {name!r} cannot be an awaitable, got {type(value).__name__}"
        super().__init__(msg)


@dataclass(frozen=True, slots=True)
class NodeExecutionError:
    """Record of a node function that failed while the graph was propagating.

    Attributes:
        node_name: Name of the node whose function failed.
        args: The exact positional arguments the function was called with.
        reason: The exception it raised.

    """

    node_name: str
    args: tuple[Any, ...]
    reason: BaseException

    def __str__(self) -> str:
        return f"{self.node_name}{self.args!r}: {self.reason!r}"
