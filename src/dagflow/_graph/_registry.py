"""Registry of named node functions and their dependency edges."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from dagflow._errors import DuplicateNodeError, NotCallableError

from ._algorithms import count_incoming_edges, find_cycle, topological_sort
from ._node_spec import NodeKind, NodeSpec, derive_dependencies

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

logger = logging.getLogger(__name__)


class GraphRegistry:
    """Node definitions of a dataflow graph, indexed in both directions.

    The registry only grows: nodes can be added but never redefined or
    removed, and a node's upstream names are fixed when it is defined.

    The graph represents "depends on" relationships:
    - upstream("b") == ("a",) means "b depends on a"
    - downstream("a") == ("b",) means "a is depended on by b"

    Names that are referenced as dependencies but never defined are INPUT
    nodes: they only ever receive values set directly.
    """

    __slots__ = ("_downstream", "_specs")

    def __init__(self) -> None:
        self._specs: dict[str, NodeSpec] = {}
        self._downstream: dict[str, list[str]] = {}

    def define(self, name: str, fn: Callable[..., Any]) -> NodeSpec:
        """Register a node function under ``name``.

        Args:
            name: Unique node name.
            fn: The node function. Its upstream names are derived with
                :func:`derive_dependencies`.

        Returns:
            The registered NodeSpec.

        Raises:
            DuplicateNodeError: If ``name`` is already defined.
            NotCallableError: If ``fn`` is not callable.
            TypeError: If the dependencies of ``fn`` cannot be derived.

        """
        spec = self._prepare(name, fn)
        self._add(spec)
        return spec

    def define_all(self, nodes: Mapping[str, Callable[..., Any]]) -> list[NodeSpec]:
        """Register several node functions at once.

        Every entry is validated before any is registered, so a failing call
        leaves the registry unchanged.

        Raises:
            DuplicateNodeError: If a name is already defined.
            NotCallableError: If a value is not callable.
            TypeError: If the dependencies of a function cannot be derived.

        """
        specs = [self._prepare(name, fn) for name, fn in nodes.items()]
        for spec in specs:
            self._add(spec)
        return specs

    def _prepare(self, name: str, fn: Callable[..., Any]) -> NodeSpec:
        if name in self._specs:
            raise DuplicateNodeError(name)
        if not callable(fn):
            raise NotCallableError(name, fn)
        return NodeSpec(name=name, kind=NodeKind.FUNCTION, dependencies=derive_dependencies(fn), fn=fn)

    def _add(self, spec: NodeSpec) -> None:
        self._specs[spec.name] = spec
        for upstream_name in spec.dependencies:
            self._downstream.setdefault(upstream_name, []).append(spec.name)
        logger.debug("Defined node %r with dependencies %s", spec.name, spec.dependencies)

    def get(self, name: str) -> NodeSpec:
        """Get the spec of a node.

        Names that are only referenced as dependencies get an INPUT spec.

        Raises:
            KeyError: If the name is neither defined nor referenced.

        """
        if name in self._specs:
            return self._specs[name]
        if name in self._downstream:
            return NodeSpec(name=name, kind=NodeKind.INPUT)
        msg = f"Unknown node: {name!r}"
        raise KeyError(msg)

    @property
    def nodes(self) -> tuple[str, ...]:
        """Names of all defined function nodes, in definition order."""
        return tuple(self._specs)

    @property
    def inputs(self) -> tuple[str, ...]:
        """Names referenced as dependencies that have no node function."""
        return tuple(name for name in self._downstream if name not in self._specs)

    @property
    def outputs(self) -> tuple[str, ...]:
        """Names of defined nodes that nothing depends on."""
        return tuple(name for name in self._specs if not self._downstream.get(name))

    def upstream(self, name: str) -> tuple[str, ...]:
        """Get the upstream names of a node, in argument order.

        Returns an empty tuple for INPUT nodes and unknown names.
        """
        spec = self._specs.get(name)
        return spec.dependencies if spec is not None else ()

    def downstream(self, name: str) -> tuple[str, ...]:
        """Get the names of the nodes that depend directly on ``name``."""
        return tuple(self._downstream.get(name, ()))

    def function(self, name: str) -> Callable[..., Any] | None:
        """Get the node function of ``name``, or None for INPUT nodes."""
        spec = self._specs.get(name)
        return spec.fn if spec is not None else None

    def ancestors(self, name: str) -> frozenset[str]:
        """Get all transitive dependencies of a node."""
        visited: set[str] = set()
        stack = list(self.upstream(name))
        while stack:
            current = stack.pop()
            if current not in visited:
                visited.add(current)
                stack.extend(self.upstream(current))
        return frozenset(visited)

    def descendants(self, name: str) -> frozenset[str]:
        """Get all transitive dependents of a node."""
        visited: set[str] = set()
        stack = list(self._downstream.get(name, ()))
        while stack:
            current = stack.pop()
            if current not in visited:
                visited.add(current)
                stack.extend(self._downstream.get(current, ()))
        return frozenset(visited)

    def count_dirty(self, roots: Iterable[str]) -> dict[str, int]:
        """Count the unresolved dependencies of every node downstream of ``roots``.

        Only edges inside the subgraph reachable from ``roots`` are counted,
        so branches that are not activated never block a node.

        Raises:
            CycleDetectedError: If the reachable subgraph contains a cycle.

        """
        return count_incoming_edges(self._downstream, roots)

    def find_cycle(self, roots: Iterable[str] | None = None) -> tuple[str, ...] | None:
        """Find a dependency cycle reachable from ``roots`` (default: every name)."""
        if roots is None:
            roots = list(self._downstream)
        return find_cycle(self._downstream, roots)

    def topological_order(self) -> list[str]:
        """Return every name in topological order (dependencies before dependents).

        Raises:
            CycleDetectedError: If the graph contains a cycle.

        """
        successors: dict[str, list[str]] = {name: [] for name in self._specs}
        successors.update(self._downstream)
        return topological_sort(successors)

    def __len__(self) -> int:
        """Return the number of defined function nodes."""
        return len(self._specs)

    def __contains__(self, name: object) -> bool:
        """Check if a name is defined or referenced in the graph."""
        return name in self._specs or name in self._downstream
