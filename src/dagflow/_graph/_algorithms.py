"""Graph algorithms for dependency graph operations."""

from collections import defaultdict, deque
from collections.abc import Hashable, Iterable, Iterator, Mapping, Sequence
from typing import TypeVar

from dagflow._errors import CycleDetectedError

T = TypeVar("T", bound=Hashable)


def walk_edges(
    successors: Mapping[T, Sequence[T]],
    roots: Iterable[T],
) -> Iterator[tuple[T, T]]:
    """Walk every edge reachable from ``roots``, depth first.

    Each node's outgoing edges are expanded the first time the node is
    reached; later arrivals at the same node still yield the edge that led
    there, so every edge of the reachable subgraph is yielded exactly once.
    The walk keeps an explicit stack instead of recursing, so deep chains
    do not hit the interpreter recursion limit.

    Args:
        successors: Mapping from node to the nodes that depend on it.
        roots: Nodes to start from. Roots are not yielded as edge targets
            unless another reachable node leads to them.

    Yields:
        ``(source, target)`` pairs.

    Raises:
        CycleDetectedError: If an edge leads back to a node on the current
            path. The error carries the path from that node back to itself.

    """
    visited: set[T] = set()
    for root in roots:
        path: list[T] = [root]
        on_path: set[T] = {root}
        expand = root not in visited
        visited.add(root)
        stack: list[Iterator[T]] = [iter(successors.get(root, ())) if expand else iter(())]

        while stack:
            try:
                target = next(stack[-1])
            except StopIteration:
                stack.pop()
                on_path.discard(path.pop())
                continue

            source = path[-1]
            if target in on_path:
                start = path.index(target)
                raise CycleDetectedError([*path[start:], target])
            yield source, target

            if target not in visited:
                visited.add(target)
                path.append(target)
                on_path.add(target)
                stack.append(iter(successors.get(target, ())))


def count_incoming_edges(
    successors: Mapping[T, Sequence[T]],
    roots: Iterable[T],
) -> dict[T, int]:
    """Count, for every node reachable from ``roots``, its incoming edges in that subgraph.

    This is the in-degree restricted to the activated part of the graph, the
    readiness count used to release a node once all of its activated
    dependencies have settled.

    Example:
        >>> count_incoming_edges({"a": ["c"], "b": ["c"], "c": ["d"]}, ["a", "b"])
        {'c': 2, 'd': 1}

    Raises:
        CycleDetectedError: If the reachable subgraph contains a cycle.

    """
    counts: dict[T, int] = {}
    for _, target in walk_edges(successors, roots):
        counts[target] = counts.get(target, 0) + 1
    return counts


def find_cycle(
    successors: Mapping[T, Sequence[T]],
    roots: Iterable[T],
) -> tuple[T, ...] | None:
    """Find a directed cycle reachable from ``roots``.

    Returns:
        The cycle path (starting and ending with the same node), or None.

    """
    try:
        for _ in walk_edges(successors, roots):
            pass
    except CycleDetectedError as e:
        return e.path
    return None


def topological_sort(successors: Mapping[T, Sequence[T]]) -> list[T]:
    """Sort a graph topologically (dependencies before dependents).

    Given a graph represented as a mapping from nodes to their successors
    (nodes that depend on them), return nodes in an order where each node
    appears before all nodes that depend on it.

    Args:
        successors: Mapping from node to the nodes that depend on it.
            An edge (a -> b) means "b depends on a".

    Returns:
        List of nodes in topological order.

    Raises:
        CycleDetectedError: If the graph contains a cycle.

    Example:
        >>> # a -> b -> c means c depends on b, b depends on a
        >>> topological_sort({"a": ["b"], "b": ["c"], "c": []})
        ['a', 'b', 'c']

    """
    # Calculate in-degree for each node
    indegree: defaultdict[T, int] = defaultdict(int)
    for node, deps in successors.items():
        indegree[node] = indegree.get(node, 0)
        for dep in deps:
            indegree[dep] += 1

    # Start with nodes that have no predecessors (in-degree 0)
    queue = deque([node for node, deg in indegree.items() if deg == 0])
    order: list[T] = []

    while queue:
        node = queue.popleft()
        order.append(node)
        for successor in successors.get(node, ()):
            indegree[successor] -= 1
            if indegree[successor] == 0:
                queue.append(successor)

    if len(order) != len(indegree):
        ordered = set(order)
        remaining = [node for node in indegree if node not in ordered]
        raise CycleDetectedError(find_cycle(successors, remaining) or remaining)

    return order
