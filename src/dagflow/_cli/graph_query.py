"""Query functions backing the graph inspection commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from dagflow._graph import NodeKind

if TYPE_CHECKING:
    from dagflow._engine import Dataflow


@dataclass(frozen=True, slots=True)
class NodeInfo:
    """Summary of a single node for listing."""

    name: str
    kind: NodeKind
    upstream: tuple[str, ...]
    downstream: tuple[str, ...]


@dataclass
class TreeNode:
    """A node in a dependency tree for rendering."""

    name: str
    children: list[TreeNode]


def list_nodes(flow: Dataflow, *, kind: NodeKind | None = None) -> list[NodeInfo]:
    """List the nodes of a dataflow, inputs first, then functions in definition order.

    Args:
        flow: The Dataflow to inspect.
        kind: Only include nodes of this kind.

    Returns:
        List of NodeInfo.

    """
    infos = [
        NodeInfo(
            name=name,
            kind=flow.node(name).kind,
            upstream=flow.upstream(name),
            downstream=flow.downstream(name),
        )
        for name in (*flow.inputs, *flow.nodes)
    ]
    if kind is not None:
        infos = [info for info in infos if info.kind == kind]
    return infos


def get_dependency_tree(
    flow: Dataflow,
    name: str,
    *,
    invert: bool = False,
    max_depth: int | None = None,
) -> TreeNode:
    """Build a dependency tree for visualization.

    Args:
        flow: The Dataflow containing the node.
        name: The root node of the tree.
        invert: If False, show what the node depends on.
                If True, show what depends on the node (reverse dependencies).
        max_depth: Maximum depth to traverse (None for unlimited).

    Returns:
        TreeNode representing the dependency tree.

    Raises:
        KeyError: If the node is not found.

    """
    if name not in flow.registry:
        msg = f"Node not found: {name}"
        raise KeyError(msg)

    def build_tree(node_name: str, depth: int, visited: set[str]) -> TreeNode:
        children: list[TreeNode] = []

        if max_depth is not None and depth >= max_depth:
            return TreeNode(name=node_name, children=children)

        neighbors = flow.downstream(node_name) if invert else flow.upstream(node_name)

        # Argument order is meaningful for upstream names; keep it
        for neighbor in dict.fromkeys(neighbors):
            if neighbor not in visited:
                visited.add(neighbor)
                children.append(build_tree(neighbor, depth + 1, visited))

        return TreeNode(name=node_name, children=children)

    return build_tree(name, 0, {name})
