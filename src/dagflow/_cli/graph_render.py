"""Rich rendering utilities for dataflow commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from dagflow._graph import NodeKind

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from rich.console import Console

    from dagflow._errors import NodeExecutionError

    from .graph_query import NodeInfo, TreeNode

# Longest value representation shown in a table cell
_MAX_CELL_WIDTH = 60


def _truncate(text: str) -> str:
    if len(text) > _MAX_CELL_WIDTH:
        return text[: _MAX_CELL_WIDTH - 3] + "..."
    return text


def render_node_table(nodes: list[NodeInfo], console: Console) -> None:
    """Render node list as a Rich table.

    Args:
        nodes: List of NodeInfo to render.
        console: Rich Console to output to.

    """
    if not nodes:
        console.print("[dim]No nodes defined[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Node", style="bold")
    table.add_column("Kind")
    table.add_column("Upstream", style="dim")
    table.add_column("Downstream", style="dim")

    for node in nodes:
        kind_style = _get_kind_style(node.kind)
        table.add_row(
            escape(node.name),
            f"[{kind_style}]{node.kind.upper()}[/{kind_style}]",
            escape(", ".join(node.upstream)),
            escape(", ".join(node.downstream)),
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(nodes)} nodes[/dim]")


def build_values_table(values: Mapping[str, Any]) -> Table:
    """Build a Rich table of node values."""
    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("Node", style="bold")
    table.add_column("Value")

    for name, value in values.items():
        table.add_row(escape(name), escape(_truncate(repr(value))))

    return table


def render_errors_table(errors: Sequence[NodeExecutionError], console: Console) -> None:
    """Render node failures as a Rich table."""
    table = Table(show_header=True, header_style="bold red", box=None)
    table.add_column("Node", style="bold")
    table.add_column("Arguments", style="dim")
    table.add_column("Reason", style="red")

    for error in errors:
        table.add_row(
            escape(error.node_name),
            escape(_truncate(repr(error.args))),
            escape(_truncate(repr(error.reason))),
        )

    console.print(table)


def render_tree(tree_node: TreeNode, console: Console) -> None:
    """Render a dependency tree using Rich Tree.

    Args:
        tree_node: TreeNode root to render.
        console: Rich Console to output to.

    """
    rich_tree = Tree(f"[bold]{escape(tree_node.name)}[/bold]")
    _add_tree_children(rich_tree, tree_node.children)
    console.print(rich_tree)


def _add_tree_children(parent: Tree, children: list[TreeNode]) -> None:
    """Recursively add children to a Rich Tree.

    Args:
        parent: Parent Tree node to add children to.
        children: List of TreeNode children.

    """
    for child in children:
        child_tree = parent.add(escape(child.name))
        _add_tree_children(child_tree, child.children)


def _get_kind_style(kind: NodeKind) -> str:
    """Get Rich style string for a node kind."""
    match kind:
        case NodeKind.INPUT:
            return "blue"
        case NodeKind.FUNCTION:
            return "green"
