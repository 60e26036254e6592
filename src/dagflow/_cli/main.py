import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from dagflow._config import ConfigError, get_config
from dagflow._engine import Dataflow
from dagflow._errors import DataflowError
from dagflow._io import export_to_toml, load_values_from_toml

from .discover import load_flow
from .graph_query import get_dependency_tree, list_nodes
from .graph_render import build_values_table, render_errors_table, render_node_table, render_tree

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()

PathArgument = Annotated[
    str | None,
    typer.Argument(
        help="Path to Python script or module path (e.g., examples.arithmetic:flow). "
        "Defaults to the graph configured in pyproject.toml",
    ),
]
FlowOption = Annotated[
    str | None,
    typer.Option("--flow", help="Name of the dataflow variable (for script paths only)"),
]


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Dagflow CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _load(path: str | None, flow_var: str | None) -> Dataflow:
    """Load the dataflow named on the command line, or the configured one."""
    if path is None:
        try:
            settings = get_config()
        except ConfigError as e:
            err_console.print(f"[red]{escape(str(e))}[/red]")
            raise typer.Exit(code=2) from e
        if settings.graph is None:
            err_console.print("[red]No dataflow given and no \\[tool.dagflow].graph configured[/red]")
            raise typer.Exit(code=2)
        path = settings.graph
        if settings.project_root is not None and str(settings.project_root) not in sys.path:
            # Configured module paths are relative to the project root
            sys.path.insert(0, str(settings.project_root))

    err_console.print(f"[cyan]Loading dataflow from:[/cyan] {escape(path)}")
    try:
        flow = load_flow(path, flow_var)
    except (ImportError, ValueError, TypeError) as e:
        err_console.print(f"[red]✗ Could not load dataflow: {escape(str(e))}[/red]")
        raise typer.Exit(code=2) from e
    err_console.print(f"[cyan]Nodes:[/cyan] [bold]{len(flow.nodes)}[/bold] functions, {len(flow.inputs)} inputs")
    err_console.print()
    return flow


def _parse_assignment(assignment: str) -> tuple[str, Any]:
    """Parse a ``name=value`` assignment; the value is read as JSON if possible."""
    name, sep, raw = assignment.partition("=")
    if not sep or not name:
        msg = f"Expected NAME=VALUE, got {assignment!r}"
        raise typer.BadParameter(msg, param_hint="--set")
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return name.strip(), value


@app.command()
def run(
    path: PathArgument = None,
    *,
    flow_var: FlowOption = None,
    input: Annotated[  # noqa: A002
        Path | None,
        typer.Option("-i", "--input", help="Path to input TOML file with node values"),
    ] = None,
    assignments: Annotated[
        list[str] | None,
        typer.Option("--set", "-s", help="Node value as NAME=VALUE (VALUE parsed as JSON)"),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Path to output TOML file"),
    ] = None,
) -> None:
    """Set input values on a dataflow and show the settled values."""
    err_console.print()
    flow = _load(path, flow_var)

    update: dict[str, Any] = {}
    if input is not None:
        err_console.print(f"[cyan]Loading input from:[/cyan] {input}")
        update.update(load_values_from_toml(input))
    for assignment in assignments or []:
        name, value = _parse_assignment(assignment)
        update[name] = value

    err_console.print("[cyan]Propagating...[/cyan]")
    try:
        asyncio.run(flow.set(update))
    except DataflowError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
    err_console.print()

    out_console.print(Panel(build_values_table(flow.values), title="[bold]Values[/bold]", border_style="cyan"))

    if flow.errors:
        err_console.print()
        render_errors_table(flow.errors, err_console)
        err_console.print()
        err_console.print(f"[red]✗ {len(flow.errors)} node(s) failed[/red]")

    if output is not None:
        err_console.print(f"[cyan]Exporting results to:[/cyan] {output}")
        export_to_toml(flow, output)

    err_console.print()
    if flow.errors:
        raise typer.Exit(code=1)
    err_console.print("[green]✓ Propagation complete[/green]")
    err_console.print()


@app.command()
def check(
    path: PathArgument = None,
    *,
    flow_var: FlowOption = None,
) -> None:
    """Check a dataflow for dependency cycles and list its nodes, outputs and evaluation order."""
    err_console.print()
    flow = _load(path, flow_var)

    render_node_table(list_nodes(flow), out_console)
    out_console.print()

    err_console.print("[cyan]Validating dependencies...[/cyan]")
    cycle = flow.registry.find_cycle()
    if cycle is not None:
        err_console.print(f"[red]✗ Cycle detected: {escape(' -> '.join(cycle))}[/red]")
        raise typer.Exit(code=1)

    err_console.print("[green]✓ Dataflow is acyclic[/green]")
    err_console.print()

    order = flow.registry.topological_order()
    out_console.print(f"[cyan]Evaluation order:[/cyan] {escape(' -> '.join(order))}")
    outputs = flow.registry.outputs
    out_console.print(f"[cyan]Outputs:[/cyan] {escape(', '.join(outputs)) if outputs else '[dim]none[/dim]'}")


@app.command()
def tree(
    name: Annotated[str, typer.Argument(help="Name of the node at the root of the tree")],
    path: PathArgument = None,
    *,
    flow_var: FlowOption = None,
    dependents: Annotated[
        bool,
        typer.Option("--dependents", help="Show what depends on the node instead of its dependencies"),
    ] = False,
    depth: Annotated[
        int | None,
        typer.Option("--depth", min=1, help="Maximum depth to display"),
    ] = None,
) -> None:
    """Show the dependencies (or dependents) of a node as a tree."""
    err_console.print()
    flow = _load(path, flow_var)

    try:
        tree_node = get_dependency_tree(flow, name, invert=dependents, max_depth=depth)
    except KeyError as e:
        err_console.print(f"[red]✗ {escape(str(e.args[0]))}[/red]")
        raise typer.Exit(code=1) from e

    render_tree(tree_node, out_console)

    related = flow.registry.descendants(name) if dependents else flow.registry.ancestors(name)
    label = "dependents" if dependents else "dependencies"
    out_console.print(f"\n[dim]Total: {len(related)} transitive {label}[/dim]")


def main() -> None:
    app()
