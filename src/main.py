"""
Command line for the family tree:

1) Import a GEDCOM file into a family tree (persons + relationship graph).
2) Validate the tree for cycles, impossible ages and date ordering.
3) Project the tree from a chosen root into a generational layout.
4) Render the layout with Graphviz.
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from adapter import VisualizationAdapter, to_chart_data
from errors import FamilyTreeError
from log import configure_logging
from parsing import load_gedcom
from plotting import PydotRenderer
from projection import project
from settings import load_log_level, load_settings
from validation import validate_snapshot

app = typer.Typer(
    name="famgraph",
    help="Family relationship graph and tree layout",
    add_completion=False,
)
console = Console()


def _load(gedcom: Path):
    try:
        configure_logging(load_log_level())
        result = load_gedcom(gedcom, load_settings())
    except FamilyTreeError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(1)
    console.print(
        f"Imported [bold]{len(result.tree)}[/bold] persons and "
        f"[bold]{result.tree.edge_count()}[/bold] relationships from {gedcom}"
    )
    for warning in result.warnings:
        console.print(f"  [yellow]- {warning}[/yellow]")
    return result.tree


@app.command()
def validate(gedcom: Path = typer.Argument(..., exists=True, help="GEDCOM file to import")):
    """Report data-quality warnings for a GEDCOM file."""
    tree = _load(gedcom)
    warnings = validate_snapshot(tree.snapshot())
    if not warnings:
        console.print("[green]No validation issues found[/green]")
        return

    console.print(f"Found {len(warnings)} validation warnings:")
    for w in warnings[:10]:
        console.print(f"  - {w}")
    if len(warnings) > 10:
        console.print(f"  ... and {len(warnings) - 10} more")


@app.command()
def layout(
    gedcom: Path = typer.Argument(..., exists=True, help="GEDCOM file to import"),
    root: str = typer.Option(..., "--root", "-r", help="Person id to root the tree on"),
    as_json: bool = typer.Option(False, "--json", help="Print family-chart JSON instead of a table"),
):
    """Print the projected layout of the tree rooted at ROOT."""
    tree = _load(gedcom)
    snapshot = tree.snapshot()
    try:
        result = project(snapshot, root, tree.settings)
    except FamilyTreeError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(to_chart_data(snapshot, result), indent=2))
        return

    table = Table(title=f"Tree rooted at {root}")
    table.add_column("Generation", justify="right")
    table.add_column("Person")
    table.add_column("Name")
    table.add_column("x", justify="right")
    table.add_column("y", justify="right")
    for n in result.nodes:
        table.add_row(str(n.generation), n.person_id, snapshot.persons[n.person_id].name, f"{n.x:g}", f"{n.y:g}")
    console.print(table)
    omitted = len(snapshot) - len(result.nodes)
    if omitted:
        console.print(f"[dim]{omitted} persons are not connected to {root}[/dim]")


@app.command()
def render(
    gedcom: Path = typer.Argument(..., exists=True, help="GEDCOM file to import"),
    root: str = typer.Option(..., "--root", "-r", help="Person id to root the tree on"),
    output: Path = typer.Option(None, "--output", "-o", help="PNG, SVG or PDF file; shown on screen if omitted"),
):
    """Render the tree rooted at ROOT with Graphviz."""
    tree = _load(gedcom)
    renderer = PydotRenderer()
    adapter = VisualizationAdapter(tree, renderer, container=output)
    try:
        view = adapter.publish(root)
    except FamilyTreeError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(1)

    written = renderer.write(view.surface)
    if written:
        console.print(f"Chart saved to {written}")


if __name__ == "__main__":
    app()
