# ABOUTME: The `shelfkeeper graph` command for laying out the relationship graph.
# ABOUTME: Runs the force layout to rest and prints node positions as a table or JSON.

import json as json_lib
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from shelfkeeper.cli.feedback import reported_errors
from shelfkeeper.cli.options import db_option, library_session
from shelfkeeper.db.catalog import LibraryCatalog
from shelfkeeper.db.roster import StudentRoster
from shelfkeeper.graph.builder import load_graph
from shelfkeeper.graph.layout import DEFAULT_HEIGHT, DEFAULT_WIDTH
from shelfkeeper.graph.scheduler import Frame, Hover, LayoutScheduler

console = Console()


@click.command("graph")
@click.option("--ticks", type=int, default=300, show_default=True,
              help="Maximum layout steps to run.")
@click.option("--width", type=float, default=DEFAULT_WIDTH, show_default=True)
@click.option("--height", type=float, default=DEFAULT_HEIGHT, show_default=True)
@click.option("--hover", "hover_id", default=None,
              help="Highlight a node id (e.g. book-3) and show its tooltip.")
@click.option("--json", "json_output", is_flag=True, default=False,
              help="Output the final frame as JSON.")
@db_option
def graph(
    ticks: int,
    width: float,
    height: float,
    hover_id: str | None,
    json_output: bool,
    db_path: Path | None,
) -> None:
    """Lay out books, authors, categories, and borrowers as a graph."""
    with reported_errors(console), library_session(db_path) as conn:
        library_graph = load_graph(LibraryCatalog(conn), StudentRoster(conn))

    if hover_id is not None and library_graph.get(hover_id) is None:
        console.print(f"[red]Not found: no graph node '{hover_id}'.[/red]")
        raise SystemExit(1)

    scheduler = LayoutScheduler(library_graph, width=width, height=height)
    try:
        if hover_id is not None:
            scheduler.post(Hover(hover_id))
        steps = scheduler.run(max_ticks=ticks)
        frame = scheduler.frame()
    finally:
        scheduler.stop()

    if json_output:
        _print_json(frame, steps)
        return

    _print_rich(frame, steps)


def _print_json(frame: Frame, steps: int) -> None:
    data = {
        "ticks": steps,
        "alpha": frame.alpha,
        "nodes": [
            {
                "id": n.id,
                "label": n.label,
                "kind": n.kind,
                "x": round(n.x, 2),
                "y": round(n.y, 2),
                "radius": n.radius,
                "opacity": n.opacity,
            }
            for n in frame.nodes
        ],
        "edges": [
            {"source": e.source, "target": e.target, "relation": e.relation, "opacity": e.opacity}
            for e in frame.edges
        ],
        "tooltip": list(frame.tooltip) if frame.tooltip is not None else None,
    }
    click.echo(json_lib.dumps(data, indent=2))


def _print_rich(frame: Frame, steps: int) -> None:
    if not frame.nodes:
        console.print("[yellow]Nothing to graph: the catalog is empty.[/yellow]")
        return

    table = Table(title="Relationship Graph")
    table.add_column("Node", style="bold")
    table.add_column("Kind")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")

    for node in frame.nodes:
        style = "" if node.opacity >= 1 else "dim"
        table.add_row(node.id, node.kind, f"{node.x:.1f}", f"{node.y:.1f}", style=style)

    console.print(table)
    console.print(f"\n[dim]{len(frame.nodes)} node(s), {len(frame.edges)} edge(s), "
                  f"{steps} tick(s)[/dim]")
    if frame.tooltip:
        console.print("\n" + "\n".join(frame.tooltip))
