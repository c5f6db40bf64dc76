# ABOUTME: The `shelfkeeper stats` command for a dashboard summary of the library.
# ABOUTME: Shows title, copy, and borrower counts from one catalog and roster snapshot.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from shelfkeeper.cli.feedback import reported_errors
from shelfkeeper.cli.options import db_option, library_session
from shelfkeeper.core.stats import summarize
from shelfkeeper.db.catalog import LibraryCatalog
from shelfkeeper.db.roster import StudentRoster

console = Console()


@click.command("stats")
@db_option
def stats(db_path: Path | None) -> None:
    """Summarize the catalog and current loans."""
    with reported_errors(console), library_session(db_path) as conn:
        summary = summarize(LibraryCatalog(conn).list_all(), StudentRoster(conn).list_all())

    table = Table(title="Library Summary", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Count", justify="right")

    table.add_row("Titles", str(summary.titles))
    table.add_row("Copies", str(summary.total_copies))
    table.add_row("Borrowed", str(summary.borrowed_copies))
    table.add_row("Available", str(summary.available_copies))
    table.add_row("Fully lent out", str(summary.sold_out_titles))
    table.add_row("Students", str(summary.students))
    table.add_row("Borrowing", str(summary.borrowing_students))

    console.print(table)
