# ABOUTME: The borrow, return, loans, and history commands for the lending lifecycle.
# ABOUTME: Thin wrappers over LendingEngine that report each failure mode distinctly.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from shelfkeeper.cli.feedback import reported_errors
from shelfkeeper.cli.options import db_option, library_session
from shelfkeeper.core.lending import LendingEngine

console = Console()


@click.command("borrow")
@click.argument("book_id", type=int)
@click.argument("student_id", type=int)
@db_option
def borrow(book_id: int, student_id: int, db_path: Path | None) -> None:
    """Lend a copy of BOOK_ID to STUDENT_ID."""
    with reported_errors(console), library_session(db_path) as conn:
        result = LendingEngine(conn).borrow(book_id, student_id)

    student = result.student
    if result.book is None:
        console.print(
            f"[green]{student.name}[/green] borrowed [bold]{student.borrowed_book_name}[/bold] "
            f"on {student.borrowed_date}; the book has since left the catalog."
        )
        return
    left = result.book.available_copies
    console.print(
        f"[green]{student.name}[/green] borrowed [bold]{result.book.title}[/bold] "
        f"on {student.borrowed_date} "
        f"({left} cop{'y' if left == 1 else 'ies'} left)."
    )


@click.command("return")
@click.argument("student_id", type=int)
@db_option
def return_book(student_id: int, db_path: Path | None) -> None:
    """Take back the book STUDENT_ID is holding."""
    with reported_errors(console), library_session(db_path) as conn:
        engine = LendingEngine(conn)
        title = None
        student = engine.roster.get_by_id(student_id)
        if student is not None:
            title = student.borrowed_book_name
        result = engine.return_book(student_id)

    console.print(f"[green]{result.student.name}[/green] returned [bold]{title}[/bold].")
    if result.book is None:
        console.print("[dim]That book is no longer in the catalog.[/dim]")


@click.command("loans")
@db_option
def loans(db_path: Path | None) -> None:
    """List active loans, oldest first."""
    with reported_errors(console), library_session(db_path) as conn:
        records = LendingEngine(conn).roster.list_borrowing()

    if not records:
        console.print("[yellow]No books are out.[/yellow]")
        return

    table = Table()
    table.add_column("Student", style="bold")
    table.add_column("ID", style="dim", width=4)
    table.add_column("Book")
    table.add_column("Since")
    table.add_column("Days", justify="right")

    for record in records:
        table.add_row(
            record.name,
            str(record.id),
            record.borrowed_book_name or "",
            str(record.borrowed_date),
            str(record.days_borrowed),
        )

    console.print(table)
    console.print(f"\n[dim]{len(records)} loan(s)[/dim]")


@click.command("history")
@click.option("--student", "student_id", type=int, default=None, help="Only this student.")
@click.option("--book", "book_id", type=int, default=None, help="Only this book.")
@db_option
def history(student_id: int | None, book_id: int | None, db_path: Path | None) -> None:
    """Show the borrow/return log."""
    with reported_errors(console), library_session(db_path) as conn:
        events = LendingEngine(conn).history(student_id=student_id, book_id=book_id)

    if not events:
        console.print("[yellow]No loan history.[/yellow]")
        return

    table = Table()
    table.add_column("When", style="dim")
    table.add_column("Action")
    table.add_column("Book", justify="right")
    table.add_column("Student", justify="right")

    for event in events:
        action = "[cyan]borrow[/cyan]" if event.action == "borrow" else "[green]return[/green]"
        table.add_row(event.occurred_at, action, str(event.book_id), str(event.student_id))

    console.print(table)
