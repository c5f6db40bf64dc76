# ABOUTME: The `shelfkeeper book` command group for managing the catalog.
# ABOUTME: Provides add (merging repeat editions), ls, search, info, edit, and rm subcommands.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from shelfkeeper.cli.feedback import reported_errors
from shelfkeeper.cli.options import db_option, library_session
from shelfkeeper.cli.render import book_table
from shelfkeeper.core.lending import LendingEngine
from shelfkeeper.core.validation import validate_book_changes, validate_new_book
from shelfkeeper.db.catalog import LibraryCatalog, available_copies
from shelfkeeper.db.mapping import BookFilter, NewBook
from shelfkeeper.errors import NotFoundError

console = Console()


@click.group("book")
def book() -> None:
    """Manage the book catalog."""


@book.command("add")
@click.argument("title")
@click.option("--author", required=True, help="Author name.")
@click.option("--edition", required=True, help="Edition, e.g. '3rd'.")
@click.option("--category", required=True, help="Category or genre.")
@click.option("--year", "year_published", type=int, required=True, help="Year published.")
@click.option("--copies", "total_copies", type=int, default=1, show_default=True,
              help="Number of copies being added.")
@db_option
def book_add(
    title: str,
    author: str,
    edition: str,
    category: str,
    year_published: int,
    total_copies: int,
    db_path: Path | None,
) -> None:
    """Add copies of a book. Repeat title/author/edition merges into one entry."""
    new_book = NewBook(
        title=title,
        author=author,
        edition=edition,
        category=category,
        year_published=year_published,
        total_copies=total_copies,
    )
    with reported_errors(console):
        validate_new_book(new_book)
        with library_session(db_path) as conn:
            record, merged = LibraryCatalog(conn).insert_or_merge(new_book)

    if merged:
        console.print(
            f"Merged {total_copies} cop{'y' if total_copies == 1 else 'ies'} into "
            f"[bold]{record.title}[/bold] (id {record.id}); "
            f"now {record.total_copies} total."
        )
    else:
        console.print(f"Added [bold]{record.title}[/bold] (id {record.id}).")


@book.command("ls")
@click.option("--available", "available_only", is_flag=True, default=False,
              help="Only books with a copy on the shelf.")
@db_option
def book_ls(available_only: bool, db_path: Path | None) -> None:
    """List all books in the catalog, newest first."""
    with reported_errors(console), library_session(db_path) as conn:
        catalog = LibraryCatalog(conn)
        if available_only:
            records = catalog.search(BookFilter(available_only=True))
        else:
            records = catalog.list_all()

    if not records:
        console.print("[yellow]No books in the library.[/yellow]")
        return

    console.print(book_table(records))
    console.print(f"\n[dim]{len(records)} book(s)[/dim]")


@book.command("search")
@click.option("--title", default=None, help="Title contains (case-insensitive).")
@click.option("--author", default=None, help="Author contains (case-insensitive).")
@click.option("--category", default=None, help="Category contains (case-insensitive).")
@click.option("--year", type=int, default=None, help="Exact year published.")
@click.option("--available", "available_only", is_flag=True, default=False,
              help="Only books with a copy on the shelf.")
@db_option
def book_search(
    title: str | None,
    author: str | None,
    category: str | None,
    year: int | None,
    available_only: bool,
    db_path: Path | None,
) -> None:
    """Search the catalog. All given filters must match."""
    criteria = BookFilter(
        title=title, author=author, category=category, year=year, available_only=available_only
    )
    with reported_errors(console), library_session(db_path) as conn:
        results = LibraryCatalog(conn).search(criteria)

    if not results:
        console.print("[yellow]No results found.[/yellow]")
        return

    console.print(book_table(results))
    console.print(f"\n[dim]{len(results)} result(s)[/dim]")


@book.command("info")
@click.argument("book_id", type=int)
@db_option
def book_info(book_id: int, db_path: Path | None) -> None:
    """Show every field of a book, and who is holding it."""
    with reported_errors(console), library_session(db_path) as conn:
        engine = LendingEngine(conn)
        record = engine.catalog.get_by_id(book_id)
        if record is None:
            raise NotFoundError(f"Book with id {book_id} not found")
        holders = [s for s in engine.roster.list_borrowing() if s.borrowed_book_id == book_id]

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=14)
    table.add_column("Value")

    table.add_row("ID", str(record.id))
    table.add_row("Title", record.title)
    table.add_row("Author", record.author)
    table.add_row("Edition", record.edition)
    table.add_row("Category", record.category)
    table.add_row("Year", str(record.year_published))
    table.add_row("Copies", str(record.total_copies))
    table.add_row("Borrowed", str(record.borrowed_copies))
    table.add_row("Available", str(available_copies(record)))
    if holders:
        table.add_row("Held by", ", ".join(f"{s.name} (#{s.id})" for s in holders))
    table.add_row("Added", record.created_at)
    table.add_row("Modified", record.updated_at)

    console.print(table)


@book.command("edit")
@click.argument("book_id", type=int)
@click.option("--title", default=None)
@click.option("--author", default=None)
@click.option("--edition", default=None)
@click.option("--category", default=None)
@click.option("--year", "year_published", type=int, default=None)
@click.option("--copies", "total_copies", type=int, default=None,
              help="New total number of copies.")
@db_option
def book_edit(book_id: int, db_path: Path | None, **options: str | int | None) -> None:
    """Change fields of a cataloged book."""
    changes = {k: v for k, v in options.items() if v is not None}
    if not changes:
        console.print("[yellow]Nothing to change.[/yellow]")
        return

    with reported_errors(console):
        validate_book_changes(changes)
        with library_session(db_path) as conn:
            record = LibraryCatalog(conn).update_book(book_id, **changes)

    console.print(f"Updated [bold]{record.title}[/bold] (id {record.id}).")


@book.command("rm")
@click.argument("book_id", type=int)
@db_option
def book_rm(book_id: int, db_path: Path | None) -> None:
    """Remove a book from the catalog."""
    with reported_errors(console), library_session(db_path) as conn:
        on_loan = LendingEngine(conn).delete_book(book_id)

    if on_loan:
        console.print(
            f"[yellow]Warning: {on_loan} student(s) still hold book {book_id}; "
            "their loans stay open until returned.[/yellow]"
        )
    console.print(f"Removed book {book_id}.")
