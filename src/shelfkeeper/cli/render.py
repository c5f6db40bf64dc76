# ABOUTME: Rich table builders shared by the book, student, and loan commands.
# ABOUTME: Keeps column layout identical wherever the same record type is listed.

from rich.table import Table

from shelfkeeper.db.catalog import available_copies
from shelfkeeper.db.mapping import BookRecord, StudentRecord


def book_table(records: list[BookRecord]) -> Table:
    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("Edition")
    table.add_column("Category")
    table.add_column("Year", width=5)
    table.add_column("Avail", justify="right")

    for record in records:
        available = available_copies(record)
        avail_display = f"{available}/{record.total_copies}"
        if available <= 0:
            avail_display = f"[red]{avail_display}[/red]"
        table.add_row(
            str(record.id),
            record.title,
            record.author,
            record.edition,
            record.category,
            str(record.year_published),
            avail_display,
        )
    return table


def student_table(records: list[StudentRecord]) -> Table:
    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Name", style="bold")
    table.add_column("Branch")
    table.add_column("Sec", justify="right")
    table.add_column("Phone")
    table.add_column("Borrowing")

    for record in records:
        borrowing = (
            f"[yellow]{record.borrowed_book_name}[/yellow]" if record.is_borrowing else "[dim]-[/dim]"
        )
        table.add_row(
            str(record.id),
            record.name,
            record.branch,
            str(record.section),
            record.phone,
            borrowing,
        )
    return table
