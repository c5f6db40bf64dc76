# ABOUTME: The `shelfkeeper student` command group for managing the roster.
# ABOUTME: Provides add, ls, info (by id or linked account), edit, and rm subcommands.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from shelfkeeper.cli.feedback import reported_errors
from shelfkeeper.cli.options import db_option, library_session
from shelfkeeper.cli.render import student_table
from shelfkeeper.core.validation import validate_new_student, validate_student_changes
from shelfkeeper.db.mapping import BRANCHES, NewStudent
from shelfkeeper.db.roster import StudentRoster
from shelfkeeper.errors import NotFoundError

console = Console()

_branch_choice = click.Choice(BRANCHES, case_sensitive=False)


@click.group("student")
def student() -> None:
    """Manage the student roster."""


@student.command("add")
@click.argument("name")
@click.option("--branch", type=_branch_choice, required=True, help="Branch code.")
@click.option("--section", type=int, required=True, help="Section number.")
@click.option("--phone", required=True, help="10-digit phone number.")
@click.option("--account", "user_id", default=None,
              help="Linked identity-provider account id.")
@db_option
def student_add(
    name: str,
    branch: str,
    section: int,
    phone: str,
    user_id: str | None,
    db_path: Path | None,
) -> None:
    """Enroll a student."""
    new_student = NewStudent(
        name=name, branch=branch.upper(), section=section, phone=phone, user_id=user_id
    )
    with reported_errors(console):
        validate_new_student(new_student)
        with library_session(db_path) as conn:
            record = StudentRoster(conn).add_student(new_student)

    console.print(f"Enrolled [bold]{record.name}[/bold] (id {record.id}).")


@student.command("ls")
@click.option("--borrowing", is_flag=True, default=False,
              help="Only students with a book out, oldest loan first.")
@db_option
def student_ls(borrowing: bool, db_path: Path | None) -> None:
    """List students, newest first."""
    with reported_errors(console), library_session(db_path) as conn:
        roster = StudentRoster(conn)
        records = roster.list_borrowing() if borrowing else roster.list_all()

    if not records:
        console.print("[yellow]No students found.[/yellow]")
        return

    console.print(student_table(records))
    console.print(f"\n[dim]{len(records)} student(s)[/dim]")


@student.command("info")
@click.argument("student_id", type=int, required=False)
@click.option("--account", "user_id", default=None,
              help="Look the student up by linked account instead of id.")
@db_option
def student_info(student_id: int | None, user_id: str | None, db_path: Path | None) -> None:
    """Show a student's details and current loan."""
    if (student_id is None) == (user_id is None):
        raise click.UsageError("Give either STUDENT_ID or --account, not both.")

    with reported_errors(console), library_session(db_path) as conn:
        roster = StudentRoster(conn)
        if user_id is not None:
            record = roster.get_by_user_id(user_id)
            missing = f"No student linked to account {user_id}"
        else:
            record = roster.get_by_id(student_id)  # type: ignore[arg-type]
            missing = f"Student with id {student_id} not found"
        if record is None:
            raise NotFoundError(missing)

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=14)
    table.add_column("Value")

    table.add_row("ID", str(record.id))
    table.add_row("Name", record.name)
    table.add_row("Branch", record.branch)
    table.add_row("Section", str(record.section))
    table.add_row("Phone", record.phone)
    if record.user_id:
        table.add_row("Account", record.user_id)
    table.add_row("Borrowing", record.currently_borrowing)
    if record.is_borrowing:
        table.add_row("Book", f"{record.borrowed_book_name} (#{record.borrowed_book_id})")
        table.add_row("Since", f"{record.borrowed_date} ({record.days_borrowed} days)")
    table.add_row("Added", record.created_at)

    console.print(table)


@student.command("edit")
@click.argument("student_id", type=int)
@click.option("--name", default=None)
@click.option("--branch", type=_branch_choice, default=None)
@click.option("--section", type=int, default=None)
@click.option("--phone", default=None)
@click.option("--account", "user_id", default=None)
@db_option
def student_edit(student_id: int, db_path: Path | None, **options: str | int | None) -> None:
    """Change a student's profile fields."""
    changes = {k: v for k, v in options.items() if v is not None}
    if "branch" in changes:
        changes["branch"] = str(changes["branch"]).upper()
    if not changes:
        console.print("[yellow]Nothing to change.[/yellow]")
        return

    with reported_errors(console):
        validate_student_changes(changes)
        with library_session(db_path) as conn:
            record = StudentRoster(conn).update_student(student_id, **changes)

    console.print(f"Updated [bold]{record.name}[/bold] (id {record.id}).")


@student.command("rm")
@click.argument("student_id", type=int)
@db_option
def student_rm(student_id: int, db_path: Path | None) -> None:
    """Remove a student from the roster."""
    with reported_errors(console), library_session(db_path) as conn:
        roster = StudentRoster(conn)
        record = roster.get_by_id(student_id)
        if record is not None and record.is_borrowing:
            console.print(
                f"[yellow]Warning: {record.name} still holds "
                f"'{record.borrowed_book_name}'; its copy stays counted as borrowed.[/yellow]"
            )
        roster.delete_student(student_id)

    console.print(f"Removed student {student_id}.")
