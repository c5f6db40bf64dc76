# ABOUTME: Turns Shelfkeeper errors into distinct, actionable CLI messages.
# ABOUTME: "Not found", "not allowed", "invalid input", and "storage failure" never blur together.

from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console
from rich.markup import escape

from shelfkeeper.errors import (
    NotAllowedError,
    NotFoundError,
    ShelfkeeperError,
    ValidationError,
)


def describe(exc: ShelfkeeperError) -> str:
    """Prefix an error message with the kind of failure it is."""
    if isinstance(exc, NotFoundError):
        kind = "Not found"
    elif isinstance(exc, NotAllowedError):
        kind = "Not allowed"
    elif isinstance(exc, ValidationError):
        kind = "Invalid input"
    else:
        kind = "Storage failure"
    return f"{kind}: {exc}"


@contextmanager
def reported_errors(console: Console) -> Iterator[None]:
    """Print any ShelfkeeperError raised in the block and exit with status 1."""
    try:
        yield
    except ShelfkeeperError as exc:
        console.print(f"[red]{escape(describe(exc))}[/red]")
        raise SystemExit(1) from exc
