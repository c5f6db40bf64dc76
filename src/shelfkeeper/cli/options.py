# ABOUTME: Shared Click options and connection handling for Shelfkeeper CLI commands.
# ABOUTME: Provides the --db option (also read from SHELFKEEPER_DB) and a closing session.

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from shelfkeeper.db.connection import DEFAULT_DB_PATH, open_library, storage_errors

db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(path_type=Path),
    default=None,
    envvar="SHELFKEEPER_DB",
    help=f"Path to library database (default: {DEFAULT_DB_PATH})",
)


@contextmanager
def library_session(db_path: Path | None) -> Iterator[sqlite3.Connection]:
    """Open the library database for one command and always close it."""
    with storage_errors("open library database"):
        conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        yield conn
    finally:
        conn.close()
