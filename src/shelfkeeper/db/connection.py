# ABOUTME: SQLite database connection management for the Shelfkeeper library.
# ABOUTME: Opens or creates the database, applies schema, and scopes multi-row transactions.

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from shelfkeeper.db.schema import MIGRATIONS, SCHEMA_V1
from shelfkeeper.errors import StorageError

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".shelfkeeper" / "library.db"


def _casefold(value: str | None) -> str | None:
    """SQL casefold(): Unicode-aware case folding, unlike SQLite's ASCII-only LIKE."""
    return value.casefold() if value is not None else None


def _has_tables(conn: sqlite3.Connection) -> bool:
    """True once the base schema (and its version table) is in place."""
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'schema_version'"
    ).fetchone()
    return row is not None


def _get_schema_version(conn: sqlite3.Connection) -> int:
    """Highest schema version recorded, or 0 for an empty database."""
    row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    return row[0] or 0


def _apply_migrations(conn: sqlite3.Connection) -> None:
    """Bring the schema up to the newest version in MIGRATIONS.

    Each migration script records its own version, so re-running is a no-op.
    """
    current = _get_schema_version(conn)
    for version, script in MIGRATIONS:
        if version <= current:
            continue
        logger.debug("Migrating library schema from version %d to %d", current, version)
        conn.executescript(script)
        current = version


def open_library(path: Path | None = None) -> sqlite3.Connection:
    """Open the library database, creating and upgrading it as needed.

    Missing parent directories are created. A brand-new file gets the base
    schema; every database is then migrated to the newest version. The
    connection runs in WAL mode with foreign keys on and returns sqlite3.Row
    rows.

    Args:
        path: Database file. Defaults to ~/.shelfkeeper/library.db.
    """
    db_path = path or DEFAULT_DB_PATH
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    for pragma in ("journal_mode=WAL", "foreign_keys=ON"):
        conn.execute(f"PRAGMA {pragma}")
    conn.create_function("casefold", 1, _casefold, deterministic=True)

    if not _has_tables(conn):
        logger.debug("Creating library database at %s", db_path)
        conn.executescript(SCHEMA_V1)
    _apply_migrations(conn)
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run a block of writes as one transaction.

    Takes the write lock up front (BEGIN IMMEDIATE) so two sessions cannot
    interleave their read-check-write sequences. Commits on success and rolls
    back everything written inside the block on any exception.
    """
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        conn.rollback()
        raise
    conn.commit()


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Re-raise any sqlite3 failure inside the block as StorageError."""
    try:
        yield
    except sqlite3.Error as exc:
        raise StorageError(f"Could not {action}: {exc}") from exc
