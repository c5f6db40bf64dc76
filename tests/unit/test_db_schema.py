# ABOUTME: Unit tests for database schema creation, constraints, and migrations.
# ABOUTME: Validates tables, CHECK constraints, WAL mode, default paths, and version upgrades.

import sqlite3
from pathlib import Path

import pytest

from shelfkeeper.db.connection import (
    DEFAULT_DB_PATH,
    _apply_migrations,
    _get_schema_version,
    open_library,
    transaction,
)
from shelfkeeper.db.schema import MIGRATIONS, SCHEMA_V1


def _insert_book(conn: sqlite3.Connection, total: int = 1, borrowed: int = 0) -> None:
    conn.execute(
        "INSERT INTO books (title, author, edition, category, year_published, "
        "total_copies, borrowed_copies) VALUES ('T', 'A', '1st', 'C', 2000, ?, ?)",
        (total, borrowed),
    )


class TestOpenLibrary:
    """Tests for open_library() connection factory."""

    def test_creates_database_file(self, db_path: Path) -> None:
        """Calling open_library creates a .db file at the given path."""
        conn = open_library(db_path)
        conn.close()
        assert db_path.exists()

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        """Creates parent directories if they don't exist."""
        nested = tmp_path / "deep" / "nested" / "library.db"
        conn = open_library(nested)
        conn.close()
        assert nested.exists()

    def test_creates_books_table(self, conn: sqlite3.Connection) -> None:
        """The books table exists with the catalog columns."""
        cursor = conn.execute("PRAGMA table_info(books)")
        columns = {row[1] for row in cursor.fetchall()}
        assert columns == {
            "id",
            "title",
            "author",
            "edition",
            "category",
            "year_published",
            "total_copies",
            "borrowed_copies",
            "created_at",
            "updated_at",
        }

    def test_creates_students_table(self, conn: sqlite3.Connection) -> None:
        """The students table carries the inline loan columns."""
        cursor = conn.execute("PRAGMA table_info(students)")
        columns = {row[1] for row in cursor.fetchall()}
        assert {
            "user_id",
            "branch",
            "section",
            "phone",
            "currently_borrowing",
            "borrowed_book_id",
            "borrowed_book_name",
            "borrowed_date",
            "days_borrowed",
        } <= columns

    def test_default_path(self) -> None:
        """Default path resolves to ~/.shelfkeeper/library.db."""
        assert Path.home() / ".shelfkeeper" / "library.db" == DEFAULT_DB_PATH

    def test_reopen_existing_database(self, db_path: Path) -> None:
        """Opening an existing DB does not recreate or destroy data."""
        conn = open_library(db_path)
        _insert_book(conn)
        conn.commit()
        conn.close()

        conn2 = open_library(db_path)
        count = conn2.execute("SELECT COUNT(*) FROM books").fetchone()[0]
        conn2.close()
        assert count == 1

    def test_connection_is_wal_mode(self, conn: sqlite3.Connection) -> None:
        """WAL journal mode is enabled so readers don't block the writer."""
        assert conn.execute("PRAGMA journal_mode").fetchone()[0] == "wal"

    def test_connection_has_row_factory(self, conn: sqlite3.Connection) -> None:
        """Connection uses sqlite3.Row factory for dict-like access."""
        assert conn.row_factory == sqlite3.Row


class TestConstraints:
    """The schema refuses rows that break the copy and loan invariants."""

    def test_borrowed_cannot_exceed_total(self, conn: sqlite3.Connection) -> None:
        with pytest.raises(sqlite3.IntegrityError):
            _insert_book(conn, total=1, borrowed=2)

    def test_borrowed_cannot_be_negative(self, conn: sqlite3.Connection) -> None:
        with pytest.raises(sqlite3.IntegrityError):
            _insert_book(conn, total=1, borrowed=-1)

    def test_total_must_be_positive(self, conn: sqlite3.Connection) -> None:
        with pytest.raises(sqlite3.IntegrityError):
            _insert_book(conn, total=0)

    def test_unknown_branch_rejected(self, conn: sqlite3.Connection) -> None:
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(
                "INSERT INTO students (name, branch, section, phone) "
                "VALUES ('S', 'ART', 1, '0123456789')"
            )

    def test_borrowing_flag_requires_book_id(self, conn: sqlite3.Connection) -> None:
        """currently_borrowing = YES without a book id is refused."""
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(
                "INSERT INTO students (name, branch, section, phone, currently_borrowing) "
                "VALUES ('S', 'CS', 1, '0123456789', 'YES')"
            )


class TestMigrations:
    """Tests for the migration runner."""

    def test_fresh_db_has_latest_version(self, conn: sqlite3.Connection) -> None:
        assert _get_schema_version(conn) == 2

    def test_migrations_list_is_ordered(self) -> None:
        """MIGRATIONS list has strictly increasing version numbers."""
        versions = [v for v, _ in MIGRATIONS]
        assert versions == sorted(versions)
        assert len(versions) == len(set(versions))

    def test_migration_creates_loan_events_table(self, conn: sqlite3.Connection) -> None:
        cursor = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='loan_events'"
        )
        assert cursor.fetchone() is not None

    def test_apply_migrations_is_idempotent(self, conn: sqlite3.Connection) -> None:
        """Running migrations twice does not raise or change version."""
        version_before = _get_schema_version(conn)
        _apply_migrations(conn)
        assert _get_schema_version(conn) == version_before

    def test_v1_db_upgrades_to_v2(self, db_path: Path) -> None:
        """A V1-only database upgrades to V2 when opened."""
        raw = sqlite3.connect(str(db_path))
        raw.executescript(SCHEMA_V1)
        raw.close()

        conn = open_library(db_path)
        version = _get_schema_version(conn)
        conn.close()
        assert version == 2


class TestTransaction:
    """Tests for the transaction() context manager."""

    def test_commits_on_success(self, db_path: Path) -> None:
        conn = open_library(db_path)
        with transaction(conn):
            _insert_book(conn)
        conn.close()

        conn2 = open_library(db_path)
        assert conn2.execute("SELECT COUNT(*) FROM books").fetchone()[0] == 1
        conn2.close()

    def test_rolls_back_every_write_on_error(self, conn: sqlite3.Connection) -> None:
        with pytest.raises(RuntimeError), transaction(conn):
            _insert_book(conn)
            _insert_book(conn)
            raise RuntimeError("boom")

        assert conn.execute("SELECT COUNT(*) FROM books").fetchone()[0] == 0
        assert not conn.in_transaction
