# ABOUTME: Shared pytest fixtures for Shelfkeeper tests.
# ABOUTME: Provides temporary databases, the stores, the lending engine, and record factories.

import sqlite3
from collections.abc import Callable, Iterator
from datetime import date
from pathlib import Path

import pytest

from shelfkeeper.core.lending import LendingEngine
from shelfkeeper.db.catalog import LibraryCatalog
from shelfkeeper.db.connection import open_library
from shelfkeeper.db.mapping import BookRecord, NewBook, NewStudent, StudentRecord
from shelfkeeper.db.roster import StudentRoster
from shelfkeeper.graph.builder import LibraryGraph, build_graph


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    """Path for a fresh temporary library database."""
    return tmp_path / "library.db"


@pytest.fixture()
def conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    """An open connection to a freshly created library database."""
    connection = open_library(db_path)
    yield connection
    connection.close()


@pytest.fixture()
def catalog(conn: sqlite3.Connection) -> LibraryCatalog:
    return LibraryCatalog(conn)


@pytest.fixture()
def roster(conn: sqlite3.Connection) -> StudentRoster:
    return StudentRoster(conn)


@pytest.fixture()
def engine(conn: sqlite3.Connection) -> LendingEngine:
    return LendingEngine(conn)


@pytest.fixture()
def add_book(catalog: LibraryCatalog) -> Callable[..., BookRecord]:
    """Factory that inserts a book, with sensible defaults for unspecified fields."""

    def _add(**overrides: object) -> BookRecord:
        fields: dict[str, object] = {
            "title": "Introduction to Algorithms",
            "author": "Cormen",
            "edition": "3rd",
            "category": "Computer Science",
            "year_published": 2009,
            "total_copies": 1,
        }
        fields.update(overrides)
        record, _ = catalog.insert_or_merge(NewBook(**fields))  # type: ignore[arg-type]
        return record

    return _add


@pytest.fixture()
def add_student(roster: StudentRoster) -> Callable[..., StudentRecord]:
    """Factory that enrolls a student, with sensible defaults for unspecified fields."""

    def _add(**overrides: object) -> StudentRecord:
        fields: dict[str, object] = {
            "name": "Asha Rao",
            "branch": "CS",
            "section": 1,
            "phone": "9876543210",
        }
        fields.update(overrides)
        return roster.add_student(NewStudent(**fields))  # type: ignore[arg-type]

    return _add


def _make_book(book_id: int, title: str, **overrides: object) -> BookRecord:
    """Build a BookRecord in memory, without touching a database."""
    fields: dict[str, object] = {
        "id": book_id,
        "title": title,
        "author": "Frank Herbert",
        "edition": "1st",
        "category": "Science Fiction",
        "year_published": 1965,
        "total_copies": 1,
        "borrowed_copies": 0,
        "created_at": "2024-01-01T00:00:00.000",
        "updated_at": "2024-01-01T00:00:00.000",
    }
    fields.update(overrides)
    return BookRecord(**fields)  # type: ignore[arg-type]


def _make_student(
    student_id: int, name: str, borrowing: BookRecord | None = None, **overrides: object
) -> StudentRecord:
    """Build a StudentRecord in memory, optionally holding a book."""
    fields: dict[str, object] = {
        "id": student_id,
        "user_id": None,
        "name": name,
        "branch": "CS",
        "section": 1,
        "phone": "9876543210",
        "currently_borrowing": "YES" if borrowing else "NO",
        "borrowed_book_id": borrowing.id if borrowing else None,
        "borrowed_book_name": borrowing.title if borrowing else None,
        "borrowed_date": date(2024, 1, 10) if borrowing else None,
        "days_borrowed": 0,
        "created_at": "2024-01-01T00:00:00.000",
        "updated_at": "2024-01-01T00:00:00.000",
    }
    fields.update(overrides)
    return StudentRecord(**fields)  # type: ignore[arg-type]


@pytest.fixture()
def sample_graph() -> LibraryGraph:
    """Two books by different authors; one of them lent to a student.

    Nodes: book-1, author-Frank Herbert, category-Science Fiction, book-2,
    author-Jane Austen, category-Fiction, student-1.
    """
    dune = _make_book(1, "Dune", total_copies=2, borrowed_copies=1)
    emma = _make_book(2, "Emma", author="Jane Austen", category="Fiction", year_published=1815)
    asha = _make_student(1, "Asha", borrowing=dune, days_borrowed=3)
    idle = _make_student(2, "Ravi")
    return build_graph([dune, emma], [asha, idle])


@pytest.fixture()
def make_book() -> Callable[..., BookRecord]:
    """Factory for in-memory BookRecords: make_book(id, title, **fields)."""
    return _make_book


@pytest.fixture()
def make_student() -> Callable[..., StudentRecord]:
    """Factory for in-memory StudentRecords: make_student(id, name, borrowing=book)."""
    return _make_student
