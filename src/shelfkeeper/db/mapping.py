# ABOUTME: Record types for books, students, and loan events, plus SQLite row conversion.
# ABOUTME: Rows come back as sqlite3.Row; dates are stored as ISO strings.

from dataclasses import dataclass
from datetime import date
from typing import Any

BRANCHES = ("CS", "IT", "ECE", "EEE", "MECH", "CIVIL")

YES = "YES"
NO = "NO"


@dataclass
class NewBook:
    """Fields supplied when adding copies of a book to the catalog."""

    title: str
    author: str
    edition: str
    category: str
    year_published: int
    total_copies: int = 1


@dataclass
class BookRecord:
    """A cataloged book, including its denormalized loan count."""

    id: int
    title: str
    author: str
    edition: str
    category: str
    year_published: int
    total_copies: int
    borrowed_copies: int
    created_at: str
    updated_at: str

    @property
    def available_copies(self) -> int:
        """Copies on the shelf right now."""
        return self.total_copies - self.borrowed_copies


@dataclass
class BookFilter:
    """Search criteria for the catalog. Unset fields impose no constraint."""

    title: str | None = None
    author: str | None = None
    category: str | None = None
    year: int | None = None
    available_only: bool = False


@dataclass
class NewStudent:
    """Fields supplied when enrolling a student in the roster."""

    name: str
    branch: str
    section: int
    phone: str
    user_id: str | None = None


@dataclass
class StudentRecord:
    """A rostered student. The active loan, if any, is stored inline."""

    id: int
    user_id: str | None
    name: str
    branch: str
    section: int
    phone: str
    currently_borrowing: str
    borrowed_book_id: int | None
    borrowed_book_name: str | None
    borrowed_date: date | None
    days_borrowed: int
    created_at: str
    updated_at: str

    @property
    def is_borrowing(self) -> bool:
        return self.currently_borrowing == YES


@dataclass
class LoanEvent:
    """One row of the append-only borrow/return audit log."""

    id: int
    book_id: int
    student_id: int
    action: str
    occurred_at: str


def new_book_to_row(book: NewBook) -> dict[str, Any]:
    """Convert a NewBook to a dict suitable for INSERT. Starts with nothing lent out."""
    return {
        "title": book.title,
        "author": book.author,
        "edition": book.edition,
        "category": book.category,
        "year_published": book.year_published,
        "total_copies": book.total_copies,
        "borrowed_copies": 0,
    }


def new_student_to_row(student: NewStudent) -> dict[str, Any]:
    """Convert a NewStudent to a dict suitable for INSERT, in the not-borrowing state."""
    return {
        "user_id": student.user_id,
        "name": student.name,
        "branch": student.branch,
        "section": student.section,
        "phone": student.phone,
        "currently_borrowing": NO,
        "days_borrowed": 0,
    }


def row_to_book(row: Any) -> BookRecord:
    """Convert a books row to a BookRecord."""
    return BookRecord(
        id=row["id"],
        title=row["title"],
        author=row["author"],
        edition=row["edition"],
        category=row["category"],
        year_published=row["year_published"],
        total_copies=row["total_copies"],
        borrowed_copies=row["borrowed_copies"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def row_to_student(row: Any) -> StudentRecord:
    """Convert a students row to a StudentRecord, parsing the ISO borrowed_date."""
    borrowed = row["borrowed_date"]
    return StudentRecord(
        id=row["id"],
        user_id=row["user_id"],
        name=row["name"],
        branch=row["branch"],
        section=row["section"],
        phone=row["phone"],
        currently_borrowing=row["currently_borrowing"],
        borrowed_book_id=row["borrowed_book_id"],
        borrowed_book_name=row["borrowed_book_name"],
        borrowed_date=date.fromisoformat(borrowed) if borrowed else None,
        days_borrowed=row["days_borrowed"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def row_to_event(row: Any) -> LoanEvent:
    return LoanEvent(
        id=row["id"],
        book_id=row["book_id"],
        student_id=row["student_id"],
        action=row["action"],
        occurred_at=row["occurred_at"],
    )
