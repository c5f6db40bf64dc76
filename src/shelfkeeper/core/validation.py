# ABOUTME: Input checks for student and book fields, run before anything is written.
# ABOUTME: Raises ValidationError with a message suitable for showing to the user.

import re
from datetime import date

from shelfkeeper.db.mapping import BRANCHES, NewBook, NewStudent
from shelfkeeper.errors import ValidationError

_PHONE_RE = re.compile(r"^\d{10}$")

# Oldest year we accept as a publication date; catches typos like 202.
_EARLIEST_YEAR = 1400


def validate_phone(phone: str) -> str:
    """Phone numbers are exactly 10 digits, nothing else."""
    if not _PHONE_RE.match(phone):
        raise ValidationError("Phone number must be exactly 10 digits")
    return phone


def validate_branch(branch: str) -> str:
    if branch not in BRANCHES:
        raise ValidationError(f"Branch must be one of {', '.join(BRANCHES)}")
    return branch


def validate_section(section: int) -> int:
    if section < 1:
        raise ValidationError("Section must be a positive number")
    return section


def _require_text(label: str, value: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{label} must not be empty")
    return value


def validate_new_student(student: NewStudent) -> NewStudent:
    """Check every field of a student about to be enrolled."""
    _require_text("Name", student.name)
    validate_branch(student.branch)
    validate_section(student.section)
    validate_phone(student.phone)
    return student


def validate_student_changes(changes: dict[str, object]) -> dict[str, object]:
    """Check only the fields present in a partial student update."""
    if "name" in changes:
        _require_text("Name", str(changes["name"]))
    if "branch" in changes:
        validate_branch(str(changes["branch"]))
    if "section" in changes:
        validate_section(int(changes["section"]))  # type: ignore[call-overload]
    if "phone" in changes:
        validate_phone(str(changes["phone"]))
    return changes


def validate_year(year: int, *, today: date | None = None) -> int:
    latest = (today or date.today()).year + 1
    if not _EARLIEST_YEAR <= year <= latest:
        raise ValidationError(f"Year published must be between {_EARLIEST_YEAR} and {latest}")
    return year


def validate_new_book(book: NewBook) -> NewBook:
    """Check a book about to be added or merged into the catalog."""
    _require_text("Title", book.title)
    _require_text("Author", book.author)
    _require_text("Edition", book.edition)
    _require_text("Category", book.category)
    validate_year(book.year_published)
    if book.total_copies < 1:
        raise ValidationError("Total copies must be at least 1")
    return book


def validate_book_changes(changes: dict[str, object]) -> dict[str, object]:
    """Check only the fields present in a partial book update."""
    for field, label in (
        ("title", "Title"),
        ("author", "Author"),
        ("edition", "Edition"),
        ("category", "Category"),
    ):
        if field in changes:
            _require_text(label, str(changes[field]))
    if "year_published" in changes:
        validate_year(int(changes["year_published"]))  # type: ignore[call-overload]
    if "total_copies" in changes and int(changes["total_copies"]) < 1:  # type: ignore[call-overload]
        raise ValidationError("Total copies must be at least 1")
    return changes
