# ABOUTME: Borrow/return state machine spanning the catalog and the roster.
# ABOUTME: Checks preconditions in a fixed order, then writes both rows in one transaction.

import logging
import sqlite3
from dataclasses import dataclass
from datetime import date
from enum import Enum

from shelfkeeper.db.catalog import LibraryCatalog, available_copies
from shelfkeeper.db.connection import storage_errors, transaction
from shelfkeeper.db.mapping import BookRecord, LoanEvent, StudentRecord
from shelfkeeper.db.roster import StudentRoster
from shelfkeeper.errors import CapacityError, ConflictError, NotFoundError, ShelfkeeperError

logger = logging.getLogger(__name__)


class LoanState(Enum):
    """Where a student stands in the lending lifecycle."""

    AVAILABLE = "AVAILABLE"
    BORROWING = "BORROWING"


def loan_state(student: StudentRecord) -> LoanState:
    return LoanState.BORROWING if student.is_borrowing else LoanState.AVAILABLE


@dataclass
class LoanResult:
    """Book and student as stored after a borrow or return.

    book is None when a return found the loaned book already deleted.
    """

    book: BookRecord | None
    student: StudentRecord


class LendingEngine:
    """Lends books to students and takes them back.

    A student holds at most one book at a time. The book's borrowed_copies
    and the student's loan fields are updated together: both writes (and the
    audit event) share one transaction, and each write re-checks its own
    precondition, so a concurrent session acting on a stale read is refused
    instead of over-lending.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self.catalog = LibraryCatalog(conn)
        self.roster = StudentRoster(conn)

    def borrow(self, book_id: int, student_id: int, *, on: date | None = None) -> LoanResult:
        """Lend one copy of a book to a student.

        Preconditions are checked in this order, each with its own error:
        the book exists, it has a copy available, the student exists, and the
        student is not already borrowing.

        Args:
            book_id: The book to lend.
            student_id: The student taking it.
            on: Loan date. Defaults to today.

        Raises:
            NotFoundError: The book or the student does not exist.
            CapacityError: Every copy of the book is out.
            ConflictError: The student already has a book.
            StorageError: The database failed; nothing was written.
        """
        book = self.catalog.get_by_id(book_id)
        if book is None:
            raise NotFoundError(f"Book with id {book_id} not found")
        if available_copies(book) <= 0:
            raise CapacityError(f"No copies of '{book.title}' are available")

        student = self.roster.get_by_id(student_id)
        if student is None:
            raise NotFoundError(f"Student with id {student_id} not found")
        if loan_state(student) is LoanState.BORROWING:
            raise ConflictError(
                f"{student.name} is already borrowing '{student.borrowed_book_name}'"
            )

        loan_date = on or date.today()
        with storage_errors("record loan"), transaction(self._conn):
            if not self.catalog.reserve_copy(book.id):
                raise self._book_unavailable(book.id)
            try:
                if not self.roster.start_loan(student.id, book, loan_date):
                    raise ConflictError(f"{student.name} started another loan meanwhile")
                self.roster.record_event(book.id, student.id, "borrow")
            except (ShelfkeeperError, sqlite3.Error) as exc:
                logger.warning(
                    "Reverting copy reserved on book %d after student %d update failed: %s",
                    book.id,
                    student.id,
                    exc,
                )
                raise

        logger.debug("Student %d borrowed book %d on %s", student.id, book.id, loan_date)
        return self._reload(book.id, student.id)

    def return_book(self, student_id: int) -> LoanResult:
        """Take back the book a student is holding.

        If the book has since been deleted from the catalog, the student's
        loan is still cleared; only the copy count is skipped.

        Raises:
            NotFoundError: The student does not exist.
            ConflictError: The student has nothing to return.
            StorageError: The database failed; nothing was written.
        """
        student = self.roster.get_by_id(student_id)
        if student is None:
            raise NotFoundError(f"Student with id {student_id} not found")
        if loan_state(student) is LoanState.AVAILABLE:
            raise ConflictError(f"{student.name} has no borrowed book to return")

        book_id = student.borrowed_book_id
        with storage_errors("record return"), transaction(self._conn):
            released = book_id is not None and self.catalog.release_copy(book_id)
            if not released:
                logger.warning(
                    "Book %s is no longer cataloged; clearing loan for student %d only",
                    book_id,
                    student.id,
                )
            try:
                if not self.roster.end_loan(student.id):
                    raise ConflictError(f"{student.name}'s loan was already returned")
                if book_id is not None:
                    self.roster.record_event(book_id, student.id, "return")
            except (ShelfkeeperError, sqlite3.Error) as exc:
                if released:
                    logger.warning(
                        "Reverting copy released on book %d after student %d update failed: %s",
                        book_id,
                        student.id,
                        exc,
                    )
                raise

        logger.debug("Student %d returned book %s", student.id, book_id)
        return self._reload(book_id, student.id)

    def delete_book(self, book_id: int) -> int:
        """Remove a book from the catalog, warning if it is still on loan.

        The delete is not blocked: students holding the book keep their loan
        and can still return it.

        Returns:
            Number of active loans that still reference the deleted book.
        """
        on_loan = self.roster.count_loans_for_book(book_id)
        if on_loan:
            logger.warning("Deleting book %d while %d loan(s) still reference it", book_id, on_loan)
        self.catalog.delete_book(book_id)
        return on_loan

    def history(
        self, *, student_id: int | None = None, book_id: int | None = None
    ) -> list[LoanEvent]:
        """Borrow/return events, optionally narrowed to one student or book."""
        return self.roster.loan_events(student_id=student_id, book_id=book_id)

    def _book_unavailable(self, book_id: int) -> ShelfkeeperError:
        """Explain why a guarded copy reservation matched no row."""
        if self.catalog.get_by_id(book_id) is None:
            return NotFoundError(f"Book with id {book_id} not found")
        return CapacityError(f"No copies of book {book_id} are available")

    def _reload(self, book_id: int | None, student_id: int) -> LoanResult:
        book = self.catalog.get_by_id(book_id) if book_id is not None else None
        student = self.roster.get_by_id(student_id)
        if student is None:
            raise NotFoundError(f"Student with id {student_id} not found")
        return LoanResult(book=book, student=student)
