# ABOUTME: CRUD operations for the Shelfkeeper student roster.
# ABOUTME: Enrollment, lookups by id or linked account, and the inline loan fields.

import sqlite3
from datetime import date

from shelfkeeper.db.connection import storage_errors
from shelfkeeper.db.mapping import (
    NO,
    YES,
    BookRecord,
    LoanEvent,
    NewStudent,
    StudentRecord,
    new_student_to_row,
    row_to_event,
    row_to_student,
)
from shelfkeeper.errors import (
    DuplicateAccountError,
    NotFoundError,
    ValidationError,
)

EDITABLE_STUDENT_FIELDS = frozenset({"name", "branch", "section", "phone", "user_id"})


class StudentRoster:
    """Wraps a sqlite3 connection and provides typed CRUD for the students table.

    Input validation (phone format, branch codes) is the caller's job; see
    shelfkeeper.core.validation.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def list_all(self) -> list[StudentRecord]:
        """Return every student, newest first."""
        with storage_errors("list students"):
            cursor = self._conn.execute(
                "SELECT * FROM students ORDER BY created_at DESC, id DESC"
            )
            return [row_to_student(row) for row in cursor.fetchall()]

    def get_by_id(self, student_id: int) -> StudentRecord | None:
        """Retrieve a student by row ID."""
        with storage_errors(f"read student {student_id}"):
            cursor = self._conn.execute("SELECT * FROM students WHERE id = ?", (student_id,))
            row = cursor.fetchone()
        return row_to_student(row) if row else None

    def get_by_user_id(self, user_id: str) -> StudentRecord | None:
        """Resolve the student linked to an identity-provider account."""
        with storage_errors("look up student account"):
            cursor = self._conn.execute("SELECT * FROM students WHERE user_id = ?", (user_id,))
            row = cursor.fetchone()
        return row_to_student(row) if row else None

    def list_borrowing(self) -> list[StudentRecord]:
        """Students with an active loan, oldest loan first."""
        with storage_errors("list active loans"):
            cursor = self._conn.execute(
                "SELECT * FROM students WHERE currently_borrowing = ? "
                "ORDER BY borrowed_date ASC, id ASC",
                (YES,),
            )
            return [row_to_student(row) for row in cursor.fetchall()]

    def count_loans_for_book(self, book_id: int) -> int:
        """How many students currently hold a copy of the given book."""
        with storage_errors(f"count loans for book {book_id}"):
            cursor = self._conn.execute(
                "SELECT COUNT(*) FROM students "
                "WHERE currently_borrowing = ? AND borrowed_book_id = ?",
                (YES, book_id),
            )
            return cursor.fetchone()[0]

    def add_student(self, student: NewStudent) -> StudentRecord:
        """Enroll a student. New students start with no loan.

        Raises:
            DuplicateAccountError: If student.user_id is already linked.
        """
        row = new_student_to_row(student)
        columns = ", ".join(row.keys())
        placeholders = ", ".join("?" for _ in row)

        with storage_errors("add student"):
            try:
                cursor = self._conn.execute(
                    f"INSERT INTO students ({columns}) VALUES ({placeholders})",
                    list(row.values()),
                )
                self._conn.commit()
            except sqlite3.IntegrityError as exc:
                self._raise_if_duplicate_account(exc, student.user_id)
                raise

        record = self.get_by_id(cursor.lastrowid)  # type: ignore[arg-type]
        if record is None:
            raise NotFoundError(
                f"Student with id {cursor.lastrowid} vanished before it could be read back"
            )
        return record

    def update_student(self, student_id: int, **fields: str | int | None) -> StudentRecord:
        """Apply a partial update to a student's profile fields.

        Loan fields are owned by the lending engine and cannot be set here.

        Raises:
            NotFoundError: If the student_id does not exist.
            ValidationError: On fields that are not editable.
            DuplicateAccountError: If the new user_id is linked to someone else.
        """
        unknown = set(fields) - EDITABLE_STUDENT_FIELDS
        if unknown:
            raise ValidationError(
                f"Cannot update student field(s): {', '.join(sorted(unknown))}"
            )

        if fields:
            set_clause = ", ".join(f"{k} = ?" for k in fields)
            set_clause += ", updated_at = strftime('%Y-%m-%dT%H:%M:%f', 'now')"
            values = [*list(fields.values()), student_id]
            with storage_errors(f"update student {student_id}"):
                try:
                    cursor = self._conn.execute(
                        f"UPDATE students SET {set_clause} WHERE id = ?", values
                    )
                    self._conn.commit()
                except sqlite3.IntegrityError as exc:
                    self._raise_if_duplicate_account(exc, fields.get("user_id"))
                    raise
            if cursor.rowcount == 0:
                raise NotFoundError(f"Student with id {student_id} not found")

        record = self.get_by_id(student_id)
        if record is None:
            raise NotFoundError(f"Student with id {student_id} not found")
        return record

    def _raise_if_duplicate_account(
        self, exc: sqlite3.IntegrityError, user_id: object
    ) -> None:
        if "UNIQUE constraint failed: students.user_id" in str(exc):
            self._conn.rollback()
            raise DuplicateAccountError(
                f"Account {user_id} is already linked to another student"
            ) from exc

    def delete_student(self, student_id: int) -> bool:
        """Remove a student. Deleting a missing student is not an error.

        Returns:
            True if a row was removed.
        """
        with storage_errors(f"delete student {student_id}"):
            cursor = self._conn.execute("DELETE FROM students WHERE id = ?", (student_id,))
            self._conn.commit()
        return cursor.rowcount > 0

    def loan_events(
        self, *, student_id: int | None = None, book_id: int | None = None
    ) -> list[LoanEvent]:
        """Read the borrow/return audit log, oldest first."""
        clauses: list[str] = []
        params: list[int] = []
        if student_id is not None:
            clauses.append("student_id = ?")
            params.append(student_id)
        if book_id is not None:
            clauses.append("book_id = ?")
            params.append(book_id)
        where = f"WHERE {' AND '.join(clauses)} " if clauses else ""

        with storage_errors("read loan history"):
            cursor = self._conn.execute(
                f"SELECT * FROM loan_events {where}ORDER BY occurred_at, id", params
            )
            return [row_to_event(row) for row in cursor.fetchall()]

    # --- Lending primitives (run inside the caller's transaction, no commit) ---

    def start_loan(self, student_id: int, book: BookRecord, on: date) -> bool:
        """Move a student into the borrowing state for the given book.

        The title is copied onto the student row as it reads today and is not
        kept in sync afterwards.

        Returns:
            False if the student is gone or already borrowing at write time.
        """
        cursor = self._conn.execute(
            "UPDATE students SET currently_borrowing = ?, borrowed_book_id = ?, "
            "borrowed_book_name = ?, borrowed_date = ?, days_borrowed = 0, "
            "updated_at = strftime('%Y-%m-%dT%H:%M:%f', 'now') "
            "WHERE id = ? AND currently_borrowing = ?",
            (YES, book.id, book.title, on.isoformat(), student_id, NO),
        )
        return cursor.rowcount == 1

    def end_loan(self, student_id: int) -> bool:
        """Clear a student's loan fields, returning them to the available state.

        Returns:
            False if the student is gone or not borrowing at write time.
        """
        cursor = self._conn.execute(
            "UPDATE students SET currently_borrowing = ?, borrowed_book_id = NULL, "
            "borrowed_book_name = NULL, borrowed_date = NULL, days_borrowed = 0, "
            "updated_at = strftime('%Y-%m-%dT%H:%M:%f', 'now') "
            "WHERE id = ? AND currently_borrowing = ?",
            (NO, student_id, YES),
        )
        return cursor.rowcount == 1

    def record_event(self, book_id: int, student_id: int, action: str) -> None:
        """Append a borrow/return event to the audit log."""
        self._conn.execute(
            "INSERT INTO loan_events (book_id, student_id, action) VALUES (?, ?, ?)",
            (book_id, student_id, action),
        )
