# ABOUTME: CRUD operations for the Shelfkeeper book catalog.
# ABOUTME: Merge-on-insert, filtered search, partial updates, and guarded copy counters.

import sqlite3

from shelfkeeper.db.connection import storage_errors, transaction
from shelfkeeper.db.mapping import BookFilter, BookRecord, NewBook, new_book_to_row, row_to_book
from shelfkeeper.errors import NotFoundError, ValidationError

EDITABLE_BOOK_FIELDS = frozenset(
    {"title", "author", "edition", "category", "year_published", "total_copies"}
)

_NEWEST_FIRST = "ORDER BY created_at DESC, id DESC"


def available_copies(book: BookRecord) -> int:
    """Copies of a book that are not currently lent out."""
    return book.total_copies - book.borrowed_copies


def _like_pattern(term: str) -> str:
    """Build a LIKE pattern matching term anywhere, with wildcards escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class LibraryCatalog:
    """Wraps a sqlite3 connection and provides typed CRUD for the books table."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def list_all(self) -> list[BookRecord]:
        """Return all books in the catalog, newest first."""
        with storage_errors("list books"):
            cursor = self._conn.execute(f"SELECT * FROM books {_NEWEST_FIRST}")
            return [row_to_book(row) for row in cursor.fetchall()]

    def get_by_id(self, book_id: int) -> BookRecord | None:
        """Retrieve a book by its row ID."""
        with storage_errors(f"read book {book_id}"):
            cursor = self._conn.execute("SELECT * FROM books WHERE id = ?", (book_id,))
            row = cursor.fetchone()
        return row_to_book(row) if row else None

    def find_by_merge_key(self, title: str, author: str, edition: str) -> BookRecord | None:
        """Find the book with exactly this title, author, and edition (case-sensitive)."""
        with storage_errors("look up book"):
            cursor = self._conn.execute(
                "SELECT * FROM books WHERE title = ? AND author = ? AND edition = ? "
                "ORDER BY id LIMIT 1",
                (title, author, edition),
            )
            row = cursor.fetchone()
        return row_to_book(row) if row else None

    def search(self, criteria: BookFilter) -> list[BookRecord]:
        """Filter the catalog.

        Title, author, and category match as case-insensitive substrings; year
        matches exactly; available_only keeps books with at least one copy on
        the shelf. All given criteria must hold. An empty filter returns the
        whole catalog. Results are newest first, like list_all.
        """
        clauses: list[str] = []
        params: list[str | int] = []

        for column, term in (
            ("title", criteria.title),
            ("author", criteria.author),
            ("category", criteria.category),
        ):
            if term:
                clauses.append(f"casefold({column}) LIKE ? ESCAPE '\\'")
                params.append(_like_pattern(term.casefold()))

        if criteria.year is not None:
            clauses.append("year_published = ?")
            params.append(criteria.year)

        if criteria.available_only:
            clauses.append("borrowed_copies < total_copies")

        where = f"WHERE {' AND '.join(clauses)} " if clauses else ""
        with storage_errors("search books"):
            cursor = self._conn.execute(f"SELECT * FROM books {where}{_NEWEST_FIRST}", params)
            return [row_to_book(row) for row in cursor.fetchall()]

    def insert_or_merge(self, book: NewBook) -> tuple[BookRecord, bool]:
        """Add copies of a book to the catalog.

        If a book with the same (title, author, edition) already exists, its
        total_copies grows by book.total_copies and its borrowed_copies is left
        alone. Otherwise a new row is inserted with nothing lent out.

        Returns:
            The stored record and whether it was merged into an existing row.
        """
        with storage_errors("add book"), transaction(self._conn):
            existing = self.find_by_merge_key(book.title, book.author, book.edition)
            if existing is not None:
                self._conn.execute(
                    "UPDATE books SET total_copies = total_copies + ?, "
                    "updated_at = strftime('%Y-%m-%dT%H:%M:%f', 'now') WHERE id = ?",
                    (book.total_copies, existing.id),
                )
                book_id, merged = existing.id, True
            else:
                row = new_book_to_row(book)
                columns = ", ".join(row.keys())
                placeholders = ", ".join("?" for _ in row)
                cursor = self._conn.execute(
                    f"INSERT INTO books ({columns}) VALUES ({placeholders})",
                    list(row.values()),
                )
                book_id, merged = cursor.lastrowid, False

        record = self.get_by_id(book_id)  # type: ignore[arg-type]
        if record is None:
            raise NotFoundError(
                f"Book with id {book_id} vanished before it could be read back"
            )
        return record, merged

    def update_book(self, book_id: int, **fields: str | int) -> BookRecord:
        """Apply a partial update to a cataloged book.

        Only descriptive fields and total_copies can change here;
        borrowed_copies belongs to the lending engine.

        Raises:
            NotFoundError: If the book_id does not exist.
            ValidationError: On unknown fields, or total_copies below the
                number of copies currently lent out.
        """
        unknown = set(fields) - EDITABLE_BOOK_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update book field(s): {', '.join(sorted(unknown))}")

        current = self.get_by_id(book_id)
        if current is None:
            raise NotFoundError(f"Book with id {book_id} not found")
        if not fields:
            return current

        total = fields.get("total_copies")
        if total is not None and int(total) < current.borrowed_copies:
            raise ValidationError(
                f"total_copies cannot drop below the {current.borrowed_copies} "
                "copies currently borrowed"
            )

        set_clause = ", ".join(f"{k} = ?" for k in fields)
        set_clause += ", updated_at = strftime('%Y-%m-%dT%H:%M:%f', 'now')"
        values = [*list(fields.values()), book_id]

        with storage_errors(f"update book {book_id}"):
            cursor = self._conn.execute(f"UPDATE books SET {set_clause} WHERE id = ?", values)
            self._conn.commit()

        if cursor.rowcount == 0:
            raise NotFoundError(f"Book with id {book_id} not found")

        updated = self.get_by_id(book_id)
        if updated is None:
            raise NotFoundError(f"Book with id {book_id} not found")
        return updated

    def delete_book(self, book_id: int) -> bool:
        """Delete a book from the catalog.

        Deleting a missing book is not an error. Loans that point at the book
        are left in place.

        Returns:
            True if a row was removed.
        """
        with storage_errors(f"delete book {book_id}"):
            cursor = self._conn.execute("DELETE FROM books WHERE id = ?", (book_id,))
            self._conn.commit()
        return cursor.rowcount > 0

    # --- Lending primitives (run inside the caller's transaction, no commit) ---

    def reserve_copy(self, book_id: int) -> bool:
        """Mark one more copy as borrowed, only if a copy is still available.

        Returns:
            False if the book is gone or fully lent out at write time.
        """
        cursor = self._conn.execute(
            "UPDATE books SET borrowed_copies = borrowed_copies + 1, "
            "updated_at = strftime('%Y-%m-%dT%H:%M:%f', 'now') "
            "WHERE id = ? AND borrowed_copies < total_copies",
            (book_id,),
        )
        return cursor.rowcount == 1

    def release_copy(self, book_id: int) -> bool:
        """Mark one copy as back on the shelf, never going below zero.

        Returns:
            False if the book no longer exists.
        """
        cursor = self._conn.execute(
            "UPDATE books SET borrowed_copies = MAX(borrowed_copies - 1, 0), "
            "updated_at = strftime('%Y-%m-%dT%H:%M:%f', 'now') WHERE id = ?",
            (book_id,),
        )
        return cursor.rowcount == 1
