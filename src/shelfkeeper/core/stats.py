# ABOUTME: Dashboard totals computed from catalog and roster snapshots.
# ABOUTME: Counts titles, copies on loan and on the shelf, and students borrowing.

from dataclasses import dataclass

from shelfkeeper.db.catalog import available_copies
from shelfkeeper.db.mapping import BookRecord, StudentRecord


@dataclass
class LibraryStats:
    """Aggregate counts for the library dashboard."""

    titles: int = 0
    total_copies: int = 0
    borrowed_copies: int = 0
    students: int = 0
    borrowing_students: int = 0
    sold_out_titles: int = 0

    @property
    def available_copies(self) -> int:
        return self.total_copies - self.borrowed_copies


def summarize(books: list[BookRecord], students: list[StudentRecord]) -> LibraryStats:
    """Fold a catalog snapshot and a roster snapshot into LibraryStats."""
    stats = LibraryStats(titles=len(books), students=len(students))

    for book in books:
        stats.total_copies += book.total_copies
        stats.borrowed_copies += book.borrowed_copies
        if available_copies(book) <= 0:
            stats.sold_out_titles += 1

    stats.borrowing_students = sum(1 for s in students if s.is_borrowing)
    return stats
