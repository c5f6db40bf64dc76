# ABOUTME: Unit tests for the dashboard summary over catalog and roster snapshots.
# ABOUTME: Validates copy totals, sold-out titles, and borrowing-student counts.

from collections.abc import Callable

from shelfkeeper.core.stats import LibraryStats, summarize
from shelfkeeper.db.mapping import BookRecord, StudentRecord


class TestSummarize:
    def test_empty_library(self) -> None:
        assert summarize([], []) == LibraryStats()

    def test_counts(
        self,
        make_book: Callable[..., BookRecord],
        make_student: Callable[..., StudentRecord],
    ) -> None:
        dune = make_book(1, "Dune", total_copies=3, borrowed_copies=1)
        emma = make_book(2, "Emma", total_copies=1, borrowed_copies=1)
        students = [
            make_student(1, "Asha", borrowing=dune),
            make_student(2, "Ravi", borrowing=emma),
            make_student(3, "Meera"),
        ]

        stats = summarize([dune, emma], students)

        assert stats.titles == 2
        assert stats.total_copies == 4
        assert stats.borrowed_copies == 2
        assert stats.available_copies == 2
        assert stats.sold_out_titles == 1
        assert stats.students == 3
        assert stats.borrowing_students == 2
