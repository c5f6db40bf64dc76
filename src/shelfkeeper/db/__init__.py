# ABOUTME: Public API for the Shelfkeeper database layer.
# ABOUTME: Exports connection management, the catalog and roster stores, and record types.

from shelfkeeper.db.catalog import LibraryCatalog, available_copies
from shelfkeeper.db.connection import DEFAULT_DB_PATH, open_library, transaction
from shelfkeeper.db.mapping import (
    BRANCHES,
    BookFilter,
    BookRecord,
    LoanEvent,
    NewBook,
    NewStudent,
    StudentRecord,
)
from shelfkeeper.db.roster import StudentRoster

__all__ = [
    "BRANCHES",
    "DEFAULT_DB_PATH",
    "BookFilter",
    "BookRecord",
    "LibraryCatalog",
    "LoanEvent",
    "NewBook",
    "NewStudent",
    "StudentRecord",
    "StudentRoster",
    "available_copies",
    "open_library",
    "transaction",
]
