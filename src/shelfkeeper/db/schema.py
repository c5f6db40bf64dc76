# ABOUTME: SQL DDL statements for the Shelfkeeper library database schema.
# ABOUTME: Defines the books and students tables, indexes, and numbered migrations.

SCHEMA_V1 = """
-- Book catalog; borrowed_copies is the denormalized count of active loans
CREATE TABLE books (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    title           TEXT NOT NULL,
    author          TEXT NOT NULL,
    edition         TEXT NOT NULL,
    category        TEXT NOT NULL,
    year_published  INTEGER NOT NULL,
    total_copies    INTEGER NOT NULL CHECK (total_copies >= 1),
    borrowed_copies INTEGER NOT NULL DEFAULT 0
                    CHECK (borrowed_copies >= 0 AND borrowed_copies <= total_copies),
    created_at      TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now')),
    updated_at      TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now'))
);

CREATE INDEX idx_books_merge_key ON books(title, author, edition);
CREATE INDEX idx_books_created_at ON books(created_at);

-- Student roster; the active loan lives inline on the student row.
-- borrowed_book_id is not a foreign key: a loan outlives its book.
CREATE TABLE students (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id             TEXT UNIQUE,
    name                TEXT NOT NULL,
    branch              TEXT NOT NULL
                        CHECK (branch IN ('CS', 'IT', 'ECE', 'EEE', 'MECH', 'CIVIL')),
    section             INTEGER NOT NULL CHECK (section > 0),
    phone               TEXT NOT NULL,
    currently_borrowing TEXT NOT NULL DEFAULT 'NO'
                        CHECK (currently_borrowing IN ('YES', 'NO')),
    borrowed_book_id    INTEGER,
    borrowed_book_name  TEXT,
    borrowed_date       TEXT,
    days_borrowed       INTEGER NOT NULL DEFAULT 0,
    created_at          TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now')),
    updated_at          TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now')),
    CHECK ((currently_borrowing = 'YES') = (borrowed_book_id IS NOT NULL))
);

CREATE INDEX idx_students_borrowing ON students(currently_borrowing, borrowed_date);

-- Schema versioning for future migrations
CREATE TABLE schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

INSERT INTO schema_version (version) VALUES (1);
"""

# V2: append-only audit log of borrow/return events
MIGRATION_V2 = """
CREATE TABLE IF NOT EXISTS loan_events (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    book_id     INTEGER NOT NULL,
    student_id  INTEGER NOT NULL,
    action      TEXT NOT NULL CHECK (action IN ('borrow', 'return')),
    occurred_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_loan_events_student ON loan_events(student_id);
CREATE INDEX IF NOT EXISTS idx_loan_events_book ON loan_events(book_id);

INSERT INTO schema_version (version) VALUES (2);
"""

MIGRATIONS: list[tuple[int, str]] = [
    (2, MIGRATION_V2),
]
