# ABOUTME: Exception hierarchy shared by the Shelfkeeper stores, lending engine, and CLI.
# ABOUTME: Separates "not found", "not allowed right now", bad input, and storage failures.


class ShelfkeeperError(Exception):
    """Base class for every error Shelfkeeper raises on purpose."""


class NotFoundError(ShelfkeeperError):
    """Raised when a referenced book or student does not exist."""


class ValidationError(ShelfkeeperError):
    """Raised when input is malformed. Always raised before any write."""


class NotAllowedError(ShelfkeeperError):
    """Raised when an operation is not allowed in the current state."""


class CapacityError(NotAllowedError):
    """Raised when a book has no copies left to lend."""


class ConflictError(NotAllowedError):
    """Raised when a student's loan state forbids the operation."""


class StorageError(ShelfkeeperError):
    """Raised when the underlying database fails."""


class DuplicateAccountError(ConflictError):
    """Raised when an account id is already linked to another student."""
