"""
core/errors.py -- Persistence error taxonomy.

Stores catch SQLAlchemyError at their boundary, log it, and re-raise one of
these. api/main.py registers a single exception handler for StoreError that
turns code/status_code into the standard error envelope, so route handlers
never need a try/except for database failures.

"Not found" is deliberately absent: stores report it as None (get) or False
(update/delete), and routes turn that into a 404.
"""


class StoreError(Exception):
    """Base class for database failures surfaced to the API layer."""

    code = "store_error"
    status_code = 500

    def __init__(self, message: str = "Database operation failed.") -> None:
        super().__init__(message)
        self.message = message


class QueryFailed(StoreError):
    code = "query_failed"


class InsertFailed(StoreError):
    code = "insert_failed"


class DuplicateEmail(InsertFailed):
    """Raised when a user row with the same email already exists."""

    code = "conflict"
    status_code = 409


class UpdateFailed(StoreError):
    code = "update_failed"


class DeleteFailed(StoreError):
    code = "delete_failed"
