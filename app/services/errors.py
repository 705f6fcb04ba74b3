"""Service-layer errors and translation of SQLAlchemy failures into them."""

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

# PostgreSQL SQLSTATE codes we classify explicitly.
PG_FOREIGN_KEY_VIOLATION = "23503"
PG_UNIQUE_VIOLATION = "23505"
PG_QUERY_CANCELED = "57014"


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidArgumentError(ServiceError):
    """Raised when an identifier or argument is malformed."""


class NotFoundError(ServiceError):
    """Raised when the target row is absent or vanished mid-transaction."""


class InvalidOperationError(ServiceError):
    """Raised when a well-formed request is not allowed (e.g. self-deletion)."""


class PermissionDeniedError(ServiceError):
    """Raised when the caller may not act on an existing row."""


class ConflictError(ServiceError):
    """Raised when a unique value (such as an email) is already taken."""


class ConstraintViolationError(ServiceError):
    """Raised when the database rejects a write on an integrity constraint."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.code = code
        super().__init__(message)


class StorageError(ServiceError):
    """Raised for connection loss and unclassified database failures."""


class StorageTimeoutError(StorageError):
    """Raised when the database cancels a statement on timeout."""


def _sqlstate(exc: SQLAlchemyError) -> str | None:
    """Return the driver SQLSTATE for a DBAPI-backed error, if any."""
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def translate_db_error(exc: SQLAlchemyError, action: str = "complete the operation") -> ServiceError:
    """
    Map a SQLAlchemy exception onto the service error taxonomy.

    Integrity failures become ConstraintViolationError, statement timeouts
    become StorageTimeoutError and everything else becomes StorageError.
    """
    code = _sqlstate(exc)
    if isinstance(exc, IntegrityError):
        orig_text = str(getattr(exc, "orig", exc)).lower()
        if code == PG_FOREIGN_KEY_VIOLATION or "foreign key" in orig_text:
            return ConstraintViolationError(
                f"Cannot {action} due to foreign key constraints.",
                code=PG_FOREIGN_KEY_VIOLATION,
            )
        return ConstraintViolationError(
            f"Cannot {action}: database constraint violation.",
            code=code,
        )
    if isinstance(exc, OperationalError) and code == PG_QUERY_CANCELED:
        return StorageTimeoutError(f"Timed out while trying to {action}.")
    return StorageError(f"Database error while trying to {action}.")
