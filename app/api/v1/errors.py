"""Map service-layer errors to HTTP responses."""

import logging

from fastapi import HTTPException, status

from app.services.errors import (
    ConflictError,
    ConstraintViolationError,
    InvalidArgumentError,
    InvalidOperationError,
    NotFoundError,
    PermissionDeniedError,
    ServiceError,
    StorageError,
    StorageTimeoutError,
)

logger = logging.getLogger(__name__)

# Checked in order; subclasses must precede their bases.
_STATUS_BY_ERROR: tuple[tuple[type[ServiceError], int], ...] = (
    (InvalidArgumentError, status.HTTP_400_BAD_REQUEST),
    (InvalidOperationError, status.HTTP_400_BAD_REQUEST),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ConstraintViolationError, status.HTTP_409_CONFLICT),
    (StorageTimeoutError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def to_http_exception(e: ServiceError) -> HTTPException:
    """Return the HTTPException for a service error (500 for unknown kinds)."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(e, error_type):
            break
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    if status_code >= 500:
        logger.error(
            "Request failed",
            extra={"error": type(e).__name__, "reason": e.message[:500]},
        )
    return HTTPException(status_code=status_code, detail=e.message)
