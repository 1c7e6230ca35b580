"""Translate progress-core errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from app.core.errors import (
    AlreadyEnrolledError,
    ConflictError,
    CourseValidationError,
    InvalidStateError,
    NotEnrolledError,
    NotFoundError,
    ProgressError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[ProgressError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (NotEnrolledError, status.HTTP_403_FORBIDDEN),
    (AlreadyEnrolledError, status.HTTP_409_CONFLICT),
    (ConflictError, status.HTTP_409_CONFLICT),
    (CourseValidationError, status.HTTP_422_UNPROCESSABLE_CONTENT),
)


def to_http_exception(error: ProgressError) -> HTTPException:
    if isinstance(error, InvalidStateError):
        # Already logged as an invariant breach where it was raised; the
        # learner only needs to know something went wrong on our side.
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="internal error",
        )

    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            headers = {"Retry-After": "1"} if isinstance(error, ConflictError) else None
            return HTTPException(
                status_code=status_code,
                detail={"code": error.code, "message": error.message},
                headers=headers,
            )

    logger.error("Unmapped progress error %s: %s", type(error).__name__, error)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="internal error",
    )
