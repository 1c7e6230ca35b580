"""Domain error taxonomy for progress tracking and certificate issuance.

Routes translate these into HTTP responses (see app/api/errors.py).
InvalidStateError is the odd one out: it signals a broken caller contract,
not a user mistake, and is logged as an invariant breach where raised.
"""

from __future__ import annotations


class ProgressError(Exception):
    """Base class for every error the progress core raises."""

    def __init__(self, message: str, code: str = "progress_error") -> None:
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(ProgressError):
    """Course, content item, or certificate does not exist."""

    def __init__(self, message: str = "not found") -> None:
        super().__init__(message, "not_found")


class NotEnrolledError(ProgressError):
    """Operation on a course the learner never enrolled in."""

    def __init__(self, message: str = "learner is not enrolled in this course") -> None:
        super().__init__(message, "not_enrolled")


class AlreadyEnrolledError(ProgressError):
    def __init__(self, message: str = "already enrolled") -> None:
        super().__init__(message, "already_enrolled")


class ConflictError(ProgressError):
    """A concurrent write won a race at the storage layer.  Safe to retry once."""

    def __init__(self, message: str = "concurrent update, retry the request") -> None:
        super().__init__(message, "conflict")


class InvalidStateError(ProgressError):
    """Certificate issuance attempted on an enrollment that is not COMPLETED."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "invalid_state")


class CourseValidationError(ProgressError):
    """Course content rejected by the authoring path (duplicate positions, slugs)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "invalid_course")
