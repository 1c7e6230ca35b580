from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID, uuid4


class EnrollmentStatus(StrEnum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


@dataclass(frozen=True, slots=True)
class CompletionRecord:
    """Whether a learner has finished one content item.

    At most one record exists per (user_id, item_id); toggling overwrites it.
    `updated_at` is None only for the placeholder returned when a learner
    un-marks an item they never marked.
    """

    user_id: str
    item_id: UUID
    completed: bool
    updated_at: int | None = None


@dataclass(frozen=True, slots=True)
class Enrollment:
    """A learner's relationship with a course plus its derived progress.

    progress_percent and status are written only by the progress aggregator:
    status == COMPLETED exactly when progress_percent == 100.
    """

    id: UUID
    user_id: str
    course_id: UUID
    enrolled_at: int
    updated_at: int
    progress_percent: int = 0
    status: EnrollmentStatus = EnrollmentStatus.IN_PROGRESS
    completed_at: int | None = None

    @staticmethod
    def new(*, user_id: str, course_id: UUID, enrolled_at: int) -> Enrollment:
        return Enrollment(
            id=uuid4(),
            user_id=user_id,
            course_id=course_id,
            enrolled_at=enrolled_at,
            updated_at=enrolled_at,
        )

    @property
    def is_completed(self) -> bool:
        return self.status == EnrollmentStatus.COMPLETED


@dataclass(frozen=True, slots=True)
class ProgressSnapshot:
    """Read model returned by get_progress."""

    course_id: UUID
    progress_percent: int
    status: EnrollmentStatus
    completed_items: int
    total_items: int
