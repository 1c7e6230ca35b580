"""Progress aggregation: completion set → percent + enrollment status.

recompute() always rebuilds progress from the authoritative completion
records for the course's current items; it never adjusts a running
counter.  Two recomputes over the same completion set therefore produce
the same Enrollment, no matter how the toggles that led there interleaved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from uuid import UUID

from app.core.errors import NotEnrolledError
from app.core.metrics import ENROLLMENTS_COMPLETED
from app.models.certificate import Certificate
from app.models.progress import Enrollment, EnrollmentStatus
from app.repos.unit_of_work import ProgressUnitOfWork
from app.services import certificate_issuer, content_registry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Progress:
    percent: int
    status: EnrollmentStatus
    completed_items: int
    total_items: int


@dataclass(frozen=True, slots=True)
class RecomputeResult:
    enrollment: Enrollment
    progress: Progress
    certificate: Certificate | None = None
    certificate_issued: bool = False


def compute_progress(completed_count: int, total: int) -> Progress:
    """Percent and status for `completed_count` of `total` items.

    Rounds half up, like the learner-facing progress bar does.  A course
    with no items is 0% and can never complete.  The percent is held at
    99 while any item is outstanding, so 100 always means COMPLETED.
    """
    if total <= 0:
        return Progress(0, EnrollmentStatus.IN_PROGRESS, 0, 0)
    completed_count = max(0, min(completed_count, total))
    if completed_count == total:
        return Progress(100, EnrollmentStatus.COMPLETED, completed_count, total)
    percent = (200 * completed_count + total) // (2 * total)
    return Progress(
        min(percent, 99), EnrollmentStatus.IN_PROGRESS, completed_count, total
    )


async def current_progress(
    uow: ProgressUnitOfWork, user_id: str, course_id: UUID
) -> Progress:
    items = await content_registry.list_items(uow, course_id)
    completed = await uow.completions.completed_item_ids(
        user_id, [i.id for i in items]
    )
    return compute_progress(len(completed), len(items))


async def recompute(
    uow: ProgressUnitOfWork, user_id: str, course_id: UUID, *, now: int
) -> RecomputeResult:
    """Rebuild the enrollment's progress and fire issuance on the completion edge.

    Must run inside uow.locked(user_id, course_id).
    """
    enrollment = await uow.enrollments.get(user_id, course_id)
    if enrollment is None:
        raise NotEnrolledError()

    progress = await current_progress(uow, user_id, course_id)

    if (
        progress.percent == enrollment.progress_percent
        and progress.status == enrollment.status
    ):
        return RecomputeResult(enrollment=enrollment, progress=progress)

    was_completed = enrollment.is_completed
    becomes_completed = progress.status == EnrollmentStatus.COMPLETED

    updated = replace(
        enrollment,
        progress_percent=progress.percent,
        status=progress.status,
        updated_at=now,
        completed_at=now if becomes_completed else None,
    )
    await uow.enrollments.save(updated)

    logger.info(
        "Progress recomputed enrollment=%s %d%% -> %d%% status=%s",
        enrollment.id,
        enrollment.progress_percent,
        progress.percent,
        progress.status,
        extra={
            "user_id": user_id,
            "course_id": str(course_id),
            "enrollment_id": str(enrollment.id),
        },
    )

    if becomes_completed and not was_completed:
        ENROLLMENTS_COMPLETED.inc()
        issued = await certificate_issuer.issue(uow, updated, now=now)
        return RecomputeResult(
            enrollment=updated,
            progress=progress,
            certificate=issued.certificate,
            certificate_issued=issued.created,
        )

    if was_completed and not becomes_completed:
        # Un-completing an item reopens the enrollment; the certificate stays.
        logger.info(
            "Enrollment reopened enrollment=%s, issued certificate kept",
            enrollment.id,
            extra={"user_id": user_id, "enrollment_id": str(enrollment.id)},
        )

    return RecomputeResult(enrollment=updated, progress=progress)
