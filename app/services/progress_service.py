"""Operations the route layer calls.

The three core operations:

  toggle_completion(user, item, completed) -> ToggleResult
  get_progress(user, course)               -> ProgressSnapshot
  get_certificate(user, course)            -> Certificate | None

plus the read models behind the course pages (outline, item view with
navigation), certificate verification, and enrollment, which the core
consumes but does not trigger on its own.

Every function takes the learner identity explicitly; nothing here reads
a request-global "current user".
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass
from uuid import UUID

from app.core.errors import (
    AlreadyEnrolledError,
    ConflictError,
    NotEnrolledError,
    NotFoundError,
)
from app.core.metrics import CONFLICT_RETRIES
from app.models.certificate import Certificate
from app.models.course import ContentItem, Course
from app.models.progress import CompletionRecord, Enrollment, ProgressSnapshot
from app.repos.unit_of_work import ProgressUnitOfWork
from app.services import (
    certificate_issuer,
    completion_tracker,
    content_registry,
    progress_aggregator,
)

logger = logging.getLogger(__name__)


def _now() -> int:
    return int(datetime.datetime.now(datetime.UTC).timestamp())


@dataclass(frozen=True, slots=True)
class ToggleResult:
    """Authoritative state after a toggle.

    Clients apply the toggle optimistically and reconcile against this.
    """

    record: CompletionRecord
    enrollment: Enrollment
    certificate_issued: bool
    certificate: Certificate | None = None


@dataclass(frozen=True, slots=True)
class OutlineEntry:
    item: ContentItem
    completed: bool


@dataclass(frozen=True, slots=True)
class CourseOutline:
    course: Course
    entries: list[OutlineEntry]
    progress: ProgressSnapshot


@dataclass(frozen=True, slots=True)
class ItemView:
    course: Course
    item: ContentItem
    completed: bool
    previous: ContentItem | None
    next: ContentItem | None


@dataclass(frozen=True, slots=True)
class CertificateVerification:
    certificate: Certificate
    course_title: str


async def _require_enrollment(
    uow: ProgressUnitOfWork, user_id: str, course_id: UUID
) -> Enrollment:
    enrollment = await uow.enrollments.get(user_id, course_id)
    if enrollment is None:
        raise NotEnrolledError()
    return enrollment


# ---------------------------------------------------------------------------
# Enrollment (collaborator entry point)
# ---------------------------------------------------------------------------


async def enroll(
    uow: ProgressUnitOfWork, user_id: str, course_id: UUID, *, now: int | None = None
) -> Enrollment:
    course = await content_registry.get_course(uow, course_id)
    if not course.is_published:
        raise NotFoundError("course not found")

    enrollment = Enrollment.new(
        user_id=user_id,
        course_id=course_id,
        enrolled_at=now if now is not None else _now(),
    )
    try:
        await uow.enrollments.add(enrollment)
    except ValueError:
        raise AlreadyEnrolledError() from None

    logger.info(
        "Enrolled user=%s course=%s",
        user_id,
        course_id,
        extra={"user_id": user_id, "course_id": str(course_id)},
    )
    return enrollment


# ---------------------------------------------------------------------------
# Core operations
# ---------------------------------------------------------------------------


async def toggle_completion(
    uow: ProgressUnitOfWork,
    user_id: str,
    item_id: UUID,
    completed: bool,
    *,
    now: int | None = None,
) -> ToggleResult:
    """Set an item's completion and return the reconciled enrollment.

    A ConflictError from the store is retried once; a second conflict
    propagates to the caller.
    """
    ts = now if now is not None else _now()
    try:
        outcome = await completion_tracker.set_completion(
            uow, user_id, item_id, completed, now=ts
        )
    except ConflictError:
        CONFLICT_RETRIES.inc()
        logger.warning(
            "Toggle lost a storage race, retrying once user=%s item=%s",
            user_id,
            item_id,
            extra={"user_id": user_id, "item_id": str(item_id)},
        )
        outcome = await completion_tracker.set_completion(
            uow, user_id, item_id, completed, now=ts
        )

    return ToggleResult(
        record=outcome.record,
        enrollment=outcome.enrollment,
        certificate_issued=outcome.certificate_issued,
        certificate=outcome.certificate,
    )


async def get_progress(
    uow: ProgressUnitOfWork, user_id: str, course_id: UUID
) -> ProgressSnapshot:
    await content_registry.get_course(uow, course_id)
    enrollment = await _require_enrollment(uow, user_id, course_id)
    progress = await progress_aggregator.current_progress(uow, user_id, course_id)
    return ProgressSnapshot(
        course_id=course_id,
        progress_percent=enrollment.progress_percent,
        status=enrollment.status,
        completed_items=progress.completed_items,
        total_items=progress.total_items,
    )


async def get_certificate(
    uow: ProgressUnitOfWork,
    user_id: str,
    course_id: UUID,
    *,
    now: int | None = None,
) -> Certificate | None:
    """Return the enrollment's certificate, issuing it lazily if it is owed.

    An enrollment that is COMPLETED but has no certificate (completed
    before issuance existed, or a lost issuance) is healed here.
    """
    await content_registry.get_course(uow, course_id)
    enrollment = await _require_enrollment(uow, user_id, course_id)

    certificate = await uow.certificates.get_by_enrollment(enrollment.id)
    if certificate is not None or not enrollment.is_completed:
        return certificate

    async with uow.locked(user_id, course_id):
        # Re-read under the lock: a concurrent toggle may have changed it.
        enrollment = await _require_enrollment(uow, user_id, course_id)
        if not enrollment.is_completed:
            return await uow.certificates.get_by_enrollment(enrollment.id)
        issued = await certificate_issuer.issue(
            uow,
            enrollment,
            now=now if now is not None else _now(),
            trigger="self_heal",
        )

    if issued.created:
        logger.info(
            "Self-healed missing certificate enrollment=%s",
            enrollment.id,
            extra={"user_id": user_id, "enrollment_id": str(enrollment.id)},
        )
    return issued.certificate


# ---------------------------------------------------------------------------
# Read models for the course pages
# ---------------------------------------------------------------------------


async def get_course_outline(
    uow: ProgressUnitOfWork, user_id: str, course_id: UUID
) -> CourseOutline:
    course = await content_registry.get_course(uow, course_id)
    enrollment = await _require_enrollment(uow, user_id, course_id)
    items = await content_registry.list_items(uow, course_id)
    done = await uow.completions.completed_item_ids(user_id, [i.id for i in items])

    return CourseOutline(
        course=course,
        entries=[OutlineEntry(item=i, completed=i.id in done) for i in items],
        progress=ProgressSnapshot(
            course_id=course_id,
            progress_percent=enrollment.progress_percent,
            status=enrollment.status,
            completed_items=len(done),
            total_items=len(items),
        ),
    )


async def get_item_view(
    uow: ProgressUnitOfWork, user_id: str, course_id: UUID, item_slug: str
) -> ItemView:
    course = await content_registry.get_course(uow, course_id)
    await _require_enrollment(uow, user_id, course_id)
    items = await content_registry.list_items(uow, course_id)
    item = content_registry.find_by_slug(items, item_slug)
    around = content_registry.neighbors(items, item.position)
    record = await uow.completions.get(user_id, item.id)

    return ItemView(
        course=course,
        item=item,
        completed=record is not None and record.completed,
        previous=around.previous,
        next=around.next,
    )


async def verify_certificate(
    uow: ProgressUnitOfWork, certificate_code: str
) -> CertificateVerification:
    """Public lookup by certificate code.  Codes are matched case-insensitively."""
    certificate = await uow.certificates.get_by_code(certificate_code.strip().upper())
    if certificate is None:
        raise NotFoundError("certificate not found")
    course = await uow.courses.get_course(certificate.course_id)
    return CertificateVerification(
        certificate=certificate,
        course_title=course.title if course is not None else "",
    )
