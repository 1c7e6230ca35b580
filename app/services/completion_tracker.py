"""Completion tracking: the only writer of CompletionRecords.

set_completion() is idempotent.  Sending the value the record already
holds changes nothing, not even updated_at, so clients may retry freely.
A real change is written and followed by a synchronous progress
recompute under the same lock, so the enrollment returned (and any later
read) already reflects it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from app.core.errors import NotEnrolledError
from app.core.metrics import COMPLETION_TOGGLES
from app.models.certificate import Certificate
from app.models.progress import CompletionRecord, Enrollment
from app.repos.unit_of_work import ProgressUnitOfWork
from app.services import content_registry, progress_aggregator

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CompletionOutcome:
    record: CompletionRecord
    changed: bool
    enrollment: Enrollment
    certificate: Certificate | None = None
    certificate_issued: bool = False


async def set_completion(
    uow: ProgressUnitOfWork,
    user_id: str,
    item_id: UUID,
    completed: bool,
    *,
    now: int,
) -> CompletionOutcome:
    """Mark an item complete or incomplete for a learner.

    Raises NotFoundError for an unknown item and NotEnrolledError when the
    learner is not enrolled in the item's course.
    """
    item = await content_registry.get_item(uow, item_id)
    log_ctx = {
        "user_id": user_id,
        "course_id": str(item.course_id),
        "item_id": str(item_id),
    }

    async with uow.locked(user_id, item.course_id):
        enrollment = await uow.enrollments.get(user_id, item.course_id)
        if enrollment is None:
            logger.warning(
                "Completion rejected, not enrolled user=%s course=%s",
                user_id,
                item.course_id,
                extra=log_ctx,
            )
            raise NotEnrolledError()

        current = await uow.completions.get(user_id, item_id)
        current_value = current.completed if current is not None else False
        if current_value == completed:
            COMPLETION_TOGGLES.labels(result="noop").inc()
            record = current or CompletionRecord(
                user_id=user_id, item_id=item_id, completed=False
            )
            return CompletionOutcome(record=record, changed=False, enrollment=enrollment)

        record = CompletionRecord(
            user_id=user_id, item_id=item_id, completed=completed, updated_at=now
        )
        await uow.completions.upsert(record)
        COMPLETION_TOGGLES.labels(result="changed").inc()
        logger.info(
            "Item %s user=%s item=%s",
            "completed" if completed else "marked incomplete",
            user_id,
            item_id,
            extra=log_ctx,
        )

        result = await progress_aggregator.recompute(
            uow, user_id, item.course_id, now=now
        )

    return CompletionOutcome(
        record=record,
        changed=True,
        enrollment=result.enrollment,
        certificate=result.certificate,
        certificate_issued=result.certificate_issued,
    )
