"""Completion toggles and progress reads.

Toggle sequence:
  Client -> PUT /v1/progress/items/{item_id} {"completed": true}
  -> upsert completion record (no-op if unchanged)
  -> recompute enrollment percent/status
  -> issue certificate on the IN_PROGRESS -> COMPLETED edge
  -> 200 with the authoritative enrollment state

The client flips the checkbox optimistically and reconciles with the
response body; on any error it reverts.
"""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.api.dependencies import get_uow, require_user
from app.api.errors import to_http_exception
from app.api.ratelimit import require_rate_limit
from app.api.schemas import (
    CertificateOut,
    EnrollmentOut,
    ProgressOut,
    certificate_out,
    enrollment_out,
    progress_out,
)
from app.core.errors import ProgressError
from app.models.principal import Principal
from app.repos.unit_of_work import ProgressUnitOfWork
from app.services import progress_service
from app.services.rate_limiter import TOGGLE_LIMIT

router = APIRouter(prefix="/v1/progress", tags=["progress"])


class CompletionIn(BaseModel):
    completed: bool


class ToggleOut(BaseModel):
    item_id: str
    completed: bool
    updated_at: int | None
    enrollment: EnrollmentOut
    certificate_issued: bool
    certificate: CertificateOut | None


@router.put(
    "/items/{item_id}",
    response_model=ToggleOut,
    dependencies=[Depends(require_rate_limit(TOGGLE_LIMIT))],
)
async def set_item_completion(
    item_id: UUID,
    body: CompletionIn,
    principal: Annotated[Principal, Depends(require_user)],
    uow: Annotated[ProgressUnitOfWork, Depends(get_uow)],
) -> ToggleOut:
    try:
        result = await progress_service.toggle_completion(
            uow, principal.user_id, item_id, body.completed
        )
    except ProgressError as e:
        raise to_http_exception(e) from None

    return ToggleOut(
        item_id=str(result.record.item_id),
        completed=result.record.completed,
        updated_at=result.record.updated_at,
        enrollment=enrollment_out(result.enrollment),
        certificate_issued=result.certificate_issued,
        certificate=(
            certificate_out(result.certificate)
            if result.certificate is not None
            else None
        ),
    )


@router.get("/courses/{course_id}", response_model=ProgressOut)
async def get_course_progress(
    course_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    uow: Annotated[ProgressUnitOfWork, Depends(get_uow)],
) -> ProgressOut:
    try:
        snapshot = await progress_service.get_progress(uow, principal.user_id, course_id)
    except ProgressError as e:
        raise to_http_exception(e) from None
    return progress_out(snapshot)
