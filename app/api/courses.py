"""Course, enrollment, and learner course-page endpoints.

  GET  /v1/courses                            published courses
  POST /v1/courses/{course_id}/enroll         create the enrollment (0%, IN_PROGRESS)
  GET  /v1/courses/{course_id}/outline        items with the learner's ticks + progress
  GET  /v1/courses/{course_id}/items/{slug}   one item, its tick, prev/next navigation
  GET  /v1/courses/{course_id}/certificate    certificate, or the locked view with progress
"""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from app.api.dependencies import get_uow, require_user
from app.api.errors import to_http_exception
from app.api.schemas import (
    CertificateOut,
    CourseOut,
    EnrollmentOut,
    ItemOut,
    ProgressOut,
    certificate_out,
    course_out,
    enrollment_out,
    item_out,
    progress_out,
)
from app.core.errors import ProgressError
from app.models.principal import Principal
from app.repos.unit_of_work import ProgressUnitOfWork
from app.services import progress_service

router = APIRouter(prefix="/v1/courses", tags=["courses"])


class OutlineItemOut(ItemOut):
    completed: bool


class CourseOutlineOut(BaseModel):
    course: CourseOut
    items: list[OutlineItemOut]
    progress: ProgressOut


class ItemViewOut(BaseModel):
    course: CourseOut
    item: ItemOut
    payload_ref: str
    completed: bool
    previous: ItemOut | None
    next: ItemOut | None


class CertificateStatusOut(BaseModel):
    available: bool
    course: CourseOut
    certificate: CertificateOut | None
    progress: ProgressOut


@router.get("", response_model=list[CourseOut])
async def list_courses(
    _principal: Annotated[Principal, Depends(require_user)],
    uow: Annotated[ProgressUnitOfWork, Depends(get_uow)],
) -> list[CourseOut]:
    courses = await uow.courses.list_courses()
    return [course_out(c) for c in courses if c.is_published]


@router.post(
    "/{course_id}/enroll",
    response_model=EnrollmentOut,
    status_code=status.HTTP_201_CREATED,
)
async def enroll_in_course(
    course_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    uow: Annotated[ProgressUnitOfWork, Depends(get_uow)],
) -> EnrollmentOut:
    try:
        enrollment = await progress_service.enroll(uow, principal.user_id, course_id)
    except ProgressError as e:
        raise to_http_exception(e) from None
    return enrollment_out(enrollment)


@router.get("/{course_id}/outline", response_model=CourseOutlineOut)
async def get_course_outline(
    course_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    uow: Annotated[ProgressUnitOfWork, Depends(get_uow)],
) -> CourseOutlineOut:
    try:
        outline = await progress_service.get_course_outline(
            uow, principal.user_id, course_id
        )
    except ProgressError as e:
        raise to_http_exception(e) from None

    return CourseOutlineOut(
        course=course_out(outline.course),
        items=[
            OutlineItemOut(**item_out(entry.item).model_dump(), completed=entry.completed)
            for entry in outline.entries
        ],
        progress=progress_out(outline.progress),
    )


@router.get("/{course_id}/items/{item_slug}", response_model=ItemViewOut)
async def get_item_view(
    course_id: UUID,
    item_slug: str,
    principal: Annotated[Principal, Depends(require_user)],
    uow: Annotated[ProgressUnitOfWork, Depends(get_uow)],
) -> ItemViewOut:
    try:
        view = await progress_service.get_item_view(
            uow, principal.user_id, course_id, item_slug
        )
    except ProgressError as e:
        raise to_http_exception(e) from None

    return ItemViewOut(
        course=course_out(view.course),
        item=item_out(view.item),
        payload_ref=view.item.payload_ref,
        completed=view.completed,
        previous=item_out(view.previous) if view.previous is not None else None,
        next=item_out(view.next) if view.next is not None else None,
    )


@router.get("/{course_id}/certificate", response_model=CertificateStatusOut)
async def get_course_certificate(
    course_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    uow: Annotated[ProgressUnitOfWork, Depends(get_uow)],
) -> CertificateStatusOut:
    """Certificate for a completed course.

    Not completed yet: 200 with available=false and the current progress,
    so the page can render its locked state and progress bar.
    """
    try:
        certificate = await progress_service.get_certificate(
            uow, principal.user_id, course_id
        )
        snapshot = await progress_service.get_progress(uow, principal.user_id, course_id)
        course = await uow.courses.get_course(course_id)
    except ProgressError as e:
        raise to_http_exception(e) from None

    assert course is not None  # get_progress raised NotFoundError otherwise
    return CertificateStatusOut(
        available=certificate is not None,
        course=course_out(course),
        certificate=certificate_out(certificate) if certificate is not None else None,
        progress=progress_out(snapshot),
    )
