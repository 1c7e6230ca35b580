from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from app.api.dependencies import get_uow, require_role
from app.api.errors import to_http_exception
from app.api.schemas import CourseOut, ItemOut, course_out, item_out
from app.core.errors import ProgressError
from app.models.course import ContentItem, Course, ItemKind
from app.models.principal import Principal
from app.repos.unit_of_work import ProgressUnitOfWork
from app.services import content_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


class ItemIn(BaseModel):
    slug: str = Field(min_length=1, max_length=200)
    title: str = Field(min_length=1, max_length=300)
    kind: ItemKind
    payload_ref: str = ""
    position: int | None = Field(default=None, ge=1)  # defaults to list order


class CourseIn(BaseModel):
    slug: str = Field(min_length=1, max_length=200)
    title: str = Field(min_length=1, max_length=300)
    items: list[ItemIn] = []


class PublishedCourseOut(BaseModel):
    course: CourseOut
    items: list[ItemOut]


@router.post(
    "/courses",
    response_model=PublishedCourseOut,
    status_code=status.HTTP_201_CREATED,
)
async def admin_publish_course(
    body: CourseIn,
    principal: Annotated[Principal, Depends(require_role("admin"))],
    uow: Annotated[ProgressUnitOfWork, Depends(get_uow)],
) -> PublishedCourseOut:
    course = Course.new(slug=body.slug, title=body.title)
    items = [
        ContentItem.new(
            course_id=course.id,
            position=i.position if i.position is not None else idx + 1,
            kind=i.kind,
            slug=i.slug,
            title=i.title,
            payload_ref=i.payload_ref,
        )
        for idx, i in enumerate(body.items)
    ]

    try:
        await content_registry.publish_course(uow, course, items)
    except ProgressError as e:
        raise to_http_exception(e) from None

    logger.info(
        "Course published slug=%s items=%d by user=%s",
        course.slug,
        len(items),
        principal.user_id,
        extra={"course_id": str(course.id), "user_id": principal.user_id},
    )
    ordered = sorted(items, key=lambda i: i.position)
    return PublishedCourseOut(
        course=course_out(course), items=[item_out(i) for i in ordered]
    )
