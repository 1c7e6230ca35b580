"""Content item registry: a course's ordered curriculum.

Read-only from the progress core's point of view.  Items are ordered by
position, which is unique within a course, so the order is total.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from app.core.errors import CourseValidationError, NotFoundError
from app.models.course import ContentItem, Course, ItemKind
from app.repos.unit_of_work import ProgressUnitOfWork


@dataclass(frozen=True, slots=True)
class Neighbors:
    previous: ContentItem | None
    next: ContentItem | None


async def get_course(uow: ProgressUnitOfWork, course_id: UUID) -> Course:
    course = await uow.courses.get_course(course_id)
    if course is None:
        raise NotFoundError("course not found")
    return course


async def list_items(uow: ProgressUnitOfWork, course_id: UUID) -> list[ContentItem]:
    """Return the course's items in curriculum order.

    Raises NotFoundError if the course does not exist.  An existing course
    with no items returns an empty list.
    """
    await get_course(uow, course_id)
    items = await uow.courses.list_items(course_id)
    return sorted(items, key=lambda i: i.position)


async def get_item(uow: ProgressUnitOfWork, item_id: UUID) -> ContentItem:
    item = await uow.courses.get_item(item_id)
    if item is None:
        raise NotFoundError("content item not found")
    return item


def neighbors(items: list[ContentItem], position: int) -> Neighbors:
    """Previous/next item around `position` in an ordered item list."""
    for idx, item in enumerate(items):
        if item.position == position:
            prev_item = items[idx - 1] if idx > 0 else None
            next_item = items[idx + 1] if idx + 1 < len(items) else None
            return Neighbors(previous=prev_item, next=next_item)
    raise NotFoundError(f"no content item at position {position}")


def find_by_slug(items: list[ContentItem], slug: str) -> ContentItem:
    for item in items:
        if item.slug == slug:
            return item
    raise NotFoundError("content item not found")


def validate_curriculum(course: Course, items: list[ContentItem]) -> None:
    """Reject item lists that would break ordering or slug addressing."""
    positions = [i.position for i in items]
    if len(set(positions)) != len(positions):
        raise CourseValidationError("item positions must be unique within a course")
    slugs = [i.slug for i in items]
    if len(set(slugs)) != len(slugs):
        raise CourseValidationError("item slugs must be unique within a course")
    if any(i.course_id != course.id for i in items):
        raise CourseValidationError("every item must belong to the course")


async def publish_course(
    uow: ProgressUnitOfWork, course: Course, items: list[ContentItem]
) -> Course:
    """Course-authoring entry point used by the admin route and dev seeding."""
    validate_curriculum(course, items)
    try:
        await uow.courses.add_course(course, items)
    except ValueError as e:
        raise CourseValidationError(str(e)) from None
    return course


SAMPLE_COURSE_ID = UUID("00000000-0000-0000-0000-000000000001")


async def seed_sample_course(uow: ProgressUnitOfWork) -> None:
    """Seed a sample course for development with the in-memory store."""
    if await uow.courses.get_course(SAMPLE_COURSE_ID) is not None:
        return
    course = Course(
        id=SAMPLE_COURSE_ID,
        slug="intro-to-claude",
        title="Introduction to Claude",
        status="published",
    )
    items = [
        ContentItem.new(
            course_id=course.id,
            position=1,
            kind=ItemKind.MODULE,
            slug="what-is-claude",
            title="What is Claude?",
            payload_ref="https://videos.example.com/intro/what-is-claude.mp4",
        ),
        ContentItem.new(
            course_id=course.id,
            position=2,
            kind=ItemKind.MODULE,
            slug="prompting-basics",
            title="Prompting basics",
            payload_ref="https://videos.example.com/intro/prompting-basics.mp4",
        ),
        ContentItem.new(
            course_id=course.id,
            position=3,
            kind=ItemKind.WORKSHOP,
            slug="build-a-summarizer",
            title="Workshop: build a summarizer",
            payload_ref="Write a prompt that summarizes a support ticket in 3 bullets.",
        ),
    ]
    await publish_course(uow, course, items)
