from __future__ import annotations

from typing import Protocol
from uuid import UUID

from app.models.course import ContentItem, Course


class CourseRepo(Protocol):
    async def get_course(self, course_id: UUID) -> Course | None: ...
    async def list_courses(self) -> list[Course]: ...
    async def list_items(self, course_id: UUID) -> list[ContentItem]: ...
    async def get_item(self, item_id: UUID) -> ContentItem | None: ...
    async def add_course(self, course: Course, items: list[ContentItem]) -> None: ...


class InMemoryCourseRepo:
    def __init__(self) -> None:
        self._courses: dict[UUID, Course] = {}
        self._items: dict[UUID, ContentItem] = {}

    async def get_course(self, course_id: UUID) -> Course | None:
        return self._courses.get(course_id)

    async def list_courses(self) -> list[Course]:
        return sorted(self._courses.values(), key=lambda c: c.slug)

    async def list_items(self, course_id: UUID) -> list[ContentItem]:
        items = [i for i in self._items.values() if i.course_id == course_id]
        return sorted(items, key=lambda i: i.position)

    async def get_item(self, item_id: UUID) -> ContentItem | None:
        return self._items.get(item_id)

    async def add_course(self, course: Course, items: list[ContentItem]) -> None:
        if any(c.slug == course.slug for c in self._courses.values()):
            raise ValueError("course slug already exists")
        self._courses[course.id] = course
        for item in items:
            self._items[item.id] = item

    def clear(self) -> None:
        self._courses.clear()
        self._items.clear()
