from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID, uuid4


class ItemKind(StrEnum):
    MODULE = "MODULE"
    WORKSHOP = "WORKSHOP"


@dataclass(frozen=True, slots=True)
class Course:
    id: UUID
    slug: str
    title: str
    status: str = "draft"  # draft|published|retired

    @staticmethod
    def new(*, slug: str, title: str, status: str = "published") -> Course:
        return Course(id=uuid4(), slug=slug, title=title, status=status)

    @property
    def is_published(self) -> bool:
        return self.status == "published"


@dataclass(frozen=True, slots=True)
class ContentItem:
    """One module or workshop in a course's curriculum.

    `position` orders the curriculum and is unique within a course.
    `payload_ref` is a video/document URL for modules or the instructions
    for workshops; the progress core never looks inside it.
    """

    id: UUID
    course_id: UUID
    position: int
    kind: ItemKind
    slug: str
    title: str
    payload_ref: str = ""

    @staticmethod
    def new(
        *,
        course_id: UUID,
        position: int,
        kind: ItemKind,
        slug: str,
        title: str,
        payload_ref: str = "",
    ) -> ContentItem:
        return ContentItem(
            id=uuid4(),
            course_id=course_id,
            position=position,
            kind=kind,
            slug=slug,
            title=title,
            payload_ref=payload_ref,
        )
