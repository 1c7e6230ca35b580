"""PostgreSQL implementation of CourseRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.tables import ContentItemRow, CourseRow
from app.models.course import ContentItem, Course, ItemKind


class PgCourseRepo:
    """Satisfies the CourseRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_course(self, course_id: UUID) -> Course | None:
        row = await self._session.get(CourseRow, course_id)
        if row is None:
            return None
        return _row_to_course(row)

    async def list_courses(self) -> list[Course]:
        stmt = select(CourseRow).order_by(CourseRow.slug)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def list_items(self, course_id: UUID) -> list[ContentItem]:
        stmt = (
            select(ContentItemRow)
            .where(ContentItemRow.course_id == course_id)
            .order_by(ContentItemRow.position)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_item(r) for r in rows]

    async def get_item(self, item_id: UUID) -> ContentItem | None:
        row = await self._session.get(ContentItemRow, item_id)
        if row is None:
            return None
        return _row_to_item(row)

    async def add_course(self, course: Course, items: list[ContentItem]) -> None:
        try:
            async with self._session.begin_nested():
                self._session.add(
                    CourseRow(
                        id=course.id,
                        slug=course.slug,
                        title=course.title,
                        status=course.status,
                    )
                )
                # Flush the course first so the items' foreign key resolves.
                await self._session.flush()
                self._session.add_all(
                    ContentItemRow(
                        id=i.id,
                        course_id=i.course_id,
                        position=i.position,
                        kind=i.kind.value,
                        slug=i.slug,
                        title=i.title,
                        payload_ref=i.payload_ref,
                    )
                    for i in items
                )
                await self._session.flush()
        except IntegrityError:
            raise ValueError("course slug already exists") from None


def _row_to_course(row: CourseRow) -> Course:
    return Course(id=row.id, slug=row.slug, title=row.title, status=row.status)


def _row_to_item(row: ContentItemRow) -> ContentItem:
    return ContentItem(
        id=row.id,
        course_id=row.course_id,
        position=row.position,
        kind=ItemKind(row.kind),
        slug=row.slug,
        title=row.title,
        payload_ref=row.payload_ref or "",
    )
