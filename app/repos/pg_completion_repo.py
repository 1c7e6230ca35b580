"""PostgreSQL implementation of CompletionRepo."""

from __future__ import annotations

from collections.abc import Collection
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.tables import CompletionRecordRow
from app.models.progress import CompletionRecord


class PgCompletionRepo:
    """Satisfies the CompletionRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: str, item_id: UUID) -> CompletionRecord | None:
        # populate_existing: upsert() bypasses the identity map.
        stmt = select(CompletionRecordRow).where(
            CompletionRecordRow.user_id == user_id,
            CompletionRecordRow.item_id == item_id,
        ).execution_options(populate_existing=True)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return CompletionRecord(
            user_id=row.user_id,
            item_id=row.item_id,
            completed=row.completed,
            updated_at=row.updated_at,
        )

    async def upsert(self, record: CompletionRecord) -> None:
        stmt = insert(CompletionRecordRow).values(
            user_id=record.user_id,
            item_id=record.item_id,
            completed=record.completed,
            updated_at=record.updated_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[CompletionRecordRow.user_id, CompletionRecordRow.item_id],
            set_={
                "completed": stmt.excluded.completed,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await self._session.execute(stmt)

    async def completed_item_ids(
        self, user_id: str, item_ids: Collection[UUID]
    ) -> set[UUID]:
        if not item_ids:
            return set()
        stmt = select(CompletionRecordRow.item_id).where(
            CompletionRecordRow.user_id == user_id,
            CompletionRecordRow.item_id.in_(list(item_ids)),
            CompletionRecordRow.completed.is_(True),
        )
        return set((await self._session.execute(stmt)).scalars().all())
