from __future__ import annotations

from collections.abc import Collection
from typing import Protocol
from uuid import UUID

from app.models.progress import CompletionRecord


class CompletionRepo(Protocol):
    async def get(self, user_id: str, item_id: UUID) -> CompletionRecord | None: ...
    async def upsert(self, record: CompletionRecord) -> None: ...
    async def completed_item_ids(
        self, user_id: str, item_ids: Collection[UUID]
    ) -> set[UUID]: ...


class InMemoryCompletionRepo:
    def __init__(self) -> None:
        self._store: dict[tuple[str, UUID], CompletionRecord] = {}

    async def get(self, user_id: str, item_id: UUID) -> CompletionRecord | None:
        return self._store.get((user_id, item_id))

    async def upsert(self, record: CompletionRecord) -> None:
        # Keyed by (user, item): a toggle replaces the record, never appends.
        self._store[(record.user_id, record.item_id)] = record

    async def completed_item_ids(
        self, user_id: str, item_ids: Collection[UUID]
    ) -> set[UUID]:
        wanted = set(item_ids)
        return {
            item_id
            for (uid, item_id), record in self._store.items()
            if uid == user_id and item_id in wanted and record.completed
        }

    def snapshot(self) -> dict[tuple[str, UUID], CompletionRecord]:
        return dict(self._store)

    def restore(self, snapshot: dict[tuple[str, UUID], CompletionRecord]) -> None:
        self._store = dict(snapshot)
