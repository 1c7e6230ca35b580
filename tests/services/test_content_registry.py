from __future__ import annotations

import asyncio
import uuid

import pytest

from app.core.errors import CourseValidationError, NotFoundError
from app.models.course import ContentItem, ItemKind
from app.repos.unit_of_work import InMemoryUnitOfWork
from app.services import content_registry
from app.services.content_registry import SAMPLE_COURSE_ID, find_by_slug, neighbors
from tests.conftest import build_course, publish_test_course


def test_list_items_returns_position_order(uow: InMemoryUnitOfWork) -> None:
    course, items = build_course(4)
    shuffled = [items[2], items[0], items[3], items[1]]
    asyncio.run(content_registry.publish_course(uow, course, shuffled))

    listed = asyncio.run(content_registry.list_items(uow, course.id))
    assert [i.position for i in listed] == [1, 2, 3, 4]


def test_list_items_empty_course(uow: InMemoryUnitOfWork) -> None:
    course, _ = publish_test_course(0)
    assert asyncio.run(content_registry.list_items(uow, course.id)) == []


def test_list_items_unknown_course(uow: InMemoryUnitOfWork) -> None:
    with pytest.raises(NotFoundError):
        asyncio.run(content_registry.list_items(uow, uuid.uuid4()))


def test_neighbors_middle_first_and_last() -> None:
    _course, items = build_course(3)

    middle = neighbors(items, 2)
    assert middle.previous == items[0]
    assert middle.next == items[2]

    first = neighbors(items, 1)
    assert first.previous is None
    assert first.next == items[1]

    last = neighbors(items, 3)
    assert last.previous == items[1]
    assert last.next is None


def test_neighbors_single_item() -> None:
    _course, items = build_course(1)
    around = neighbors(items, 1)
    assert around.previous is None
    assert around.next is None


def test_neighbors_unknown_position() -> None:
    _course, items = build_course(2)
    with pytest.raises(NotFoundError):
        neighbors(items, 7)


def test_find_by_slug() -> None:
    _course, items = build_course(3)
    assert find_by_slug(items, "item-2") == items[1]
    with pytest.raises(NotFoundError):
        find_by_slug(items, "nope")


def test_publish_rejects_duplicate_positions(uow: InMemoryUnitOfWork) -> None:
    course, items = build_course(1)
    dup = ContentItem.new(
        course_id=course.id, position=1, kind=ItemKind.MODULE, slug="other", title="Other"
    )
    with pytest.raises(CourseValidationError, match="positions"):
        asyncio.run(content_registry.publish_course(uow, course, [*items, dup]))


def test_publish_rejects_duplicate_slugs(uow: InMemoryUnitOfWork) -> None:
    course, items = build_course(1)
    dup = ContentItem.new(
        course_id=course.id, position=2, kind=ItemKind.MODULE, slug="item-1", title="Dup"
    )
    with pytest.raises(CourseValidationError, match="slugs"):
        asyncio.run(content_registry.publish_course(uow, course, [*items, dup]))


def test_publish_rejects_duplicate_course_slug(uow: InMemoryUnitOfWork) -> None:
    publish_test_course(1, slug="same")
    course, items = build_course(1, slug="same")
    with pytest.raises(CourseValidationError):
        asyncio.run(content_registry.publish_course(uow, course, items))


def test_seed_sample_course_is_idempotent(uow: InMemoryUnitOfWork) -> None:
    asyncio.run(content_registry.seed_sample_course(uow))
    asyncio.run(content_registry.seed_sample_course(uow))

    items = asyncio.run(content_registry.list_items(uow, SAMPLE_COURSE_ID))
    assert [i.slug for i in items] == [
        "what-is-claude",
        "prompting-basics",
        "build-a-summarizer",
    ]
    assert items[-1].kind == ItemKind.WORKSHOP
