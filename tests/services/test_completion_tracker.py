from __future__ import annotations

import asyncio
import uuid

import pytest

from app.core.errors import NotEnrolledError, NotFoundError
from app.repos.unit_of_work import InMemoryUnitOfWork
from app.services import certificate_issuer
from app.services.completion_tracker import set_completion
from tests.conftest import enroll_test_user, publish_test_course


def test_set_completion_writes_record_and_recomputes(uow: InMemoryUnitOfWork) -> None:
    course, items = publish_test_course(2)
    enroll_test_user(course)

    outcome = asyncio.run(set_completion(uow, "test-user", items[0].id, True, now=100))

    assert outcome.changed is True
    assert outcome.record.completed is True
    assert outcome.record.updated_at == 100
    assert outcome.enrollment.progress_percent == 50


def test_repeat_with_same_value_is_noop(uow: InMemoryUnitOfWork) -> None:
    course, items = publish_test_course(2)
    enroll_test_user(course)
    first = asyncio.run(set_completion(uow, "test-user", items[0].id, True, now=100))

    second = asyncio.run(set_completion(uow, "test-user", items[0].id, True, now=500))

    assert second.changed is False
    assert second.record == first.record  # updated_at untouched
    assert second.enrollment == first.enrollment


def test_unmarking_never_marked_item_is_noop(uow: InMemoryUnitOfWork) -> None:
    course, items = publish_test_course(2)
    enrollment = enroll_test_user(course)

    outcome = asyncio.run(set_completion(uow, "test-user", items[1].id, False, now=100))

    assert outcome.changed is False
    assert outcome.record.completed is False
    assert outcome.record.updated_at is None
    assert outcome.enrollment == enrollment
    assert asyncio.run(uow.completions.get("test-user", items[1].id)) is None


def test_unknown_item_raises_not_found(uow: InMemoryUnitOfWork) -> None:
    with pytest.raises(NotFoundError):
        asyncio.run(set_completion(uow, "test-user", uuid.uuid4(), True, now=1))


def test_not_enrolled_raises_and_writes_nothing(uow: InMemoryUnitOfWork) -> None:
    _course, items = publish_test_course(2)

    with pytest.raises(NotEnrolledError):
        asyncio.run(set_completion(uow, "test-user", items[0].id, True, now=1))

    assert asyncio.run(uow.completions.get("test-user", items[0].id)) is None


def test_failure_in_cascade_rolls_back_everything(
    uow: InMemoryUnitOfWork, monkeypatch: pytest.MonkeyPatch
) -> None:
    course, items = publish_test_course(2)
    enroll_test_user(course)
    asyncio.run(set_completion(uow, "test-user", items[0].id, True, now=10))

    async def broken_issue(*_args, **_kwargs):
        raise RuntimeError("certificate store unavailable")

    monkeypatch.setattr(certificate_issuer, "issue", broken_issue)

    with pytest.raises(RuntimeError):
        asyncio.run(set_completion(uow, "test-user", items[1].id, True, now=20))

    # Neither the completion nor the enrollment change survived.
    assert asyncio.run(uow.completions.get("test-user", items[1].id)) is None
    enrollment = asyncio.run(uow.enrollments.get("test-user", course.id))
    assert enrollment is not None
    assert enrollment.progress_percent == 50
    assert enrollment.completed_at is None
