from __future__ import annotations

import asyncio

import pytest

from app.models.progress import CompletionRecord, EnrollmentStatus
from app.repos.unit_of_work import InMemoryUnitOfWork
from app.services.progress_aggregator import compute_progress, recompute
from tests.conftest import enroll_test_user, publish_test_course

# ---- compute_progress ----


@pytest.mark.parametrize(
    ("completed", "total", "percent"),
    [
        (0, 3, 0),
        (1, 3, 33),
        (2, 3, 67),
        (1, 2, 50),
        (1, 8, 13),  # 12.5 rounds half up
        (3, 8, 38),  # 37.5 rounds half up
        (199, 200, 99),  # 99.5 would round to 100; held at 99
        (5, 5, 100),
    ],
)
def test_compute_progress_percent(completed: int, total: int, percent: int) -> None:
    assert compute_progress(completed, total).percent == percent


def test_compute_progress_completed_only_at_full() -> None:
    assert compute_progress(4, 4).status == EnrollmentStatus.COMPLETED
    assert compute_progress(3, 4).status == EnrollmentStatus.IN_PROGRESS


def test_compute_progress_percent_is_100_iff_completed() -> None:
    for total in range(1, 60):
        for done in range(total + 1):
            p = compute_progress(done, total)
            assert (p.percent == 100) == (p.status == EnrollmentStatus.COMPLETED)
            assert 0 <= p.percent <= 100


def test_compute_progress_is_monotonic_in_completed_count() -> None:
    for total in range(1, 40):
        percents = [compute_progress(done, total).percent for done in range(total + 1)]
        assert percents == sorted(percents)


def test_compute_progress_zero_items_never_completes() -> None:
    p = compute_progress(0, 0)
    assert p.percent == 0
    assert p.status == EnrollmentStatus.IN_PROGRESS
    assert p.total_items == 0


# ---- recompute ----


def test_recompute_reflects_completion_records(uow: InMemoryUnitOfWork) -> None:
    course, items = publish_test_course(3)
    enroll_test_user(course)

    async def scenario():
        await uow.completions.upsert(
            CompletionRecord("test-user", items[0].id, True, updated_at=10)
        )
        async with uow.locked("test-user", course.id):
            return await recompute(uow, "test-user", course.id, now=11)

    result = asyncio.run(scenario())
    assert result.enrollment.progress_percent == 33
    assert result.enrollment.updated_at == 11
    assert result.certificate is None


def test_recompute_without_change_keeps_updated_at(uow: InMemoryUnitOfWork) -> None:
    course, _items = publish_test_course(3)
    enrollment = enroll_test_user(course)

    async def scenario():
        async with uow.locked("test-user", course.id):
            return await recompute(
                uow, "test-user", course.id, now=enrollment.updated_at + 100
            )

    result = asyncio.run(scenario())
    assert result.enrollment == enrollment


def test_recompute_ignores_records_from_other_courses(uow: InMemoryUnitOfWork) -> None:
    course, _ = publish_test_course(2)
    _other, other_items = publish_test_course(1, slug="other-course")
    enroll_test_user(course)

    async def scenario():
        await uow.completions.upsert(
            CompletionRecord("test-user", other_items[0].id, True, updated_at=1)
        )
        async with uow.locked("test-user", course.id):
            return await recompute(uow, "test-user", course.id, now=2)

    result = asyncio.run(scenario())
    assert result.progress.completed_items == 0
    assert result.enrollment.progress_percent == 0
