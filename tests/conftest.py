from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import memory_uow
from app.api.ratelimit import _rate_limiter
from app.main import app
from app.models.course import ContentItem, Course, ItemKind
from app.models.progress import Enrollment
from app.repos.unit_of_work import InMemoryUnitOfWork
from app.services import content_registry, progress_service, token_service
from app.services.cache import cache_service

# Ensure repo root is on sys.path so `import app` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def reset_progress_state() -> None:
    """Clear courses, completions, enrollments and certificates between tests."""
    memory_uow.reset()


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    """Clear rate limit buckets between tests so limits don't bleed."""
    if hasattr(_rate_limiter, "_buckets"):
        _rate_limiter._buckets.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def reset_cache() -> None:
    """Clear cache between tests."""
    if hasattr(cache_service, "_store"):
        cache_service._store.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def uow() -> InMemoryUnitOfWork:
    """The same in-memory unit of work the API routes use."""
    return memory_uow


def mint_token(
    username: str = "test-user",
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def token() -> str:
    """Token with default role (user)."""
    return mint_token()


@pytest.fixture
def admin_token() -> str:
    """Token with admin role."""
    return mint_token(username="test-admin", roles=["admin"])


# ---------------------------------------------------------------------------
# Course / enrollment helpers
# ---------------------------------------------------------------------------


def build_course(
    n_items: int = 3,
    *,
    slug: str = "test-course",
    status: str = "published",
) -> tuple[Course, list[ContentItem]]:
    course = Course.new(slug=slug, title=slug.replace("-", " ").title(), status=status)
    items = [
        ContentItem.new(
            course_id=course.id,
            position=pos,
            kind=ItemKind.WORKSHOP if pos % 3 == 0 else ItemKind.MODULE,
            slug=f"item-{pos}",
            title=f"Item {pos}",
            payload_ref=f"https://videos.example.com/{slug}/{pos}.mp4",
        )
        for pos in range(1, n_items + 1)
    ]
    return course, items


def publish_test_course(
    n_items: int = 3,
    *,
    slug: str = "test-course",
    status: str = "published",
) -> tuple[Course, list[ContentItem]]:
    """Publish a course with `n_items` items into the in-memory store."""
    course, items = build_course(n_items, slug=slug, status=status)
    asyncio.run(content_registry.publish_course(memory_uow, course, items))
    return course, items


def enroll_test_user(course: Course, user_id: str = "test-user") -> Enrollment:
    return asyncio.run(progress_service.enroll(memory_uow, user_id, course.id))
