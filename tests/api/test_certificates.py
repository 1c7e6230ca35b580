"""Public certificate verification and its read-through cache."""

from __future__ import annotations

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from app.services.cache import cache_service
from tests.conftest import auth, enroll_test_user, publish_test_course


def _cache_ops(operation: str) -> float:
    value = REGISTRY.get_sample_value(
        "cache_operations_total", {"operation": operation}
    )
    return value or 0.0


def _earn_certificate(client: TestClient, token: str) -> tuple[dict, object]:
    course, items = publish_test_course(1)
    enroll_test_user(course)
    body = client.put(
        f"/v1/progress/items/{items[0].id}",
        json={"completed": True},
        headers=auth(token),
    ).json()
    return body["certificate"], course


def test_verify_needs_no_token(client: TestClient, token: str) -> None:
    cert, course = _earn_certificate(client, token)

    resp = client.get(f"/v1/certificates/{cert['certificate_code']}/verify")
    assert resp.status_code == 200
    body = resp.json()
    assert body["valid"] is True
    assert body["user_id"] == "test-user"
    assert body["course_id"] == str(course.id)
    assert body["course_title"] == course.title
    assert body["issued_at"] == cert["issued_at"]


def test_verify_accepts_lowercase_code(client: TestClient, token: str) -> None:
    cert, _ = _earn_certificate(client, token)
    resp = client.get(f"/v1/certificates/{cert['certificate_code'].lower()}/verify")
    assert resp.status_code == 200
    assert resp.json()["certificate_code"] == cert["certificate_code"]


def test_verify_unknown_code(client: TestClient) -> None:
    resp = client.get("/v1/certificates/CERT-0000-0000-0000-0000/verify")
    assert resp.status_code == 404


def test_verify_unknown_code_is_not_cached(client: TestClient) -> None:
    client.get("/v1/certificates/CERT-0000-0000-0000-0000/verify")
    assert cache_service._store == {}  # type: ignore[attr-defined]


def test_verify_second_lookup_hits_cache(client: TestClient, token: str) -> None:
    cert, _ = _earn_certificate(client, token)
    url = f"/v1/certificates/{cert['certificate_code']}/verify"

    misses_before = _cache_ops("miss")
    hits_before = _cache_ops("hit")
    first = client.get(url).json()
    second = client.get(url).json()

    assert first == second
    assert _cache_ops("miss") - misses_before == 1
    assert _cache_ops("hit") - hits_before == 1
