"""Tests for completion toggles and progress reads."""

from __future__ import annotations

import uuid

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from tests.conftest import auth, enroll_test_user, mint_token, publish_test_course


def _toggle(client: TestClient, token: str, item_id, completed: bool):
    return client.put(
        f"/v1/progress/items/{item_id}",
        json={"completed": completed},
        headers=auth(token),
    )


def _toggles(result: str) -> float:
    value = REGISTRY.get_sample_value("completion_toggles_total", {"result": result})
    return value or 0.0


def test_toggle_rejects_missing_token(client: TestClient) -> None:
    _course, items = publish_test_course()
    resp = client.put(f"/v1/progress/items/{items[0].id}", json={"completed": True})
    assert resp.status_code == 401


def test_toggle_returns_authoritative_enrollment(client: TestClient, token: str) -> None:
    course, items = publish_test_course(3)
    enroll_test_user(course)

    resp = _toggle(client, token, items[0].id, True)
    assert resp.status_code == 200
    body = resp.json()
    assert body["item_id"] == str(items[0].id)
    assert body["completed"] is True
    assert body["updated_at"] is not None
    assert body["enrollment"]["progress_percent"] == 33
    assert body["enrollment"]["status"] == "IN_PROGRESS"
    assert body["certificate_issued"] is False
    assert body["certificate"] is None


def test_toggle_last_item_issues_certificate(client: TestClient, token: str) -> None:
    course, items = publish_test_course(2)
    enroll_test_user(course)
    _toggle(client, token, items[0].id, True)

    body = _toggle(client, token, items[1].id, True).json()
    assert body["enrollment"]["progress_percent"] == 100
    assert body["enrollment"]["status"] == "COMPLETED"
    assert body["enrollment"]["completed_at"] is not None
    assert body["certificate_issued"] is True
    assert body["certificate"]["certificate_code"].startswith("CERT-")


def test_repeated_toggle_is_noop(client: TestClient, token: str) -> None:
    course, items = publish_test_course(2)
    enroll_test_user(course)
    first = _toggle(client, token, items[0].id, True).json()
    noops_before = _toggles("noop")

    second = _toggle(client, token, items[0].id, True).json()
    assert second == first
    assert _toggles("noop") - noops_before == 1


def test_toggle_unknown_item(client: TestClient, token: str) -> None:
    resp = _toggle(client, token, uuid.uuid4(), True)
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "not_found"


def test_toggle_without_enrollment(client: TestClient, token: str) -> None:
    _course, items = publish_test_course()
    resp = _toggle(client, token, items[0].id, True)
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "not_enrolled"


def test_toggle_requires_boolean_body(client: TestClient, token: str) -> None:
    course, items = publish_test_course()
    enroll_test_user(course)
    resp = client.put(
        f"/v1/progress/items/{items[0].id}", json={}, headers=auth(token)
    )
    assert resp.status_code == 422


def test_get_progress(client: TestClient, token: str) -> None:
    course, items = publish_test_course(4)
    enroll_test_user(course)
    _toggle(client, token, items[0].id, True)
    _toggle(client, token, items[3].id, True)

    resp = client.get(f"/v1/progress/courses/{course.id}", headers=auth(token))
    assert resp.status_code == 200
    assert resp.json() == {
        "course_id": str(course.id),
        "progress_percent": 50,
        "status": "IN_PROGRESS",
        "completed_items": 2,
        "total_items": 4,
    }


def test_get_progress_is_per_learner(client: TestClient, token: str) -> None:
    course, items = publish_test_course(2)
    enroll_test_user(course)
    enroll_test_user(course, "other-learner")
    _toggle(client, token, items[0].id, True)

    other = mint_token(username="other-learner")
    resp = client.get(f"/v1/progress/courses/{course.id}", headers=auth(other))
    assert resp.json()["progress_percent"] == 0


def test_get_progress_not_enrolled(client: TestClient, token: str) -> None:
    course, _ = publish_test_course()
    resp = client.get(f"/v1/progress/courses/{course.id}", headers=auth(token))
    assert resp.status_code == 403


def test_get_progress_unknown_course(client: TestClient, token: str) -> None:
    resp = client.get(f"/v1/progress/courses/{uuid.uuid4()}", headers=auth(token))
    assert resp.status_code == 404
