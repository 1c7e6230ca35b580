"""Tests for course listing, enrollment, and course page endpoints."""

from __future__ import annotations

import uuid

from fastapi.testclient import TestClient

from tests.conftest import auth, enroll_test_user, publish_test_course

# ---- 401: unauthenticated ----


def test_list_courses_rejects_missing_token(client: TestClient) -> None:
    resp = client.get("/v1/courses")
    assert resp.status_code == 401


def test_enroll_rejects_missing_token(client: TestClient) -> None:
    course, _ = publish_test_course()
    resp = client.post(f"/v1/courses/{course.id}/enroll")
    assert resp.status_code == 401


def test_rejects_garbage_token(client: TestClient) -> None:
    resp = client.get("/v1/courses", headers=auth("not-a-jwt"))
    assert resp.status_code == 401


# ---- list ----


def test_list_courses_hides_drafts(client: TestClient, token: str) -> None:
    publish_test_course(slug="live-course")
    publish_test_course(slug="draft-course", status="draft")

    resp = client.get("/v1/courses", headers=auth(token))
    assert resp.status_code == 200
    slugs = [c["slug"] for c in resp.json()]
    assert slugs == ["live-course"]


# ---- enroll ----


def test_enroll_success(client: TestClient, token: str) -> None:
    course, _ = publish_test_course()
    resp = client.post(f"/v1/courses/{course.id}/enroll", headers=auth(token))
    assert resp.status_code == 201
    body = resp.json()
    assert body["course_id"] == str(course.id)
    assert body["user_id"] == "test-user"
    assert body["status"] == "IN_PROGRESS"
    assert body["progress_percent"] == 0
    assert body["completed_at"] is None


def test_enroll_twice_conflicts(client: TestClient, token: str) -> None:
    course, _ = publish_test_course()
    client.post(f"/v1/courses/{course.id}/enroll", headers=auth(token))
    resp = client.post(f"/v1/courses/{course.id}/enroll", headers=auth(token))
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "already_enrolled"


def test_enroll_course_not_found(client: TestClient, token: str) -> None:
    resp = client.post(f"/v1/courses/{uuid.uuid4()}/enroll", headers=auth(token))
    assert resp.status_code == 404


def test_enroll_malformed_course_id(client: TestClient, token: str) -> None:
    resp = client.post("/v1/courses/intro-to-claude/enroll", headers=auth(token))
    assert resp.status_code == 422


# ---- outline / item view ----


def test_outline_lists_items_with_ticks(client: TestClient, token: str) -> None:
    course, items = publish_test_course(3)
    enroll_test_user(course)
    client.put(
        f"/v1/progress/items/{items[0].id}",
        json={"completed": True},
        headers=auth(token),
    )

    resp = client.get(f"/v1/courses/{course.id}/outline", headers=auth(token))
    assert resp.status_code == 200
    body = resp.json()
    assert body["course"]["slug"] == "test-course"
    assert [i["slug"] for i in body["items"]] == ["item-1", "item-2", "item-3"]
    assert [i["completed"] for i in body["items"]] == [True, False, False]
    assert body["items"][2]["kind"] == "WORKSHOP"
    assert body["progress"]["progress_percent"] == 33


def test_outline_requires_enrollment(client: TestClient, token: str) -> None:
    course, _ = publish_test_course()
    resp = client.get(f"/v1/courses/{course.id}/outline", headers=auth(token))
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "not_enrolled"


def test_item_view_has_navigation(client: TestClient, token: str) -> None:
    course, items = publish_test_course(3)
    enroll_test_user(course)

    resp = client.get(f"/v1/courses/{course.id}/items/item-2", headers=auth(token))
    assert resp.status_code == 200
    body = resp.json()
    assert body["item"]["id"] == str(items[1].id)
    assert body["payload_ref"] == items[1].payload_ref
    assert body["completed"] is False
    assert body["previous"]["slug"] == "item-1"
    assert body["next"]["slug"] == "item-3"


def test_item_view_unknown_slug(client: TestClient, token: str) -> None:
    course, _ = publish_test_course(3)
    enroll_test_user(course)
    resp = client.get(f"/v1/courses/{course.id}/items/nope", headers=auth(token))
    assert resp.status_code == 404


# ---- certificate ----


def test_certificate_locked_view_shows_progress(client: TestClient, token: str) -> None:
    course, items = publish_test_course(3)
    enroll_test_user(course)
    client.put(
        f"/v1/progress/items/{items[0].id}",
        json={"completed": True},
        headers=auth(token),
    )

    resp = client.get(f"/v1/courses/{course.id}/certificate", headers=auth(token))
    assert resp.status_code == 200
    body = resp.json()
    assert body["available"] is False
    assert body["certificate"] is None
    assert body["progress"]["progress_percent"] == 33
    assert body["progress"]["status"] == "IN_PROGRESS"


def test_certificate_available_after_completion(client: TestClient, token: str) -> None:
    course, items = publish_test_course(1)
    enroll_test_user(course)
    toggle = client.put(
        f"/v1/progress/items/{items[0].id}",
        json={"completed": True},
        headers=auth(token),
    ).json()

    resp = client.get(f"/v1/courses/{course.id}/certificate", headers=auth(token))
    body = resp.json()
    assert body["available"] is True
    issued_code = toggle["certificate"]["certificate_code"]
    assert body["certificate"]["certificate_code"] == issued_code
    assert body["course"]["title"] == course.title


def test_certificate_requires_enrollment(client: TestClient, token: str) -> None:
    course, _ = publish_test_course()
    resp = client.get(f"/v1/courses/{course.id}/certificate", headers=auth(token))
    assert resp.status_code == 403
