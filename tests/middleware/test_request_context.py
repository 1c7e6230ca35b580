from __future__ import annotations

import logging
import uuid

import pytest
from fastapi.testclient import TestClient


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    req_id = resp.headers.get("x-request-id")
    assert req_id is not None
    uuid.UUID(req_id)


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    resp = client.get("/health", headers={"X-Request-ID": "toggle-7f3a"})
    assert resp.headers.get("x-request-id") == "toggle-7f3a"


def test_request_id_present_on_error_responses(client: TestClient) -> None:
    resp = client.get("/v1/courses")  # no token -> 401
    assert resp.status_code == 401
    assert resp.headers.get("x-request-id") is not None


def test_summary_line_logged_with_request_id(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="app.middleware.request_context"):
        client.get("/health", headers={"X-Request-ID": "req-42"})

    lines = [r for r in caplog.records if r.name == "app.middleware.request_context"]
    assert lines
    assert lines[-1].request_id == "req-42"  # type: ignore[attr-defined]
    assert lines[-1].status_code == 200  # type: ignore[attr-defined]
