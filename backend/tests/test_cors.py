from __future__ import annotations

import pytest

pytest.importorskip("httpx")

from fastapi.testclient import TestClient

from scorecard.main import app


def test_cors_headers_present_on_health() -> None:
    with TestClient(app) as client:
        response = client.get("/health", headers={"Origin": "https://example.com"})

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


@pytest.mark.parametrize("path", ["/applications", "/interview/complete", "/jobs/job-1/interview-questions"])
def test_preflight_allows_cors(path: str) -> None:
    with TestClient(app) as client:
        response = client.options(
            path,
            headers={
                "Origin": "https://example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "x-api-key,content-type",
            },
        )

    assert response.status_code in (200, 204)
    assert response.headers["access-control-allow-origin"] in {"*", "https://example.com"}
    assert "access-control-allow-methods" in response.headers
    assert "access-control-allow-headers" in response.headers


def test_post_still_available_after_preflight(client) -> None:
    preflight = client.options(
        "/applications",
        headers={
            "Origin": "https://example.com",
            "Access-Control-Request-Method": "POST",
        },
    )
    created = client.post("/applications", json={"job_id": "job-1", "candidate_name": "Preflight Regression"})

    assert preflight.status_code in (200, 204)
    assert created.status_code == 201
    assert created.json()["candidate_name"] == "Preflight Regression"
