"""
tests/test_admin.py -- Integration tests for /admin/metrics and /admin/reset.

Coverage:
  - /app requests are counted and shown on /admin/metrics; API calls are not
  - paths that merely start with "/app" (/apple, /application) are not counted
  - /admin/reset outside PLATFORM=dev is 403 and nothing is deleted
  - /admin/reset on dev zeroes the counter and deletes every user (cascade)
"""

from __future__ import annotations

import pytest

from auth.service import AuthService


@pytest.fixture
def production(api_client):
    """Swap app.state.auth for one bound to a production platform."""
    client, _token, _uid = api_client
    original = client.app.state.auth
    settings = original.settings.model_copy(update={"platform": "production"})
    client.app.state.auth = AuthService(settings, client.app.state.user_store)
    yield client
    client.app.state.auth = original


def test_metrics_counts_app_hits(api_client):
    client, _token, _uid = api_client
    client.app.state.hits.reset()
    for _ in range(3):
        client.get("/app/")
    client.get("/api/v1/health")

    resp = client.get("/admin/metrics")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert "Chirpy has been visited 3 times!" in resp.text


def test_metrics_ignores_lookalike_paths(api_client):
    client, _token, _uid = api_client
    client.app.state.hits.reset()
    for path in ("/apple", "/application/x", "/apps"):
        client.get(path)
    client.get("/app/")
    assert client.app.state.hits.value == 1


def test_reset_forbidden_outside_dev(production):
    client = production
    client.get("/app/")
    resp = client.post("/admin/reset")
    assert resp.status_code == 403
    assert client.app.state.hits.value > 0
    assert len(client.get("/api/v1/users").json()) > 0


def test_reset_on_dev(api_client):
    client, token, uid = api_client
    chirp = client.post("/api/v1/chirps", json={"body": "soon gone"}, headers={"Authorization": f"Bearer {token}"})
    assert chirp.status_code == 201
    client.get("/app/")

    resp = client.post("/admin/reset")
    assert resp.status_code == 200
    assert resp.text.startswith("Hits reset to 0")
    assert client.app.state.hits.value == 0
    assert client.get("/api/v1/users").json() == []
    assert client.get("/api/v1/chirps").json() == []
    assert "visited 0 times" in client.get("/admin/metrics").text
