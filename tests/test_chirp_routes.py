"""
tests/test_chirp_routes.py -- Integration tests for the chirp CRUD routes.

Coverage:
  - POST requires a valid access token (missing, malformed, tampered -> 401)
  - 140-character limit and profanity masking
  - list ordering (asc/desc) and author filter
  - ownership: another user's chirp is 403, a missing chirp is 404, and the
    owner can still delete afterwards
"""

from __future__ import annotations

import uuid

import pytest
from fastapi.testclient import TestClient


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="module")
def second_user(api_client) -> dict:
    """Log in a second account (user B) for cross-owner checks."""
    client, _token, _uid = api_client
    creds = {"email": "b@example.com", "password": "pw-user-b"}
    assert client.post("/api/v1/users", json=creds).status_code == 201
    return client.post("/api/v1/login", json=creds).json()


class TestCreateChirp:
    def test_create(self, api_client: tuple[TestClient, str, object]) -> None:
        client, token, uid = api_client
        resp = client.post("/api/v1/chirps", json={"body": "hello chirpy"}, headers=_bearer(token))
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["body"] == "hello chirpy"
        assert data["user_id"] == str(uid)

    def test_author_comes_from_token(self, api_client) -> None:
        client, token, uid = api_client
        body = {"body": "spoof", "user_id": str(uuid.uuid4())}
        resp = client.post("/api/v1/chirps", json=body, headers=_bearer(token))
        # user_id is not part of the request contract
        assert resp.status_code == 422

    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"Authorization": "Bearer "},
            {"Authorization": "Basic dXNlcjpwYXNz"},
            {"Authorization": "Bearer not.a.jwt"},
        ],
    )
    def test_rejects_bad_credentials(self, api_client, headers) -> None:
        client, _token, _uid = api_client
        resp = client.post("/api/v1/chirps", json={"body": "nope"}, headers=headers)
        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == "The provided token is invalid or missing."

    def test_tampered_token(self, api_client) -> None:
        client, token, _uid = api_client
        header, payload, signature = token.split(".")
        i = len(signature) // 2
        flipped = signature[:i] + ("A" if signature[i] != "A" else "B") + signature[i + 1 :]
        resp = client.post("/api/v1/chirps", json={"body": "x"}, headers=_bearer(f"{header}.{payload}.{flipped}"))
        assert resp.status_code == 401

    def test_too_long(self, api_client) -> None:
        client, token, _uid = api_client
        assert client.post("/api/v1/chirps", json={"body": "a" * 140}, headers=_bearer(token)).status_code == 201
        resp = client.post("/api/v1/chirps", json={"body": "a" * 141}, headers=_bearer(token))
        assert resp.status_code == 422

    def test_profanity_masked(self, api_client) -> None:
        client, token, _uid = api_client
        resp = client.post(
            "/api/v1/chirps",
            json={"body": "This is a kerfuffle opinion I need to share with the world"},
            headers=_bearer(token),
        )
        assert resp.json()["body"] == "This is a **** opinion I need to share with the world"


class TestReadChirps:
    def test_sorting_and_author_filter(self, api_client, second_user) -> None:
        client, token, uid = api_client
        ids = []
        for text in ("one", "two"):
            ids.append(client.post("/api/v1/chirps", json={"body": text}, headers=_bearer(token)).json()["id"])
        ids.append(
            client.post("/api/v1/chirps", json={"body": "three"}, headers=_bearer(second_user["token"])).json()["id"]
        )

        ascending = [c["id"] for c in client.get("/api/v1/chirps").json()]
        descending = [c["id"] for c in client.get("/api/v1/chirps", params={"sort": "desc"}).json()]
        assert descending == list(reversed(ascending))
        assert ascending.index(ids[0]) < ascending.index(ids[1]) < ascending.index(ids[2])

        mine = client.get("/api/v1/chirps", params={"author_id": str(uid)}).json()
        assert {c["user_id"] for c in mine} == {str(uid)}
        assert ids[2] not in {c["id"] for c in mine}

    def test_invalid_sort(self, api_client) -> None:
        client, _token, _uid = api_client
        assert client.get("/api/v1/chirps", params={"sort": "sideways"}).status_code == 422

    def test_get_missing(self, api_client) -> None:
        client, _token, _uid = api_client
        assert client.get(f"/api/v1/chirps/{uuid.uuid4()}").status_code == 404

    def test_get_invalid_id(self, api_client) -> None:
        client, _token, _uid = api_client
        assert client.get("/api/v1/chirps/not-a-uuid").status_code == 422


class TestChirpOwnership:
    def test_cross_owner_delete(self, api_client, second_user) -> None:
        """User B cannot delete A's chirp (403); A then deletes it (204)."""
        client, token, _uid = api_client
        chirp_id = client.post("/api/v1/chirps", json={"body": "mine"}, headers=_bearer(token)).json()["id"]

        resp = client.delete(f"/api/v1/chirps/{chirp_id}", headers=_bearer(second_user["token"]))
        assert resp.status_code == 403
        assert client.get(f"/api/v1/chirps/{chirp_id}").status_code == 200

        assert client.delete(f"/api/v1/chirps/{chirp_id}", headers=_bearer(token)).status_code == 204
        assert client.get(f"/api/v1/chirps/{chirp_id}").status_code == 404

    def test_cross_owner_update(self, api_client, second_user) -> None:
        client, token, _uid = api_client
        chirp_id = client.post("/api/v1/chirps", json={"body": "original"}, headers=_bearer(token)).json()["id"]

        resp = client.put(
            f"/api/v1/chirps/{chirp_id}", json={"body": "hijacked"}, headers=_bearer(second_user["token"])
        )
        assert resp.status_code == 403

        resp = client.put(f"/api/v1/chirps/{chirp_id}", json={"body": "edited fornax"}, headers=_bearer(token))
        assert resp.status_code == 200
        assert resp.json()["body"] == "edited ****"

    def test_delete_missing_is_404(self, api_client) -> None:
        client, token, _uid = api_client
        assert client.delete(f"/api/v1/chirps/{uuid.uuid4()}", headers=_bearer(token)).status_code == 404

    def test_delete_requires_token(self, api_client) -> None:
        client, token, _uid = api_client
        chirp_id = client.post("/api/v1/chirps", json={"body": "keep"}, headers=_bearer(token)).json()["id"]
        assert client.delete(f"/api/v1/chirps/{chirp_id}").status_code == 401
