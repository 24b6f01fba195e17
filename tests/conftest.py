"""
tests/conftest.py -- Shared test fixtures for Chirpy integration tests.

This module provides:
  - _make_test_stores(): creates one isolated in-memory DB per test module
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - test_settings: Settings built from the test environment below
  - api_client: (client, token, identity) -- TestClient plus a seeded account
    and a valid access token for it

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool. Plain :memory: DBs
are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares
one in-memory instance across all connections in the same process. Both
stores point at the same URI so the chirps -> users foreign key (and its
ON DELETE CASCADE) works exactly as in production.

The environment must be set before any auth/core import so get_settings()
sees PLATFORM=dev, a fixed JWT_SECRET, the Polka key and a cheap bcrypt cost.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set the environment before any auth/core import.
os.environ.setdefault("PLATFORM", "dev")
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-at-least-32-characters-long")
os.environ.setdefault("POLKA_KEY", "test-polka-key")
# Cost 4 is bcrypt's minimum; keeps the suite fast.
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import Identity, User
from auth.passwords import hash_password
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import create_access_token
from chirps.store import ChirpStore
from core.config import Settings
from core.metrics import HitCounter

OWNER_EMAIL = "owner@example.com"
OWNER_PASSWORD = "ownerpass123"


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, ChirpStore]:
    """Create a UserStore and ChirpStore sharing one named in-memory DB.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state (the test module name is used).
    """
    db_url = f"sqlite:///file:test_chirpy_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=db_url), ChirpStore(db_url=db_url)


def _patch_lifespan(settings: Settings, user_store: UserStore, chirp_store: ChirpStore):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores into app.state so TestClient routes see
    isolated test DBs rather than chirpy.db.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.settings = settings
        app.state.user_store = user_store
        app.state.chirp_store = chirp_store
        app.state.auth = AuthService(settings, user_store)
        app.state.hits = HitCounter()
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return Settings()


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    """Function-scoped UserStore on its own named in-memory DB."""
    store = UserStore(db_url=f"sqlite:///file:unit_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true")
    yield store
    store.close()


@pytest.fixture(scope="module")
def api_client(request, test_settings: Settings) -> Generator[tuple[TestClient, str, Identity], None, None]:
    """Yield (client, token, identity) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so
    tests hit real route handlers but use an isolated in-memory DB.
    The owner account (OWNER_EMAIL / OWNER_PASSWORD) is created before the
    client starts and a one-hour access token is generated for it.
    """
    user_store, chirp_store = _make_test_stores(request.module.__name__.replace(".", "_"))

    owner = user_store.create_user(
        User(email=OWNER_EMAIL, hashed_password=hash_password(OWNER_PASSWORD, test_settings.bcrypt_rounds))
    )
    token = create_access_token(owner.id, test_settings.jwt_secret, test_settings.access_token_ttl)

    app.router.lifespan_context = _patch_lifespan(test_settings, user_store, chirp_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, owner.id

    chirp_store.close()
    user_store.close()

