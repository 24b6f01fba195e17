"""
auth/service.py -- Handler-facing facade over the auth primitives.

Route handlers should not have to thread the signing secret, token
lifetimes, bcrypt cost and header names through every call. AuthService
binds them once from Settings and exposes the operations handlers need:

  hash_password / verify_password / authenticate
  issue_access_token / verify_access_token
  issue_refresh_token / resolve_refresh_token / revoke_refresh_token
  extract_bearer / extract_api_key
  authenticate_request / authorize_owner / authorize_webhook / authorize_reset

One instance is created in the lifespan and stored on app.state.auth.
Every method is either pure or a single store round-trip, so the instance
is safe to share across concurrent requests.

Layer rule: no imports from api/ or chirps/. Import from core/ is allowed.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

from auth import guard, headers, passwords, tokens
from auth.guard import Decision
from auth.models import Identity, RefreshToken, User
from auth.refresh import RefreshTokenService
from auth.results import Outcome
from auth.store import UserStore
from core.config import Settings


class AuthService:
    def __init__(self, settings: Settings, user_store: UserStore) -> None:
        self.settings = settings
        self.user_store = user_store
        self.refresh_tokens = RefreshTokenService(user_store, ttl=settings.refresh_token_ttl)

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------

    def hash_password(self, plain: str) -> str:
        return passwords.hash_password(plain, self.settings.bcrypt_rounds)

    def verify_password(self, plain: str, hashed: str) -> Outcome[None]:
        return passwords.verify_password(plain, hashed)

    def authenticate(self, email: str, password: str) -> Outcome[User]:
        return passwords.authenticate(self.user_store, email, password, self.settings.bcrypt_rounds)

    # ------------------------------------------------------------------
    # Access tokens
    # ------------------------------------------------------------------

    def issue_access_token(self, identity: Identity, *, now: datetime | None = None) -> str:
        return tokens.create_access_token(
            identity,
            self.settings.jwt_secret,
            self.settings.access_token_ttl,
            now=now,
        )

    def verify_access_token(self, token: str, *, now: datetime | None = None) -> Outcome[Identity]:
        return tokens.verify_access_token(
            token,
            self.settings.jwt_secret,
            now=now,
            leeway=self.settings.token_leeway_seconds,
        )

    # ------------------------------------------------------------------
    # Refresh tokens
    # ------------------------------------------------------------------

    def issue_refresh_token(self, identity: Identity, *, now: datetime | None = None) -> Outcome[RefreshToken]:
        return self.refresh_tokens.issue(identity, now=now)

    def resolve_refresh_token(self, token: str, *, now: datetime | None = None) -> Outcome[Identity]:
        return self.refresh_tokens.resolve(token, now=now)

    def revoke_refresh_token(self, token: str, *, now: datetime | None = None) -> Outcome[None]:
        return self.refresh_tokens.revoke(token, now=now)

    # ------------------------------------------------------------------
    # Header extraction
    # ------------------------------------------------------------------

    def extract_bearer(self, request_headers: Mapping[str, str]) -> Outcome[str]:
        return headers.extract_bearer(request_headers)

    def extract_api_key(self, request_headers: Mapping[str, str]) -> Outcome[str]:
        return headers.extract_api_key(request_headers, self.settings.api_key_header)

    # ------------------------------------------------------------------
    # Guard
    # ------------------------------------------------------------------

    def authenticate_request(self, request_headers: Mapping[str, str], *, now: datetime | None = None) -> Decision:
        return guard.authenticate(
            request_headers,
            self.settings.jwt_secret,
            now=now,
            leeway=self.settings.token_leeway_seconds,
        )

    def authorize_owner(self, decision: Decision, owner: Identity) -> Decision:
        return guard.authorize_owner(decision, owner)

    def authorize_webhook(self, request_headers: Mapping[str, str]) -> Decision:
        return guard.authorize_privileged_key(
            request_headers,
            self.settings.polka_key,
            self.settings.api_key_header,
        )

    def authorize_reset(self) -> Decision:
        return guard.authorize_environment(self.settings.platform)
