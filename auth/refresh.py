"""
auth/refresh.py -- Refresh-token issuance, resolution and revocation.

Refresh tokens are opaque and resolved server-side, unlike access tokens,
precisely so they can be revoked before they expire. The access token stays
short-lived (1 hour) because it cannot be revoked; the refresh token carries
revocability instead.

Every operation is one statement against the store:
  issue   -> INSERT (uniqueness on the token column; one regenerate on conflict)
  resolve -> SELECT (no sliding expiry, no write)
  revoke  -> guarded UPDATE (applies at most once)

Layer rule: no imports from api/, chirps/, or core/.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError

from auth.models import Identity, RefreshToken
from auth.results import AuthError, Outcome

if TYPE_CHECKING:
    from auth.store import UserStore

logger = logging.getLogger("chirpy.auth.refresh")

DEFAULT_TTL = timedelta(days=60)


def generate_refresh_token() -> str:
    """Return 64 hex characters (256 bits) from the OS CSPRNG."""
    return secrets.token_hex(32)


class RefreshTokenService:
    """Issues, resolves and revokes refresh tokens on top of UserStore rows.

    Usage:
        service = RefreshTokenService(user_store)
        issued = service.issue(user.id)
        service.resolve(issued.value.token)   # -> Outcome(value=Identity)
        service.revoke(issued.value.token)
    """

    def __init__(self, store: UserStore, ttl: timedelta = DEFAULT_TTL) -> None:
        self._store = store
        self._ttl = ttl

    def issue(self, identity: Identity, *, now: datetime | None = None) -> Outcome[RefreshToken]:
        """Create and persist a token bound to identity, valid for ttl.

        A token collision is astronomically unlikely; if the uniqueness
        constraint fires anyway the value is regenerated once, and a second
        violation is reported as STORAGE_CONFLICT. An identity with no
        account is NOT_FOUND.
        """
        issued_at = now or datetime.now(timezone.utc)
        for attempt in range(2):
            record = RefreshToken(
                token=generate_refresh_token(),
                user_id=identity,
                created_at=issued_at,
                expires_at=issued_at + self._ttl,
            )
            try:
                return Outcome.success(self._store.insert_refresh_token(record))
            except IntegrityError:
                # The foreign key fails the same way as a duplicate token.
                if self._store.get_by_id(identity) is None:
                    return Outcome.failure(AuthError.NOT_FOUND)
                logger.warning("Refresh token insert conflict (attempt %d)", attempt + 1)
        return Outcome.failure(AuthError.STORAGE_CONFLICT)

    def resolve(self, token: str, *, now: datetime | None = None) -> Outcome[Identity]:
        """Return the bound identity if the token is known, live and unexpired."""
        record = self._store.find_refresh_token(token)
        if record is None:
            return Outcome.failure(AuthError.NOT_FOUND)
        if record.revoked_at is not None:
            return Outcome.failure(AuthError.REVOKED)
        if (now or datetime.now(timezone.utc)) >= record.expires_at:
            return Outcome.failure(AuthError.EXPIRED)
        return Outcome.success(record.user_id)

    def revoke(self, token: str, *, now: datetime | None = None) -> Outcome[None]:
        """Stamp revoked_at exactly once.

        Unknown and already-revoked tokens are reported distinctly so logs
        can tell them apart, but neither changes any state.
        """
        if self._store.mark_refresh_token_revoked(token, now or datetime.now(timezone.utc)):
            return Outcome.success()
        if self._store.find_refresh_token(token) is None:
            return Outcome.failure(AuthError.NOT_FOUND)
        return Outcome.failure(AuthError.ALREADY_REVOKED)
