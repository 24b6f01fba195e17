"""
auth/guard.py -- Authorization decisions for protected operations.

Every protected operation walks the same small state machine:

    UNAUTHENTICATED --(credential extracted + verified)--> TOKEN_VERIFIED
    TOKEN_VERIFIED  --(ownership / privilege check)-----> AUTHORIZED | DENIED

A Decision records where the walk stopped, the identity proven so far and,
when DENIED, the AuthError tag explaining why. Gates that are not about a
user (the webhook key, the dev-only reset) go straight from
UNAUTHENTICATED to AUTHORIZED or DENIED.

Rules:
  Ownership      -- the verified identity must equal the resource owner,
                    otherwise FORBIDDEN ("exists but not yours").
  Privileged key -- the ApiKey credential must byte-equal the configured key.
                    MISSING means "answer as if the endpoint did not exist";
                    anything else that fails is UNAUTHORIZED.
  Environment    -- only the dev platform may reset state, regardless of any
                    credential; checked before any side effect.

Layer rule: no imports from api/ or chirps/. Import from core/ is allowed --
core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

import hmac
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from auth.headers import extract_api_key, extract_bearer
from auth.models import Identity
from auth.results import AuthError
from auth.tokens import verify_access_token
from core.config import DEV_PLATFORM


class GuardState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    TOKEN_VERIFIED = "token_verified"
    AUTHORIZED = "authorized"
    DENIED = "denied"


@dataclass(frozen=True)
class Decision:
    state: GuardState
    identity: Identity | None = None
    error: AuthError | None = None

    @property
    def allowed(self) -> bool:
        return self.state is GuardState.AUTHORIZED

    @classmethod
    def deny(cls, error: AuthError, identity: Identity | None = None) -> Decision:
        return cls(state=GuardState.DENIED, identity=identity, error=error)


def authenticate(
    headers: Mapping[str, str],
    secret: str,
    *,
    now: datetime | None = None,
    leeway: int = 0,
) -> Decision:
    """Extract the bearer access token and verify it."""
    extracted = extract_bearer(headers)
    if not extracted.ok:
        return Decision.deny(extracted.error)
    verified = verify_access_token(extracted.value, secret, now=now, leeway=leeway)
    if not verified.ok:
        return Decision.deny(verified.error)
    return Decision(state=GuardState.TOKEN_VERIFIED, identity=verified.value)


def authorize_owner(decision: Decision, owner: Identity) -> Decision:
    """Allow only when the verified identity owns the resource."""
    if decision.state is not GuardState.TOKEN_VERIFIED:
        return decision if decision.state is GuardState.DENIED else Decision.deny(AuthError.UNAUTHORIZED)
    if decision.identity != owner:
        return Decision.deny(AuthError.FORBIDDEN, identity=decision.identity)
    return Decision(state=GuardState.AUTHORIZED, identity=decision.identity)


def authorize_privileged_key(
    headers: Mapping[str, str],
    configured_key: str,
    header_name: str = "Authorization",
) -> Decision:
    """Compare the inbound ApiKey against the configured privileged key.

    hmac.compare_digest keeps the comparison constant-time. An unconfigured
    key (empty string) rejects every caller that presents one.
    """
    extracted = extract_api_key(headers, header_name)
    if not extracted.ok:
        if extracted.error is AuthError.MISSING:
            return Decision.deny(AuthError.MISSING)
        return Decision.deny(AuthError.UNAUTHORIZED)
    if not configured_key or not hmac.compare_digest(extracted.value.encode("utf-8"), configured_key.encode("utf-8")):
        return Decision.deny(AuthError.UNAUTHORIZED)
    return Decision(state=GuardState.AUTHORIZED)


def authorize_environment(platform: str) -> Decision:
    """Allow state-wiping admin operations only on the dev platform."""
    if platform != DEV_PLATFORM:
        return Decision.deny(AuthError.FORBIDDEN)
    return Decision(state=GuardState.AUTHORIZED)
