"""
auth/tokens.py -- Access-token (JWT) issuance and verification.

Security design decisions:
  python-jose with HS256. An access token carries exactly four claims:
  iss ("chirpy"), sub (the account Identity), iat and exp. The MAC covers
  header and claims, so flipping any byte invalidates the signature.

  Access tokens are stateless and cannot be revoked early; that is why their
  lifetime stays short (1 hour by default) and revocability lives on the
  opaque refresh token instead (see auth/refresh.py).

  verify_access_token() is a pure function of (token, secret, now). It does
  no I/O and touches no shared state, so any number of requests may call it
  concurrently. Each failure maps to one AuthError tag:
    wrong segment count          -> MALFORMED
    non-canonical base64url      -> SIGNATURE_INVALID
    bad signature / header / b64 -> SIGNATURE_INVALID
    missing or mistyped claims   -> CLAIMS_INVALID
    now >= exp (+ leeway)        -> EXPIRED
    sub is not a UUID            -> SUBJECT_INVALID

Layer rule: no imports from api/, chirps/, or core/. Secrets and lifetimes
are passed in by the caller (auth/service.py binds them from Settings).
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

from jose import jws, jwt
from jose.exceptions import JWSError
from jose.utils import base64url_decode, base64url_encode

from auth.models import Identity
from auth.results import AuthError, Outcome

ISSUER = "chirpy"
ALGORITHM = "HS256"

_REQUIRED_CLAIMS = ("sub", "iss", "iat", "exp")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(
    identity: Identity,
    secret: str,
    ttl: timedelta,
    *,
    now: datetime | None = None,
) -> str:
    """Encode a signed JWT asserting identity until now + ttl.

    Timestamps are whole seconds (NumericDate), so iat and exp are truncated
    the same way and exp - iat always equals ttl for whole-second ttls.
    """
    issued_at = now or _utcnow()
    claims = {
        "iss": ISSUER,
        "sub": str(identity),
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + ttl).timestamp()),
    }
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def _is_canonical(segment: str) -> bool:
    """True only if segment is the one base64url spelling of its bytes.

    The decoder ignores the unused low bits of the final character, so two
    spellings can decode to the same MAC. Only the canonical one is accepted.
    """
    try:
        raw = segment.encode("ascii")
        return base64url_encode(base64url_decode(raw)) == raw
    except ValueError:
        return False


def _is_numeric_date(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def verify_access_token(
    token: str,
    secret: str,
    *,
    now: datetime | None = None,
    leeway: int = 0,
) -> Outcome[Identity]:
    """Verify signature, claims and expiry; return the subject Identity.

    Expiry is strict: a token is expired at the exact second exp is reached.
    leeway (seconds) widens that window only when explicitly configured.
    """
    if not isinstance(token, str) or token.count(".") != 2:
        return Outcome.failure(AuthError.MALFORMED)
    if not all(_is_canonical(segment) for segment in token.split(".")):
        return Outcome.failure(AuthError.SIGNATURE_INVALID)

    try:
        payload = jws.verify(token, secret, algorithms=[ALGORITHM])
    except JWSError:
        return Outcome.failure(AuthError.SIGNATURE_INVALID)

    try:
        claims = json.loads(payload)
    except ValueError:
        return Outcome.failure(AuthError.CLAIMS_INVALID)
    if not isinstance(claims, dict) or any(name not in claims for name in _REQUIRED_CLAIMS):
        return Outcome.failure(AuthError.CLAIMS_INVALID)
    if claims["iss"] != ISSUER or not isinstance(claims["sub"], str):
        return Outcome.failure(AuthError.CLAIMS_INVALID)
    if not (_is_numeric_date(claims["iat"]) and _is_numeric_date(claims["exp"])):
        return Outcome.failure(AuthError.CLAIMS_INVALID)

    current = (now or _utcnow()).timestamp()
    if current >= claims["exp"] + leeway:
        return Outcome.failure(AuthError.EXPIRED)

    try:
        identity = Identity.parse(claims["sub"])
    except ValueError:
        return Outcome.failure(AuthError.SUBJECT_INVALID)
    return Outcome.success(identity)
