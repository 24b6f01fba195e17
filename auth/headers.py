"""
auth/headers.py -- Credential extraction from request headers.

Two header conventions:
  Authorization: Bearer <token>     -- access tokens and refresh tokens
  <API_KEY_HEADER>: ApiKey <key>    -- the privileged webhook key

Both functions are pure parsers over an immutable header mapping (a
Starlette Headers object in production, a plain dict in tests). They never
touch the network or the database.

Layer rule: no imports from api/, chirps/, or core/.
"""

from __future__ import annotations

from collections.abc import Mapping

from auth.results import AuthError, Outcome

BEARER_SCHEME = "Bearer"
API_KEY_SCHEME = "ApiKey"


def extract_bearer(headers: Mapping[str, str], header_name: str = "Authorization") -> Outcome[str]:
    """Return the token from 'Authorization: Bearer <token>'.

    The scheme match is case-sensitive. A bare 'Bearer' (servers often strip
    the trailing space) is treated the same as 'Bearer ' -- EMPTY.
    """
    raw = headers.get(header_name)
    if raw is None or not raw.strip():
        return Outcome.failure(AuthError.MISSING)
    if raw.strip() == BEARER_SCHEME:
        return Outcome.failure(AuthError.EMPTY)
    if not raw.startswith(BEARER_SCHEME + " "):
        return Outcome.failure(AuthError.MALFORMED)
    token = raw[len(BEARER_SCHEME) + 1 :].strip()
    if not token:
        return Outcome.failure(AuthError.EMPTY)
    return Outcome.success(token)


def extract_api_key(headers: Mapping[str, str], header_name: str = "Authorization") -> Outcome[str]:
    """Return the key from '<header_name>: ApiKey <key>'.

    An absent header, or one carrying the scheme with nothing after it, is
    MISSING. Any other scheme is MALFORMED.
    """
    raw = headers.get(header_name)
    if raw is None or not raw.strip() or raw.strip() == API_KEY_SCHEME:
        return Outcome.failure(AuthError.MISSING)
    if not raw.startswith(API_KEY_SCHEME + " "):
        return Outcome.failure(AuthError.MALFORMED)
    key = raw[len(API_KEY_SCHEME) + 1 :].strip()
    if not key:
        return Outcome.failure(AuthError.MISSING)
    return Outcome.success(key)
