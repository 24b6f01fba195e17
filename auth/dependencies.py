"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

These helpers are the HTTP boundary of the auth subsystem. They run the
Guard, log the precise AuthError tag, and raise HTTPException with a
deliberately generic message: an unauthenticated caller learns only that
the credential was not accepted, never whether it was expired, revoked or
malformed.

  get_current_identity()  -- Bearer access token -> Identity, else 401.
  get_refresh_token()     -- Bearer refresh token (raw string), else 401.
  require_dev_platform()  -- 403 unless PLATFORM=dev.
  require_owner()         -- 403 when the caller does not own the resource.

Layer rule: no imports from chirps/ or core/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request

from auth.guard import Decision, GuardState
from auth.models import Identity
from auth.service import AuthService

logger = logging.getLogger("chirpy.auth")


def get_auth(request: Request) -> AuthService:
    return request.app.state.auth


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"code": "unauthorized", "message": message},
    )


def get_current_identity(request: Request) -> Identity:
    """Require a valid access token. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.post("/chirps")
        def route(identity: Identity = Depends(get_current_identity)): ...
    """
    decision = get_auth(request).authenticate_request(request.headers)
    if decision.state is not GuardState.TOKEN_VERIFIED:
        logger.info(
            "Access token rejected on %s %s: %s (%s)",
            request.method,
            request.url.path,
            decision.error.value,
            decision.error.category,
        )
        raise _unauthorized("The provided token is invalid or missing.")
    return decision.identity


def get_current_decision(request: Request) -> Decision:
    """Like get_current_identity() but returns the TOKEN_VERIFIED Decision.

    Routes that follow up with an ownership check pass this to
    require_owner() so the guard walks its full state machine.
    """
    identity = get_current_identity(request)
    return Decision(state=GuardState.TOKEN_VERIFIED, identity=identity)


def get_refresh_token(request: Request) -> str:
    """Return the raw refresh token from 'Authorization: Bearer <token>'."""
    extracted = get_auth(request).extract_bearer(request.headers)
    if not extracted.ok:
        logger.info("Refresh credential rejected on %s: %s", request.url.path, extracted.error.value)
        raise _unauthorized("Token didn't exist or is no longer valid.")
    return extracted.value


def require_owner(auth: AuthService, decision: Decision, owner: Identity) -> Identity:
    """Raise HTTP 403 unless the verified identity owns the resource."""
    result = auth.authorize_owner(decision, owner)
    if not result.allowed:
        logger.info("Ownership check failed: %s is not %s", decision.identity, owner)
        raise HTTPException(
            status_code=403,
            detail={"code": "forbidden", "message": "You do not own this resource."},
        )
    return result.identity


def require_dev_platform(request: Request) -> None:
    """Environment gate for state-wiping admin endpoints. Raises HTTP 403.

    Runs as a dependency, so it is evaluated before the route body and
    therefore before any side effect.
    """
    decision = get_auth(request).authorize_reset()
    if not decision.allowed:
        logger.warning("Admin reset refused outside the dev platform")
        raise HTTPException(
            status_code=403,
            detail={"code": "forbidden", "message": "Access denied."},
        )
