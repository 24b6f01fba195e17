"""
api/routes/v1/auth.py -- Session endpoints: login, refresh, revoke.

Routes:
  POST /api/v1/login    -- email/password -> user + access token + refresh token
  POST /api/v1/refresh  -- Bearer <refresh token> -> new access token
  POST /api/v1/revoke   -- Bearer <refresh token> -> 204, token unusable from now on

Security:
  [C1] AuthService.authenticate() provides timing equalization -- use it,
       never inline get_by_email() + verify_password().
  [M5] Cache-Control: no-store on every response that carries token material.
  Wrong email and wrong password share one message; expired, revoked and
  unknown refresh tokens share another. The precise AuthError tag is logged.
  /revoke is idempotent: revoking an unknown or already-revoked token is a
  no-op that still answers 204.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from api.models import LoginResponse, TokenResponse, UserCredentials, UserResponse
from auth.dependencies import get_auth, get_refresh_token

logger = logging.getLogger("chirpy.api.auth")

# Auth policy:
# - POST /api/v1/login:    public -- login endpoint must be unauthenticated
# - POST /api/v1/refresh:  refresh token in Authorization: Bearer
# - POST /api/v1/revoke:   refresh token in Authorization: Bearer
router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login(request: Request, body: UserCredentials) -> JSONResponse:
    """Authenticate with email and password; issue an access/refresh token pair.

    The access token lives ACCESS_TOKEN_TTL_SECONDS (1 hour by default);
    the refresh token lives REFRESH_TOKEN_TTL_DAYS (60 by default).
    """
    auth = get_auth(request)
    result = auth.authenticate(body.email, body.password)
    if not result.ok:
        logger.info("Login rejected: %s", result.error.value)
        resp = JSONResponse(
            status_code=401,
            content={"error": {"code": "bad_credentials", "message": "Incorrect email or password."}},
        )
        resp.headers["Cache-Control"] = "no-store"  # [M5]
        return resp

    user = result.value
    token = auth.issue_access_token(user.id)
    issued = auth.issue_refresh_token(user.id)
    if not issued.ok:
        logger.error("Could not issue refresh token for %s: %s", user.id, issued.error.value)
        raise HTTPException(
            status_code=500,
            detail={"code": "session_unavailable", "message": "Could not start a session. Try again."},
        )

    content = LoginResponse(
        **UserResponse.from_user(user).model_dump(),
        token=token,
        refresh_token=issued.value.token,
    )
    resp = JSONResponse(status_code=200, content=content.model_dump(mode="json"))
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


@router.post("/refresh", response_model=TokenResponse)
def refresh(request: Request, refresh_token: str = Depends(get_refresh_token)) -> JSONResponse:
    """Mint a new access token for the identity bound to a live refresh token.

    The refresh token itself is not rotated or extended.
    """
    auth = get_auth(request)
    resolved = auth.resolve_refresh_token(refresh_token)
    if not resolved.ok:
        logger.info("Refresh rejected: %s (%s)", resolved.error.value, resolved.error.category)
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Token didn't exist or is no longer valid."},
        )
    resp = JSONResponse(content=TokenResponse(token=auth.issue_access_token(resolved.value)).model_dump())
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


@router.post("/revoke", status_code=204)
def revoke(request: Request, refresh_token: str = Depends(get_refresh_token)) -> Response:
    """Revoke a refresh token. Idempotent."""
    result = get_auth(request).revoke_refresh_token(refresh_token)
    if not result.ok:
        logger.info("Revoke was a no-op: %s", result.error.value)
    return Response(status_code=204)
