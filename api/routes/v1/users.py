"""
api/routes/v1/users.py -- Account registration and management.

Routes:
  POST   /api/v1/users        -- register (public)
  PUT    /api/v1/users        -- change own email/password (access token)
  GET    /api/v1/users        -- list accounts (public, no hashes)
  GET    /api/v1/users/{id}   -- one account (public)
  DELETE /api/v1/users/{id}   -- delete own account (access token + ownership)

Ownership policy: acting on someone else's account is 403, not 404.
Deleting an account cascades to its chirps and refresh tokens.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.exc import IntegrityError

from api.models import UserCredentials, UserResponse
from auth.dependencies import get_auth, get_current_decision, get_current_identity, require_owner
from auth.guard import Decision
from auth.models import Identity, User
from auth.store import UserStore

logger = logging.getLogger("chirpy.api.users")

router = APIRouter()


def _conflict() -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={"code": "conflict", "message": "A user with that email already exists."},
    )


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"code": "not_found", "message": "User not found."},
    )


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(request: Request, body: UserCredentials) -> UserResponse:
    """Register a new account. The password is hashed before it is stored."""
    auth = get_auth(request)
    user_store: UserStore = request.app.state.user_store
    try:
        user = user_store.create_user(User(email=body.email, hashed_password=auth.hash_password(body.password)))
    except IntegrityError as exc:
        raise _conflict() from exc
    logger.info("User %s registered", user.id)
    return UserResponse.from_user(user)


@router.put("/users", response_model=UserResponse)
def update_user(
    request: Request,
    body: UserCredentials,
    identity: Identity = Depends(get_current_identity),
) -> UserResponse:
    """Replace the caller's email and password. The target is always the token's subject."""
    auth = get_auth(request)
    user_store: UserStore = request.app.state.user_store
    try:
        user = user_store.update_user(identity, body.email, auth.hash_password(body.password))
    except IntegrityError as exc:
        raise _conflict() from exc
    if user is None:
        raise _not_found()
    return UserResponse.from_user(user)


@router.get("/users", response_model=list[UserResponse])
def list_users(request: Request) -> list[UserResponse]:
    user_store: UserStore = request.app.state.user_store
    return [UserResponse.from_user(u) for u in user_store.list_users()]


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(request: Request, user_id: uuid.UUID) -> UserResponse:
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(Identity(user_id))
    if user is None:
        raise _not_found()
    return UserResponse.from_user(user)


@router.delete("/users/{user_id}", status_code=204)
def delete_user(
    request: Request,
    user_id: uuid.UUID,
    decision: Decision = Depends(get_current_decision),
) -> Response:
    """Delete the caller's own account. Anyone else's account is 403."""
    target = Identity(user_id)
    require_owner(get_auth(request), decision, target)
    user_store: UserStore = request.app.state.user_store
    if not user_store.delete_user(target):
        raise _not_found()
    logger.info("User %s deleted", target)
    return Response(status_code=204)
