"""
api/routes/v1/chirps.py -- Chirp CRUD endpoints.

Routes:
  POST   /api/v1/chirps        -- create a chirp owned by the caller
  GET    /api/v1/chirps        -- list (?author_id=<uuid>&sort=asc|desc)
  GET    /api/v1/chirps/{id}   -- one chirp
  PUT    /api/v1/chirps/{id}   -- replace body (owner only)
  DELETE /api/v1/chirps/{id}   -- delete (owner only)

Ownership policy: an existing chirp that belongs to someone else is 403;
a chirp that does not exist is 404. The author of a new chirp is always the
access token's subject -- clients cannot post on someone else's behalf.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.exc import IntegrityError

from api.models import ChirpCreate, ChirpResponse, SortEnum
from auth.dependencies import get_auth, get_current_decision, get_current_identity, require_owner
from auth.guard import Decision
from auth.models import Identity
from chirps.content import clean_body
from chirps.models import Chirp
from chirps.store import ChirpStore

logger = logging.getLogger("chirpy.api.chirps")

router = APIRouter()


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"code": "not_found", "message": "Chirp not found."},
    )


def _load_chirp(store: ChirpStore, chirp_id: uuid.UUID) -> Chirp:
    chirp = store.get_chirp(chirp_id)
    if chirp is None:
        raise _not_found()
    return chirp


@router.post("/chirps", response_model=ChirpResponse, status_code=201)
def create_chirp(
    request: Request,
    body: ChirpCreate,
    identity: Identity = Depends(get_current_identity),
) -> ChirpResponse:
    store: ChirpStore = request.app.state.chirp_store
    try:
        chirp = store.create_chirp(Chirp(body=clean_body(body.body), user_id=identity))
    except IntegrityError as exc:
        # Token is valid but the account behind it has since been deleted.
        logger.info("Chirp rejected: account %s no longer exists", identity)
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "The provided token is invalid or missing."},
        ) from exc
    return ChirpResponse.from_chirp(chirp)


@router.get("/chirps", response_model=list[ChirpResponse])
def list_chirps(
    request: Request,
    author_id: Optional[uuid.UUID] = None,
    sort: SortEnum = SortEnum.asc,
) -> list[ChirpResponse]:
    """List chirps by creation time, oldest first unless sort=desc."""
    store: ChirpStore = request.app.state.chirp_store
    author = Identity(author_id) if author_id is not None else None
    chirps = store.list_chirps(author_id=author, newest_first=sort is SortEnum.desc)
    return [ChirpResponse.from_chirp(c) for c in chirps]


@router.get("/chirps/{chirp_id}", response_model=ChirpResponse)
def get_chirp(request: Request, chirp_id: uuid.UUID) -> ChirpResponse:
    store: ChirpStore = request.app.state.chirp_store
    return ChirpResponse.from_chirp(_load_chirp(store, chirp_id))


@router.put("/chirps/{chirp_id}", response_model=ChirpResponse)
def update_chirp(
    request: Request,
    chirp_id: uuid.UUID,
    body: ChirpCreate,
    decision: Decision = Depends(get_current_decision),
) -> ChirpResponse:
    store: ChirpStore = request.app.state.chirp_store
    chirp = _load_chirp(store, chirp_id)
    require_owner(get_auth(request), decision, chirp.user_id)
    updated = store.update_chirp(chirp_id, clean_body(body.body))
    if updated is None:
        raise _not_found()
    return ChirpResponse.from_chirp(updated)


@router.delete("/chirps/{chirp_id}", status_code=204)
def delete_chirp(
    request: Request,
    chirp_id: uuid.UUID,
    decision: Decision = Depends(get_current_decision),
) -> Response:
    store: ChirpStore = request.app.state.chirp_store
    chirp = _load_chirp(store, chirp_id)
    require_owner(get_auth(request), decision, chirp.user_id)
    if not store.delete_chirp(chirp_id):
        raise _not_found()
    return Response(status_code=204)
