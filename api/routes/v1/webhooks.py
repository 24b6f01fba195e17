"""
api/routes/v1/webhooks.py -- Payment-provider (Polka) webhook.

Route:
  POST /api/v1/polka/webhooks  -- privileged ApiKey; upgrades a user to Chirpy Red

The caller is a system, not a user, so there is no access token. The
privileged key is checked before the body is even parsed:
  no key          -> 204 with no body (the endpoint does not admit to existing)
  wrong key       -> 401
  other events    -> 204 (acknowledged, ignored)
  unknown user    -> 404
  upgraded        -> 204

The body is parsed by hand rather than as a FastAPI body parameter, because
a declared body would be validated (and answered with 422) before the key
check runs. The handler is async for that reason, so the blocking store
call is pushed to the threadpool.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from api.models import WebhookEvent
from auth.dependencies import get_auth
from auth.models import Identity
from auth.results import AuthError
from auth.store import UserStore

logger = logging.getLogger("chirpy.api.webhooks")

UPGRADE_EVENT = "user.upgrade"

router = APIRouter()


@router.post("/polka/webhooks", status_code=204)
async def polka_webhook(request: Request) -> Response:
    decision = get_auth(request).authorize_webhook(request.headers)
    if not decision.allowed:
        if decision.error is AuthError.MISSING:
            return Response(status_code=204)
        logger.warning("Webhook call with an invalid key from %s", request.client.host if request.client else "unknown")
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Invalid API key."},
        )

    try:
        event = WebhookEvent.model_validate_json(await request.body())
    except ValidationError as exc:
        raise HTTPException(
            status_code=400,
            detail={"code": "bad_request", "message": "Malformed webhook payload."},
        ) from exc

    if event.event != UPGRADE_EVENT:
        return Response(status_code=204)

    user_store: UserStore = request.app.state.user_store
    if not await run_in_threadpool(user_store.set_chirpy_red, Identity(event.data.user_id)):
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "User not found."},
        )
    logger.info("User %s upgraded to Chirpy Red", event.data.user_id)
    return Response(status_code=204)
