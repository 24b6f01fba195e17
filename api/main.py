"""
api/main.py -- FastAPI application entry point for Chirpy.

Run with:      python main.py serve
               uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware   -- adds CORS headers for browser clients
  2. log_requests     -- method, path, status and latency for every request
  3. count_app_hits   -- bumps the /app hit counter shown on /admin/metrics

Lifespan builds the stores, the auth facade and the hit counter at startup
and closes the stores at shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.admin import router as admin_router
from api.routes.v1.auth import router as auth_router
from api.routes.v1.chirps import router as chirps_router
from api.routes.v1.users import router as users_router
from api.routes.v1.webhooks import router as webhooks_router
from auth.results import HashingError
from auth.service import AuthService
from auth.store import UserStore
from chirps.store import ChirpStore
from core.config import get_settings
from core.metrics import HitCounter

VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("chirpy.api")

# ---------------------------------------------------------------------------
# Lifespan -- modern startup / shutdown pattern (replaces @app.on_event)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-level resources across the full server lifetime.

    Startup order matters:
      1. Settings first -- a missing JWT_SECRET outside dev must fail here,
         before the server accepts a single request.
      2. UserStore before ChirpStore -- chirps.user_id references users.id.
      3. AuthService last -- it wraps the UserStore.
    """
    settings = get_settings()
    logger.info("Chirpy API starting up (platform=%s)", settings.platform)
    app.state.settings = settings
    app.state.user_store = UserStore(db_url=settings.db_url)
    app.state.chirp_store = ChirpStore(db_url=settings.db_url)
    app.state.auth = AuthService(settings, app.state.user_store)
    app.state.hits = HitCounter()
    logger.info("Stores initialized")

    yield

    app.state.chirp_store.close()
    app.state.user_store.close()
    logger.info("Chirpy API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Chirpy API",
    description="Short-post social backend with JWT access tokens and revocable refresh tokens.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


# ---------------------------------------------------------------------------
# Request middleware
#
# @app.middleware("http") wraps all routes at the ASGI level and receives the
# raw Request/Response objects. The last one registered runs first.
# ---------------------------------------------------------------------------


@app.middleware("http")
async def count_app_hits(request: Request, call_next):
    """Count every request to the /app file server."""
    path = request.url.path
    if path == "/app" or path.startswith("/app/"):
        request.app.state.hits.increment()
    return await call_next(request)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(users_router, prefix="/api/v1", tags=["Users"])
app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(chirps_router, prefix="/api/v1", tags=["Chirps"])
app.include_router(webhooks_router, prefix="/api/v1", tags=["Webhooks"])
app.include_router(admin_router, prefix="/admin", tags=["Admin"])
# The /app static mount is added by asgi.py, not here.


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when request body or query params fail validation."""
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message="Request validation failed.",
                detail=str(exc.errors()),
            )
        ).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    Route handlers raise HTTPException with a {"code", "message"} dict as
    detail; use it directly as the error field rather than stringifying it.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=exc.headers,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(HashingError)
async def hashing_error_handler(request: Request, exc: HashingError) -> JSONResponse:
    """bcrypt failed internally. Nothing about the password reaches the log."""
    logger.error("Password hashing failed on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(code="internal_error", message="An unexpected error occurred."),
        ).model_dump(),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    Security note: the raw exception is written to the log only, never to the
    response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="internal_error",
                message="An unexpected error occurred.",
            )
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state.
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness, version and a database round-trip check."""
    try:
        database = "ok" if request.app.state.user_store.ping() else "error"
    except SQLAlchemyError:
        logger.exception("Health check database ping failed")
        database = "error"
    return HealthResponse(version=VERSION, components={"app": "ok", "database": database})
