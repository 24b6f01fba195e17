"""
api/routes/admin.py -- Operator endpoints mounted under /admin.

Routes:
  GET  /admin/metrics  -- HTML page with the /app hit count
  POST /admin/reset    -- zero the hit count and delete every user (dev only)

/admin/reset is gated by the deployment mode, not by identity: the
require_dev_platform dependency runs before the route body, so outside
PLATFORM=dev nothing is mutated no matter what credential is presented.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse

from auth.dependencies import require_dev_platform
from auth.store import UserStore
from core.metrics import HitCounter

router = APIRouter()

_METRICS_TEMPLATE = """<html>
  <body>
    <h1>Welcome, Chirpy Admin</h1>
    <p>Chirpy has been visited {hits} times!</p>
  </body>
</html>"""


@router.get("/metrics", response_class=HTMLResponse)
async def metrics(request: Request) -> HTMLResponse:
    hits: HitCounter = request.app.state.hits
    return HTMLResponse(_METRICS_TEMPLATE.format(hits=hits.value))


@router.post("/reset", response_class=PlainTextResponse, dependencies=[Depends(require_dev_platform)])
def reset(request: Request) -> PlainTextResponse:
    """Dev-only wipe. Chirps and refresh tokens go with their users (cascade)."""
    hits: HitCounter = request.app.state.hits
    user_store: UserStore = request.app.state.user_store
    hits.reset()
    deleted = user_store.delete_all_users()
    return PlainTextResponse(f"Hits reset to 0\nUsers deleted: {deleted}\n")
