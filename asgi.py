"""
asgi.py -- Application assembly for Chirpy.

This is the ONLY file that mounts the /app file server onto the API. Keeping
the mount here lets tests drive api.main.app without a static directory on
disk, while `uvicorn asgi:app` serves both.

Run with:  uvicorn asgi:app --reload
           python main.py serve
"""

from fastapi.staticfiles import StaticFiles

from api.main import app
from core.config import get_settings

# Requests under /app are counted by the count_app_hits middleware in
# api/main.py before they reach the file server.
app.mount(
    "/app",
    StaticFiles(directory=get_settings().static_dir, html=True, check_dir=False),
    name="app",
)
