"""
core/metrics.py -- Process-wide hit counter for the /app file server.

The counter is the only in-process mutable state shared across requests.
It lives behind this small interface (created in the lifespan and stored on
app.state) instead of a module global, so tests get a fresh instance.

Usage:
    hits = HitCounter()
    hits.increment()
    hits.value      # -> 1
    hits.reset()
"""

import threading


class HitCounter:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._hits = 0

    def increment(self) -> int:
        """Add one hit and return the new total."""
        with self._lock:
            self._hits += 1
            return self._hits

    @property
    def value(self) -> int:
        with self._lock:
            return self._hits

    def reset(self) -> None:
        with self._lock:
            self._hits = 0
