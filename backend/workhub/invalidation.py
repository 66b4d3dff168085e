"""
Route cache invalidation.

After a successful mutation the affected routes are marked stale. Each path
carries a revision number that readers can use as a cache validator.
Invalidation is fire-and-forget: it never affects the stored data.
"""
import logging
import threading
from typing import Dict

logger = logging.getLogger(__name__)


class RouteInvalidator:
    """Per-path revision counters, shared by all requests of the process."""

    def __init__(self):
        self._lock = threading.Lock()
        self._revisions: Dict[str, int] = {}

    def invalidate(self, route_path: str) -> int:
        with self._lock:
            revision = self._revisions.get(route_path, 0) + 1
            self._revisions[route_path] = revision
        logger.debug(f"Invalidated route {route_path} (revision {revision})")
        return revision

    def revision(self, route_path: str) -> int:
        with self._lock:
            return self._revisions.get(route_path, 0)
