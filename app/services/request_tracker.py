"""
app/services/request_tracker.py

Request-generation guard for report views.

Each new fetch for a view takes the next id; a response is applied only if
its id is still the newest one issued for that view. A slow response that
resolves after a newer request has been issued is discarded instead of
overwriting fresher state.
"""

from __future__ import annotations

import threading
from collections import defaultdict


class RequestTracker:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest: dict[str, int] = defaultdict(int)

    def begin(self, view: str = "sales_report") -> int:
        """Issue the next request id for *view*."""
        with self._lock:
            self._latest[view] += 1
            return self._latest[view]

    def latest(self, view: str = "sales_report") -> int:
        with self._lock:
            return self._latest[view]

    def is_current(self, request_id: int, view: str = "sales_report") -> bool:
        with self._lock:
            return request_id == self._latest[view]
