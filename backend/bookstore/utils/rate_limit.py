"""In-memory throttle for repeated failed logins."""

from __future__ import annotations

import threading
import time
from collections import deque


class FailedLoginThrottle:
    """Sliding-window counter of failures per key.

    Only failures are recorded; `reset` clears a key after a successful
    login so legitimate users are not locked out by earlier typos. Keys
    whose failures have all expired are dropped, and the map never holds
    more than `max_keys` entries.
    """

    def __init__(self, max_failures: int, window_seconds: int, max_keys: int = 10000):
        self.max_failures = max_failures
        self.window_seconds = window_seconds
        self.max_keys = max_keys
        self._failures: dict[str, deque] = {}
        self._lock = threading.Lock()

    def _prune(self, key: str, now: float) -> deque | None:
        """Drop expired failures for `key`; forget the key once none remain."""
        q = self._failures.get(key)
        if q is None:
            return None
        cutoff = now - self.window_seconds
        while q and q[0] <= cutoff:
            q.popleft()
        if not q:
            del self._failures[key]
            return None
        return q

    def _sweep(self, now: float) -> None:
        for key in list(self._failures):
            self._prune(key, now)

    def tracked_keys(self) -> int:
        """Number of keys currently holding unexpired failures."""
        with self._lock:
            return len(self._failures)

    def check(self, key: str) -> int:
        """Return 0 when `key` may attempt a login, else seconds to wait."""
        now = time.monotonic()
        with self._lock:
            q = self._prune(key, now)
            if q is None or len(q) < self.max_failures:
                return 0
            return max(1, int(self.window_seconds - (now - q[0])))

    def record_failure(self, key: str) -> None:
        now = time.monotonic()
        with self._lock:
            q = self._prune(key, now)
            if q is None:
                if len(self._failures) >= self.max_keys:
                    self._sweep(now)
                    if len(self._failures) >= self.max_keys:
                        oldest = min(self._failures, key=lambda k: self._failures[k][-1])
                        del self._failures[oldest]
                q = self._failures[key] = deque()
            q.append(now)

    def reset(self, key: str) -> None:
        with self._lock:
            self._failures.pop(key, None)
