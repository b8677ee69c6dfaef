"""In-memory sliding-window limiter for registration attempts, keyed by client IP."""

import threading
import time
from collections import OrderedDict
from collections.abc import Callable


class SlidingWindowLimiter:
    """
    Allow at most `limit` hits per key within `window_seconds`.

    Created once per application; the lock makes it safe under the threadpool
    FastAPI uses for sync endpoints. Best-effort only: limits are per process.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        *,
        max_keys: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if limit <= 0:
            raise ValueError("limit must be > 0")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        self.limit = limit
        self.window_seconds = float(window_seconds)
        self.max_keys = max_keys
        self._clock = clock
        self._hits: "OrderedDict[str, list[float]]" = OrderedDict()
        self._lock = threading.Lock()

    def hit(self, key: str) -> tuple[bool, int]:
        """Record an attempt. Returns (allowed, retry_after_seconds)."""
        with self._lock:
            now = self._clock()
            window_start = now - self.window_seconds
            recent = [t for t in self._hits.get(key, []) if t > window_start]

            if len(recent) >= self.limit:
                self._hits[key] = recent
                retry_after = int(recent[0] - window_start) + 1
                return False, retry_after

            recent.append(now)
            self._hits[key] = recent
            self._hits.move_to_end(key)
            while len(self._hits) > self.max_keys:
                self._hits.popitem(last=False)
            return True, 0
