# File: tazasu/core/rate_limit.py

"""
In-process rolling-window rate limiter keyed by client address.

Only throttles new requests; requests already admitted run to completion.
State lives in the process, so each worker counts independently.
"""

import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

DEFAULT_LIMIT = 100
DEFAULT_WINDOW = 15 * 60


class RateLimiter:
    """Counts request timestamps per key over the last ``window`` seconds."""

    def __init__(
        self,
        limit: int = DEFAULT_LIMIT,
        window: int = DEFAULT_WINDOW,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.limit = limit
        self.window = window
        self._clock = clock or time.monotonic
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = self._clock()

    def __len__(self) -> int:
        """Number of clients currently tracked."""
        return len(self._hits)

    def _sweep(self, now: float) -> None:
        # Forget clients whose newest hit has left the window.
        cutoff = now - self.window
        for key in [k for k, hits in self._hits.items() if not hits or hits[-1] <= cutoff]:
            del self._hits[key]
        self._last_sweep = now

    def check(self, key: str) -> dict:
        """Record a hit for ``key`` and report whether it is allowed."""
        now = self._clock()
        if now - self._last_sweep >= self.window:
            self._sweep(now)

        hits = self._hits.setdefault(key, deque())
        cutoff = now - self.window
        while hits and hits[0] <= cutoff:
            hits.popleft()

        if len(hits) >= self.limit:
            retry_after = int(hits[0] + self.window - now) + 1
            return {"allowed": False, "remaining": 0, "retry_after": retry_after}

        hits.append(now)
        return {"allowed": True, "remaining": self.limit - len(hits), "retry_after": 0}
