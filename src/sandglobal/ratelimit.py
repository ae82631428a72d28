"""Process-local sliding-window rate limiter."""

from __future__ import annotations

import math
import time
from collections import deque
from collections.abc import Callable

from fastapi import Request


class SlidingWindowRateLimiter:
    """Allow at most ``max_requests`` hits per key within ``window_seconds``.

    State lives in memory only; it resets on restart and is not shared
    between processes.
    """

    def __init__(
        self,
        max_requests: int = 5,
        window_seconds: float = 300,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._hits: dict[str, deque[float]] = {}

    def hit(self, key: str) -> bool:
        """Record a hit for ``key``; False means it was rejected."""
        now = self.clock()
        hits = self._hits.setdefault(key, deque())
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()
        if len(hits) >= self.max_requests:
            return False
        hits.append(now)
        return True

    def remaining(self, key: str) -> int:
        now = self.clock()
        hits = self._hits.get(key, ())
        active = sum(1 for ts in hits if now - ts < self.window_seconds)
        return max(self.max_requests - active, 0)

    def retry_after(self, key: str) -> int:
        """Whole seconds until ``key`` may hit again; 0 if it can now."""
        if self.remaining(key) > 0:
            return 0
        hits = self._hits.get(key)
        if not hits:
            return math.ceil(self.window_seconds)
        wait = self.window_seconds - (self.clock() - hits[0])
        return max(math.ceil(wait), 1)


def client_key(request: Request) -> str:
    """Caller address for rate limiting, preferring proxy headers."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"
