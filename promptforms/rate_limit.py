"""
Per-IP throttling for the credential endpoints.

Sliding window over request timestamps, held in process memory.  Counters
are per worker: N uvicorn workers allow up to N times the configured rate.
"""

import math
import threading
import time
from collections import defaultdict, deque
from typing import Callable, Deque, Dict

from fastapi import HTTPException, Request


class RateLimiter:
    """Allow at most *max_requests* per *window_secs* for each key."""

    def __init__(
        self,
        max_requests: int,
        window_secs: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_secs = window_secs
        self._clock = clock
        self._lock = threading.Lock()
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._last_sweep = clock()

    def check(self, key: str) -> None:
        """Record a hit for *key*; raise 429 with ``Retry-After`` when over the limit."""
        now = self._clock()
        with self._lock:
            self._sweep(now)
            hits = self._drop_expired(key, now)
            if len(hits) >= self.max_requests:
                wait = max(1, math.ceil(hits[0] + self.window_secs - now))
                raise HTTPException(
                    status_code=429,
                    detail="Too many attempts. Please try again later.",
                    headers={"Retry-After": str(wait)},
                )
            hits.append(now)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._hits)

    def _sweep(self, now: float) -> None:
        """Forget keys whose newest hit has left the window, once per window."""
        if now - self._last_sweep < self.window_secs:
            return
        cutoff = now - self.window_secs
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in stale:
            del self._hits[key]
        self._last_sweep = now

    def _drop_expired(self, key: str, now: float) -> Deque[float]:
        hits = self._hits[key]
        cutoff = now - self.window_secs
        while hits and hits[0] <= cutoff:
            hits.popleft()
        return hits


def get_client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For when behind a proxy, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def rate_limited(limiter: RateLimiter) -> Callable[[Request], None]:
    """Build a route dependency that charges one hit to the caller's IP."""

    def dependency(request: Request) -> None:
        limiter.check(get_client_ip(request))

    return dependency


# ── Credential endpoint limits ───────────────────────────────────────────────

login_limiter = RateLimiter(max_requests=10, window_secs=60)
register_limiter = RateLimiter(max_requests=5, window_secs=60)
