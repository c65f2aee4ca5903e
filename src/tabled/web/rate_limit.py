"""Fixed-window request limiter keyed by client address.

Each client gets ``max_requests`` per ``window_seconds``; the window starts at
the client's first request and the count resets when it expires.  State is
in-memory and per-process (lost on restart); expired clients are swept out
once per window.
"""

import math
import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitState:
    """Outcome of one hit, with the values reported in RateLimit-* headers."""

    allowed: bool
    limit: int
    remaining: int
    reset_seconds: int

    def headers(self) -> dict[str, str]:
        """Return the standard RateLimit-* response headers."""
        return {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(self.reset_seconds),
        }


class FixedWindowRateLimiter:
    """Count requests per key in fixed windows."""

    def __init__(self, max_requests: int, window_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, tuple[float, int]] = {}  # key -> (window_end, hits)
        self._next_sweep = 0.0

    def __len__(self) -> int:
        """Number of clients currently tracked."""
        return len(self._windows)

    def _evict_expired(self, now: float) -> None:
        """Drop clients whose window has ended, at most once per window."""
        if now < self._next_sweep:
            return
        self._windows = {key: entry for key, entry in self._windows.items() if entry[0] > now}
        self._next_sweep = now + self.window_seconds

    def hit(self, key: str) -> RateLimitState:
        """Record one request from *key* and report whether it is allowed."""
        now = self._clock()
        self._evict_expired(now)
        window_end, hits = self._windows.get(key, (0.0, 0))
        if now >= window_end:
            window_end, hits = now + self.window_seconds, 0

        hits += 1
        self._windows[key] = (window_end, hits)
        return RateLimitState(
            allowed=hits <= self.max_requests,
            limit=self.max_requests,
            remaining=max(self.max_requests - hits, 0),
            reset_seconds=max(math.ceil(window_end - now), 0),
        )

    def reset(self) -> None:
        """Forget all clients."""
        self._windows.clear()
        self._next_sweep = 0.0
