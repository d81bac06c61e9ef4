"""In-memory fixed-window rate limiter.

Each key gets a window that opens on its first hit and lasts ``window_seconds``.
Up to ``max_hits`` hits are allowed inside the window; the next hit after the
window has passed opens a fresh one. State is per process.
"""
import logging
import time
from threading import Lock
from typing import Dict, NamedTuple, Optional

logger = logging.getLogger(__name__)


class RateLimitResult(NamedTuple):
    allowed: bool
    remaining: int
    reset_seconds: float


class _Window:
    __slots__ = ("count", "reset_at")

    def __init__(self, count: int, reset_at: float):
        self.count = count
        self.reset_at = reset_at


class RateLimiter:
    def __init__(self, clock=time.monotonic, sweep_threshold: int = 1024):
        self._clock = clock
        self._lock = Lock()
        self._buckets: Dict[str, _Window] = {}
        self.sweep_threshold = sweep_threshold

    def hit(self, key: str, max_hits: int, window_seconds: float, now: Optional[float] = None) -> RateLimitResult:
        now = self._clock() if now is None else now
        with self._lock:
            window = self._buckets.get(key)
            if window is None or now > window.reset_at:
                if window is None and len(self._buckets) >= self.sweep_threshold:
                    self._sweep(now)
                self._buckets[key] = _Window(1, now + window_seconds)
                return RateLimitResult(True, max(0, max_hits - 1), window_seconds)

            if window.count >= max_hits:
                logger.info("Rate limit reached for %s (%d hits)", key, window.count)
                return RateLimitResult(False, 0, max(0.0, window.reset_at - now))

            window.count += 1
            return RateLimitResult(True, max(0, max_hits - window.count), max(0.0, window.reset_at - now))

    def _sweep(self, now: float) -> int:
        stale = [k for k, w in self._buckets.items() if now > w.reset_at]
        for k in stale:
            del self._buckets[k]
        if stale:
            logger.debug("Evicted %d expired rate limit windows", len(stale))
        return len(stale)

    def cleanup(self, now: Optional[float] = None) -> int:
        """Drop windows that have expired; returns how many were removed."""
        now = self._clock() if now is None else now
        with self._lock:
            return self._sweep(now)

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._buckets.clear()
            else:
                self._buckets.pop(key, None)


__all__ = ['RateLimiter', 'RateLimitResult']
