"""Simple in-memory cache with per-entry TTL, used for the public menu response.

Suitable for a single process; every worker keeps its own copy.
"""
import json
import time
from threading import Lock
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


class SimpleCache(Generic[T]):
    def __init__(self, default_ttl: float = 300.0, clock=time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._lock = Lock()
        self._entries: Dict[str, Tuple[T, float]] = {}

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() > expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + (self.default_ttl if ttl is None else ttl))

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> Dict[str, int]:
        now = self._clock()
        with self._lock:
            expired = sum(1 for _, expires_at in self._entries.values() if now > expires_at)
            return {"size": len(self._entries), "expired": expired}

    def cleanup(self) -> int:
        """Drop expired entries; returns how many were removed."""
        now = self._clock()
        with self._lock:
            stale = [k for k, (_, expires_at) in self._entries.items() if now > expires_at]
            for k in stale:
                del self._entries[k]
        return len(stale)


def cache_key(params: Dict[str, Any]) -> str:
    """Stable key for a set of request parameters (order independent)."""
    return "&".join(f"{k}={json.dumps(params[k], sort_keys=True, default=str)}" for k in sorted(params))


__all__ = ['SimpleCache', 'cache_key']
