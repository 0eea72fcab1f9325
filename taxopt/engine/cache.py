"""Injected memoization for bracket and optimization results.

The engine never owns a process-wide cache. Callers pass a cache in;
when they don't, the driver creates a CallMemo that lives for exactly one
optimization call.
"""

import hashlib
import json
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Protocol, TypeVar, runtime_checkable

from taxopt.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@runtime_checkable
class CalculationCache(Protocol):
    def get(self, key: str) -> Any | None:
        """Return the cached value, or None on a miss."""
        ...

    def set(self, key: str, value: Any) -> None:
        """Store a value under key."""
        ...

    def clear(self) -> None:
        """Drop every entry."""
        ...


def cache_key(prefix: str, *args: Any, **kwargs: Any) -> str:
    """Generate a deterministic cache key from function arguments."""
    raw = json.dumps(
        {"args": [str(a) for a in args], "kwargs": {k: str(v) for k, v in kwargs.items()}},
        sort_keys=True,
    )
    h = hashlib.sha256(raw.encode()).hexdigest()[:16]
    return f"taxopt:{prefix}:{h}"


def memoize(cache: CalculationCache | None, key: str, compute: Callable[[], T]) -> T:
    if cache is None:
        return compute()
    hit = cache.get(key)
    if hit is not None:
        logger.debug("Cache hit: %s", key)
        return hit
    value = compute()
    cache.set(key, value)
    return value


class CallMemo:
    """Unsynchronized memo table scoped to a single call. Do not share across threads."""

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Any | None:
        value = self._entries.get(key)
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = value

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class SharedTTLCache:
    """
    Thread-safe LRU cache with TTL expiration.

    For hosts that share one cache across concurrent optimization calls.
    Every read and write takes the lock.
    """

    def __init__(
        self,
        maxsize: int | None = None,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        maxsize = settings.cache_maxsize if maxsize is None else maxsize
        ttl_seconds = settings.cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self.maxsize = maxsize
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, Any]] = OrderedDict()
        self._lock = threading.RLock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None

            self._entries.move_to_end(key)
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            self._entries[key] = (self._clock() + self.ttl_seconds, value)

            while len(self._entries) > self.maxsize:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted %s", evicted)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "size": len(self._entries),
                "maxsize": self.maxsize,
                "ttl_seconds": self.ttl_seconds,
            }
