"""Process-local TTL cache for resolved reference data.

The cache is a disposable view of the document store: it may be dropped at
any time and only costs a round trip to rebuild. There is no background
eviction; an entry older than the TTL is treated as absent and removed on
the read that finds it.

Instances are owned explicitly (one per service wiring, one per test), not
shared through a module global. The clock is injectable so expiry can be
tested without sleeping.

Guarded by a threading.Lock: the asyncio loop is single-threaded, but the
store adapter may run callbacks from a driver thread.
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0  # 5 minutes


@dataclass
class CacheEntry:
    key: str
    data: Any
    timestamp: float


@dataclass
class CacheStats:
    hits: int
    misses: int
    size: int

    @property
    def hit_rate(self) -> float:
        """Percentage of reads served from cache (0.0 when no reads yet)."""
        total = self.hits + self.misses
        return (self.hits / total) * 100 if total else 0.0


class TTLCache:
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, key: str) -> Any | None:
        """Return the value stored under key, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._clock() - entry.timestamp >= self._ttl:
                del self._entries[key]
                entry = None
            if entry is None:
                self._misses += 1
                logger.debug("Cache MISS: %s", key)
                return None
            self._hits += 1
            logger.debug("Cache HIT: %s", key)
            return entry.data

    def set(self, key: str, value: Any) -> None:
        if value is None:
            raise ValueError("None cannot be cached; it means 'absent'")
        with self._lock:
            self._entries[key] = CacheEntry(key=key, data=value, timestamp=self._clock())

    def invalidate(self, pattern: str | None = None) -> int:
        """Evict keys containing pattern as a substring; no pattern evicts all.

        Returns the number of evicted entries.
        """
        with self._lock:
            if pattern is None:
                count = len(self._entries)
                self._entries.clear()
            else:
                doomed = [k for k in self._entries if pattern in k]
                for k in doomed:
                    del self._entries[k]
                count = len(doomed)
        logger.debug("Cache invalidate pattern=%r evicted=%d", pattern, count)
        return count

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(hits=self._hits, misses=self._misses, size=len(self._entries))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
