"""
Module: engine.cache

Purpose:
    Bounded cache with least-recently-used eviction and a time-to-live.
    Owned by the caller (typically the evaluation service); the selection
    and grouping engines never see it.

Key Classes:
    - BoundedTTLCache: Capacity + TTL cache with get/put/evict

Dependencies:
    - threading (std): Safe for concurrent service calls
    - time (std)

Used By:
    - engine.controller: Memoises grouping results
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Generic, Hashable, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")


class BoundedTTLCache(Generic[V]):
    """
    LRU cache whose entries also expire after ``ttl_seconds``.

    Attributes:
        capacity: Maximum number of entries kept.
        ttl_seconds: Lifetime of an entry from when it was stored.

    Example:
        >>> cache = BoundedTTLCache(capacity=2, ttl_seconds=60)
        >>> cache.put("a", 1)
        >>> cache.get("a")
        1
        >>> cache.get("missing") is None
        True
    """

    def __init__(
        self,
        capacity: int = 256,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize cache.

        Args:
            capacity: Maximum entries before the least recently used is evicted.
            ttl_seconds: Entry lifetime in seconds.
            clock: Seconds clock; injectable for tests.
        """
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1: {capacity}")
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be > 0: {ttl_seconds}")
        self.capacity = capacity
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: "OrderedDict[Hashable, Tuple[float, V]]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: Hashable, default: Optional[V] = None) -> Optional[V]:
        """Return the cached value, or ``default`` when missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return default
            stored_at, value = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                self.misses += 1
                return default
            self._entries.move_to_end(key)
            self.hits += 1
            return value

    def put(self, key: Hashable, value: V) -> None:
        """Store a value, evicting the least recently used entry when full."""
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            self._entries[key] = (self._clock(), value)
            while len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Cache full; evicted {evicted!r}")

    def evict(self, key: Hashable) -> bool:
        """Remove an entry. Returns True if it was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, (t, _) in self._entries.items() if now - t >= self.ttl_seconds]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Any) -> bool:
        """Live-entry check that leaves recency and hit counters untouched."""
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and self._clock() - entry[0] < self.ttl_seconds
