# liiga_teletext/cache.py
"""
Simple in-memory TTL cache for API responses.

Entries expire per key; the interactive controller calls evict_expired() from its
periodic cache monitor so stale tournament days do not pile up in long sessions.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry(Generic[T]):
    """A single cached value, when it was stored and how long it stays fresh."""
    ts: float
    ttl: float
    value: Optional[T]

    def is_fresh(self, now: float) -> bool:
        return self.value is not None and (now - self.ts) < self.ttl


class TTLCache:
    """A small key/value TTL cache with lazy loading."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize an empty cache store."""
        self._store: dict[str, CacheEntry] = {}
        self._clock = clock

    def get(self, key: str) -> Optional[T]:
        """Return a fresh cached value or None."""
        entry = self._store.get(key)
        if entry and entry.is_fresh(self._clock()):
            return entry.value
        return None

    def set(self, key: str, value: T, ttl_seconds: float) -> None:
        self._store[key] = CacheEntry(ts=self._clock(), ttl=ttl_seconds, value=value)

    def get_or_set(
        self,
        key: str,
        ttl_seconds: float | Callable[[T], float],
        loader: Callable[[], T],
    ) -> T:
        """
        Retrieve a cached value if not expired, otherwise compute & store a new value.

        Args:
            key: Cache key.
            ttl_seconds: Time-to-live for the entry, or a function deriving it from the
                loaded value (live games expire faster than finished ones).
            loader: Function that returns the value if the cache is stale/missing.

        Returns:
            The cached or newly loaded value.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        value = loader()
        ttl = ttl_seconds(value) if callable(ttl_seconds) else ttl_seconds
        self.set(key, value, ttl)
        return value

    def evict_expired(self) -> int:
        """Drop expired entries; returns how many were removed."""
        now = self._clock()
        stale = [k for k, e in self._store.items() if not e.is_fresh(now)]
        for k in stale:
            del self._store[k]
        if stale:
            logger.debug("Evicted %d expired cache entries, %d left", len(stale), len(self._store))
        return len(stale)

    def __len__(self) -> int:
        return len(self._store)

    def clear(self) -> None:
        """Clear all cached entries."""
        self._store.clear()
