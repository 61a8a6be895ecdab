"""
Response Caching Module

Bounded in-memory cache with TTL expiry for provider responses. Entries
expire lazily on read and the oldest inserted entry is evicted when the cache
is full (FIFO, not LRU).
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

DEFAULT_MAX_ENTRIES = 100

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CacheEntry:
    """A cached payload with its absolute expiry time."""

    value: Any
    expires_at: float


class ResponseCache:
    """
    Process-wide key/value store for provider responses.

    Keys are opaque fingerprints built by the caller; the cache only stores
    and expires them.
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the response cache

        Args:
            max_entries: Maximum number of entries held at once
            clock: Source of the current time in seconds
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._clock = clock
        # dicts preserve insertion order, which gives FIFO eviction
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            logger.debug("Cache entry expired: %s", key)
            return None
        return entry.value

    def put(self, key: str, value: Any, ttl: float) -> None:
        """
        Store a value for ``ttl`` seconds. A non-positive ttl disables caching.
        """
        if ttl <= 0:
            return

        if key in self._entries:
            # Replacing moves the key to the back of the eviction order
            del self._entries[key]
        elif len(self._entries) >= self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug("Cache full, evicted: %s", oldest)

        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
