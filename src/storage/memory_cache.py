"""
In-Memory Cache Module.

Process-wide, short-lived key/value store that saves redundant upstream
round-trips for repeated aggregate queries. Nothing is persisted across
restarts.
"""

import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, Hashable, Optional


@dataclass(frozen=True)
class CacheEntry:
    """
    A cached value and the time it was stored.

    Attributes:
        key (Hashable): Cache key
        value (Any): Cached value
        inserted_at (float): Clock reading at insertion
    """

    key: Hashable
    value: Any
    inserted_at: float


class TTLCache:
    """
    Thread-safe cache whose entries expire after a fixed time-to-live.

    Expired entries are dropped lazily on read. Two callers missing the same
    key may both fetch and set it; the last write wins.
    """

    def __init__(
        self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic
    ):
        """Initialize the cache.

        Args:
            ttl_seconds (float): Lifetime of each entry in seconds.
            clock (Callable[[], float]): Monotonic time source.
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._mu = Lock()
        self._entries: Dict[Hashable, CacheEntry] = {}

    def get(self, key: Hashable) -> Optional[Any]:
        """
        Look up a key.

        Args:
            key (Hashable): Cache key

        Returns:
            Optional[Any]: Cached value, or None if absent or expired
        """
        with self._mu:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.inserted_at >= self.ttl_seconds:
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: Hashable, value: Any) -> None:
        """
        Store a value, replacing any existing entry.

        Args:
            key (Hashable): Cache key
            value (Any): Value to store
        """
        with self._mu:
            self._entries[key] = CacheEntry(key, value, self._clock())

    def __len__(self) -> int:
        """Number of stored entries, expired ones included until read."""
        with self._mu:
            return len(self._entries)
