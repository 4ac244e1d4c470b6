"""Time-bounded cache for fetched record lists."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol


class Cache(Protocol):
    """Key-value cache with expiry and prefix invalidation."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a value for ttl_seconds."""

    def invalidate(self, prefix: str) -> int:
        """Drop every entry whose key starts with prefix."""


@dataclass
class InMemoryCache(Cache):
    """Process-local cache; entries expire lazily on read.

    Expiry is measured on a monotonic clock.
    """

    clock: Callable[[], float] = time.monotonic
    _entries: dict[str, tuple[float, object]] = field(
        default_factory=dict, init=False, repr=False
    )

    def get(self, key: str) -> object | None:
        """Return the value for key, forgetting it once expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self.clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        self._entries[key] = (self.clock() + ttl_seconds, value)

    def invalidate(self, prefix: str) -> int:
        """Remove entries under a key prefix and return how many were dropped."""
        stale = [key for key in self._entries if key.startswith(prefix)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def __len__(self) -> int:
        return len(self._entries)
