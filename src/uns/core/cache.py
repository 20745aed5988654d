"""
In-memory resolution cache with TTL expiry.

Maps lower-cased UNS addresses to resolved URLs. Entries are created on a
successful resolution, consulted before any parsing or registry work, and
treated as expired once ``now - stored_at >= ttl``. State is process-scoped
and never persisted.

Every operation runs under a single ``asyncio.Lock`` so the
get / check-TTL / delete sequence is atomic with respect to concurrent
resolutions and the background sweep. Two callers missing the same key may
both resolve it (duplicate work is acceptable); neither can corrupt the map.

See Also:
    [Resolver][uns.services.resolver.Resolver]: Owns one cache instance and
        sweeps it from
        [run()][uns.services.resolver.Resolver.run].
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass

from pydantic import BaseModel, Field


class CacheConfig(BaseModel):
    """Resolution cache settings.

    Attributes:
        ttl: Seconds an entry stays valid.
        max_entries: Upper bound on stored entries; the oldest entry is
            evicted on overflow. ``None`` means unbounded.
    """

    ttl: float = Field(default=3600.0, gt=0.0, description="Entry lifetime in seconds")
    max_entries: int | None = Field(default=None, ge=1, description="Maximum cached entries")


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A cached resolution.

    Attributes:
        key: Lower-cased UNS address.
        url: Resolved URL.
        stored_at: Clock reading when the entry was written.
    """

    key: str
    url: str
    stored_at: float

    def age(self, now: float) -> float:
        """Seconds elapsed since the entry was stored."""
        return now - self.stored_at

    def is_expired(self, ttl: float, now: float) -> bool:
        """Whether the entry is no longer usable at *now*."""
        return self.age(now) >= ttl


class ResolutionCache:
    """Lock-guarded address-to-URL memo with TTL expiry.

    Args:
        ttl: Entry lifetime in seconds (must be positive).
        max_entries: Optional bound on the number of entries.
        clock: Monotonic time source, injectable for tests.

    Examples:
        ```python
        cache = ResolutionCache(ttl=60)
        await cache.set("utopia.alice//.blog", "https://alice.blog")
        await cache.get("UTOPIA.ALICE//.BLOG")  # 'https://alice.blog'
        ```
    """

    def __init__(
        self,
        ttl: float = 3600.0,
        *,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        if max_entries is not None and max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")
        self._ttl = ttl
        self._max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(
        cls, config: CacheConfig, *, clock: Callable[[], float] = time.monotonic
    ) -> ResolutionCache:
        """Build a cache from a [CacheConfig][uns.core.cache.CacheConfig]."""
        return cls(config.ttl, max_entries=config.max_entries, clock=clock)

    @property
    def ttl(self) -> float:
        """Entry lifetime in seconds."""
        return self._ttl

    @property
    def size(self) -> int:
        """Number of stored entries, including expired ones not yet swept."""
        return len(self._entries)

    @staticmethod
    def normalize_key(address: str) -> str:
        """Cache key for a raw address."""
        return address.lower()

    async def get(self, address: str) -> str | None:
        """Return the cached URL for *address*, or ``None`` on miss.

        An expired entry found here is dropped.
        """
        key = self.normalize_key(address)
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._ttl, self._clock()):
                del self._entries[key]
                return None
            return entry.url

    async def set(self, address: str, url: str) -> CacheEntry:
        """Store *url* for *address*, replacing any previous entry."""
        key = self.normalize_key(address)
        async with self._lock:
            entry = CacheEntry(key=key, url=url, stored_at=self._clock())
            self._entries.pop(key, None)
            self._entries[key] = entry
            if self._max_entries is not None:
                while len(self._entries) > self._max_entries:
                    # dicts keep insertion order, so the first key is the oldest write
                    del self._entries[next(iter(self._entries))]
            return entry

    async def delete(self, address: str) -> bool:
        """Remove the entry for *address*. Returns True if one existed."""
        key = self.normalize_key(address)
        async with self._lock:
            return self._entries.pop(key, None) is not None

    async def clear(self) -> int:
        """Remove every entry. Returns the number removed."""
        async with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    async def sweep(self) -> int:
        """Remove every expired entry. Returns the number removed."""
        async with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if e.is_expired(self._ttl, now)]
            for key in expired:
                del self._entries[key]
            return len(expired)

    async def snapshot(self) -> list[CacheEntry]:
        """Return a copy of all stored entries, oldest first."""
        async with self._lock:
            return list(self._entries.values())

    def keys(self) -> list[str]:
        """Return the stored keys, oldest first."""
        return list(self._entries)
