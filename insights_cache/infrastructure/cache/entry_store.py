"""
Local Fallback Entry Store

In-process TTL store that serves cache requests while the remote cache is
unavailable or unconfigured. It is per-process and not shared across workers;
nothing keeps it consistent with Redis.

Implementation Details:
- Plain dict in insertion order, so the oldest entry is always first
- Lazy expiry on read plus an optional periodic sweep (purge_expired)
- Mutations serialize through an asyncio.Lock
- Bounded by max_entries: expired entries are purged first, then the oldest
  entries are evicted
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from fnmatch import fnmatchcase

from insights_cache.core.config.constants import LOCAL_CACHE_MAX_ENTRIES


@dataclass(frozen=True)
class CacheEntry:
    """A stored payload with its creation and absolute expiry instants."""

    value: str
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def remaining_ttl(self, now: float) -> float:
        return max(0.0, self.expires_at - now)


class EntryStore:
    """
    In-memory TTL store used as the cache fallback.

    Usage:
        store = EntryStore(max_entries=10_000)
        await store.set("anchor:detail:42", payload, ttl_seconds=600)
        payload = await store.get("anchor:detail:42")

    Expiry has no sliding behaviour: reading an entry never extends it.
    """

    def __init__(
        self,
        max_entries: int = LOCAL_CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the store.

        Args:
            max_entries: Capacity before eviction kicks in
            clock: Monotonic seconds source, injectable for tests
        """
        self._max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = asyncio.Lock()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def now(self) -> float:
        """Current reading of the store clock."""
        return self._clock()

    def size(self) -> int:
        """Number of stored entries, including expired ones not yet purged."""
        return len(self._entries)

    async def get_entry(self, key: str) -> CacheEntry | None:
        """
        Get the live entry for a key.

        An expired entry is removed and reported as absent.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        if entry.is_expired(self._clock()):
            # Only drop the entry we looked at; a concurrent set may have replaced it
            if self._entries.get(key) is entry:
                del self._entries[key]
            return None

        return entry

    async def get(self, key: str) -> str | None:
        """Get the stored payload, or None if absent or expired."""
        entry = await self.get_entry(key)
        return entry.value if entry is not None else None

    async def set(self, key: str, value: str, ttl_seconds: float) -> None:
        """
        Store a payload, overwriting any existing entry.

        A non-positive TTL means "do not cache": the call is a no-op and leaves
        any existing entry in place.
        """
        if ttl_seconds <= 0:
            return

        async with self._lock:
            now = self._clock()
            # Re-insert so an overwritten key counts as newest for eviction
            self._entries.pop(key, None)
            self._entries[key] = CacheEntry(value=value, created_at=now, expires_at=now + ttl_seconds)

            if len(self._entries) > self._max_entries:
                self._evict(now)

    async def delete(self, key: str) -> bool:
        """Remove a key. Returns True if a live entry was removed."""
        async with self._lock:
            entry = self._entries.pop(key, None)
            return entry is not None and not entry.is_expired(self._clock())

    async def delete_matching(self, pattern: str) -> int:
        """
        Remove every key matching a glob pattern.

        Uses the same ``*``, ``?`` and ``[...]`` semantics as Redis MATCH.

        Returns:
            int: Number of live entries removed
        """
        async with self._lock:
            now = self._clock()
            matched = [key for key in self._entries if fnmatchcase(key, pattern)]
            removed = 0
            for key in matched:
                entry = self._entries.pop(key)
                if not entry.is_expired(now):
                    removed += 1
            return removed

    async def clear(self) -> int:
        """Remove all entries. Returns the number of live entries removed."""
        async with self._lock:
            now = self._clock()
            removed = sum(1 for entry in self._entries.values() if not entry.is_expired(now))
            self._entries.clear()
            return removed

    async def purge_expired(self) -> int:
        """Sweep expired entries. Returns the number purged."""
        async with self._lock:
            return self._purge_expired(self._clock())

    def _purge_expired(self, now: float) -> int:
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def _evict(self, now: float) -> None:
        """Bring the store back under capacity. Caller holds the lock."""
        self._purge_expired(now)

        overflow = len(self._entries) - self._max_entries
        if overflow <= 0:
            return

        for key in list(self._entries)[:overflow]:
            del self._entries[key]
