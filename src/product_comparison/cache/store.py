"""In-process TTL cache for comparison results.

Entries are never evicted. The TTL only decides whether an entry is fresh
enough to be served directly; a stale entry stays retrievable so it can be
returned as a fallback when the provider fails. A ``put`` for the same key
is the only way an entry is replaced.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Final


CACHE_KEY_SEPARATOR: Final[str] = "||"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def make_cache_key(first: str, second: str) -> str:
    """Build the cache key for a pair of product descriptions.

    Both descriptions are trimmed and joined with a fixed separator, then
    lowercased. The key is order-sensitive: ``(a, b)`` and ``(b, a)`` map to
    different entries.
    """
    return f"{first.strip()}{CACHE_KEY_SEPARATOR}{second.strip()}".lower()


@dataclass(frozen=True)
class CacheEntry:
    """A cached value with its creation time and time-to-live."""

    value: str
    created_at: datetime
    ttl: timedelta

    @property
    def expires_at(self) -> datetime:
        return self.created_at + self.ttl

    def is_fresh(self, now: datetime | None = None) -> bool:
        """Return True while ``now < created_at + ttl``."""
        return (now or _utcnow()) < self.expires_at


class TTLCacheStore:
    """Key to CacheEntry map with TTL-aware freshness.

    ``get`` and ``put`` never block and never fail. Each operation is a
    single dict lookup or assignment, so concurrent writers to one key
    resolve to last-writer-wins without any cross-key locking.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        """Initialize an empty store.

        Args:
            clock: Source of the current UTC time, used to stamp entries.
        """
        self._entries: dict[str, CacheEntry] = {}
        self._clock = clock

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry for ``key``, fresh or stale, or None."""
        return self._entries.get(key)

    def put(self, key: str, value: str, ttl: timedelta) -> None:
        """Store ``value`` under ``key``, replacing any existing entry."""
        self._entries[key] = CacheEntry(value=value, created_at=self._clock(), ttl=ttl)

    def is_fresh(self, entry: CacheEntry) -> bool:
        """Check an entry against this store's clock."""
        return entry.is_fresh(self._clock())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
