"""
Key -> (value, expiry) cache table shared by the oracles.

Expiry is advisory: nothing is ever evicted, so an expired row stays
readable as a stale fallback until the next successful fetch overwrites it.
"""

from collections.abc import Iterator
from datetime import datetime
from typing import Protocol

from marketoracle.core.types import CacheEntry
from marketoracle.utils.time import utc_now


class CacheStore(Protocol):
    """Protocol for cache store implementations."""

    async def get(self, key: str) -> CacheEntry | None:
        """Get the entry for a key, fresh or expired."""
        ...

    async def put(self, key: str, value: str, expires_at: datetime) -> None:
        """Upsert an entry. Last write wins."""
        ...


class MemoryCacheStore:
    """
    In-process cache store.

    Single-row operations are atomic under the event loop; there is no
    locking across a read-then-write, so concurrent fetches of the same
    key may race and the later write wins.
    """

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    async def get(self, key: str) -> CacheEntry | None:
        """Get the entry for a key, fresh or expired."""
        return self._entries.get(key)

    async def put(self, key: str, value: str, expires_at: datetime) -> None:
        """Upsert an entry. Last write wins."""
        self._entries[key] = CacheEntry(
            key=key,
            value=value,
            expires_at=expires_at,
            created_at=utc_now(),
        )

    def keys(self) -> Iterator[str]:
        """Iterate over stored keys."""
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
