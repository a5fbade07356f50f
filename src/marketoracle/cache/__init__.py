"""Cache store shared by the reference and DEX oracles."""

from marketoracle.cache.store import CacheStore, MemoryCacheStore


__all__ = [
    "CacheStore",
    "MemoryCacheStore",
]
