"""
DEX pair oracle.

Same cache-first pattern as the reference oracle, with a short TTL and
no retries or stale fallback: DEX prices go stale within a few blocks.
"""

import logging
from typing import Any

import orjson

from marketoracle.cache.store import CacheStore
from marketoracle.config.constants import (
    DEFAULT_DEX_FEE_BPS,
    DEX_CACHE_PREFIX,
    DEX_TTL_SECONDS,
    SOURCE_DEXSCREENER,
)
from marketoracle.core.errors import InvalidRequestError, NotFoundError
from marketoracle.core.types import DexPairFeed, DexSnapshot
from marketoracle.telemetry.metrics import MetricsCollector
from marketoracle.utils.math import parse_float
from marketoracle.utils.time import expires_in, utc_now


logger = logging.getLogger(__name__)


def dex_cache_key(chain: str, pair_address: str) -> str:
    """Cache key for a normalized chain and pair address."""
    return f"{DEX_CACHE_PREFIX}:{chain}:{pair_address}"


def parse_fee_bps(pair: dict[str, Any]) -> int:
    """Read the pool fee tier, defaulting when the provider omits it."""
    fee = pair.get("feeTier")
    if fee in (None, ""):
        return DEFAULT_DEX_FEE_BPS
    try:
        return int(fee)
    except (TypeError, ValueError):
        return DEFAULT_DEX_FEE_BPS


class DexPairOracle:
    """Cache-first DEX pair snapshots."""

    def __init__(
        self,
        feed: DexPairFeed,
        cache: CacheStore,
        ttl_seconds: float = DEX_TTL_SECONDS,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._feed = feed
        self._cache = cache
        self._ttl = ttl_seconds
        self._metrics = metrics or MetricsCollector()

    async def get_pair_snapshot(self, chain: str, pair_address: str) -> DexSnapshot:
        """
        Get liquidity, volume and price for a pair.

        Args:
            chain: DexScreener chain id (e.g., "ethereum"), case-insensitive.
            pair_address: Pool address.

        Raises:
            InvalidRequestError: Blank chain or pair address.
            NotFoundError: DexScreener does not know the pair.
            UpstreamUnavailableError: Non-200 or transport failure.
        """
        chain = chain.strip().lower()
        pair_address = pair_address.strip()
        if not chain or not pair_address:
            raise InvalidRequestError("Chain and pair address required")

        key = dex_cache_key(chain, pair_address)
        cached = await self._cache.get(key)
        if cached is not None and cached.is_fresh():
            logger.debug(f"Cache hit for {chain}/{pair_address}")
            self._metrics.increment_counter("cache_hits")
            return DexSnapshot.from_payload(orjson.loads(cached.value))

        self._metrics.increment_counter("cache_misses")
        self._metrics.increment_counter("upstream_fetches")
        logger.info(f"Fetching fresh DEX data for {chain}/{pair_address}")

        pair = await self._feed.get_pair(chain, pair_address)
        if pair is None:
            raise NotFoundError(f"Pair not found: {chain}/{pair_address}")

        snapshot = self._normalize(chain, pair_address, pair)
        await self._cache.put(
            key,
            orjson.dumps(snapshot.to_payload()).decode(),
            expires_in(self._ttl),
        )
        return snapshot

    @staticmethod
    def _normalize(chain: str, pair_address: str, pair: dict[str, Any]) -> DexSnapshot:
        liquidity = pair.get("liquidity") or {}
        volume = pair.get("volume") or {}

        return DexSnapshot(
            chain=chain,
            pair_address=pair_address,
            price_usd=parse_float(pair.get("priceUsd")),
            liquidity_usd=parse_float(liquidity.get("usd")),
            volume_24h_usd=parse_float(volume.get("h24")),
            fee_bps=parse_fee_bps(pair),
            timestamp=utc_now(),
            source=SOURCE_DEXSCREENER,
        )
