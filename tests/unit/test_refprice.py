"""
Unit tests for ReferencePriceOracle.

Tests cache-first lookups, stale serving under rate limiting,
and the retry bound.
"""

from datetime import timedelta

import orjson
import pytest

from marketoracle.cache.store import MemoryCacheStore
from marketoracle.core.errors import (
    InvalidRequestError,
    NotFoundError,
    RateLimitedError,
    UpstreamUnavailableError,
)
from marketoracle.core.types import PriceQuote
from marketoracle.oracle.refprice import ReferencePriceOracle, refprice_cache_key
from marketoracle.oracle.retry import RetryPolicy
from marketoracle.telemetry.metrics import MetricsCollector
from marketoracle.utils.time import expires_in, to_iso, utc_now
from tests.mocks.upstream import MockPriceFeed, RecordingSleep


async def seed_price(
    cache: MemoryCacheStore,
    symbol: str,
    price: float,
    expired: bool = False,
) -> PriceQuote:
    """Store a cached quote, optionally already past its TTL."""
    observed = utc_now() - timedelta(minutes=10)
    quote = PriceQuote(symbol=symbol.upper(), price_usd=price, timestamp=observed, source="coingecko")
    expires_at = utc_now() - timedelta(minutes=5) if expired else expires_in(300)
    await cache.put(
        refprice_cache_key(symbol.lower()),
        orjson.dumps(quote.to_payload()).decode(),
        expires_at,
    )
    return quote


class TestSymbolResolution:
    """Tests for ticker validation."""

    @pytest.mark.asyncio
    async def test_unknown_symbol(
        self, refprice_oracle: ReferencePriceOracle, price_feed: MockPriceFeed
    ) -> None:
        """Test that unknown tickers fail without an upstream call."""
        with pytest.raises(NotFoundError, match="Unknown symbol: doge"):
            await refprice_oracle.get_price("doge")

        assert price_feed.call_count == 0

    @pytest.mark.asyncio
    async def test_blank_symbol(self, refprice_oracle: ReferencePriceOracle) -> None:
        """Test that an empty ticker is a bad request."""
        with pytest.raises(InvalidRequestError, match="Symbol required"):
            await refprice_oracle.get_price("  ")

    def test_resolve_is_case_insensitive(self, refprice_oracle: ReferencePriceOracle) -> None:
        """Test ticker normalization."""
        assert refprice_oracle.resolve("ETH") == ("eth", "ethereum")
        assert refprice_oracle.resolve(" Matic ") == ("matic", "matic-network")


class TestCacheBehavior:
    """Tests for the cache-first path."""

    @pytest.mark.asyncio
    async def test_fetch_and_cache(
        self,
        refprice_oracle: ReferencePriceOracle,
        price_feed: MockPriceFeed,
        cache: MemoryCacheStore,
    ) -> None:
        """Test a miss fetches, normalizes and stores with a 5 minute TTL."""
        quote = await refprice_oracle.get_price("eth")

        assert quote.symbol == "ETH"
        assert quote.price_usd == 2500.0
        assert quote.source == "coingecko"
        assert quote.stale is False
        assert price_feed.calls == ["ethereum"]

        entry = await cache.get("oracle:refprice:eth")
        assert entry is not None
        ttl = (entry.expires_at - utc_now()).total_seconds()
        assert 290 < ttl <= 300

    @pytest.mark.asyncio
    async def test_two_calls_within_ttl_hit_upstream_once(
        self, refprice_oracle: ReferencePriceOracle, price_feed: MockPriceFeed
    ) -> None:
        """Test that the second lookup is served from cache."""
        first = await refprice_oracle.get_price("eth")
        second = await refprice_oracle.get_price("ETH")

        assert price_feed.call_count == 1
        assert second.price_usd == first.price_usd
        assert second.stale is False

    @pytest.mark.asyncio
    async def test_fresh_entry_skips_upstream(
        self,
        refprice_oracle: ReferencePriceOracle,
        price_feed: MockPriceFeed,
        cache: MemoryCacheStore,
        metrics: MetricsCollector,
    ) -> None:
        """Test that a seeded fresh entry is returned as-is."""
        await seed_price(cache, "btc", 44000.0)

        quote = await refprice_oracle.get_price("btc")

        assert quote.price_usd == 44000.0
        assert price_feed.call_count == 0
        assert metrics.get_counter("cache_hits") == 1

    @pytest.mark.asyncio
    async def test_expired_entry_refetches(
        self,
        refprice_oracle: ReferencePriceOracle,
        price_feed: MockPriceFeed,
        cache: MemoryCacheStore,
    ) -> None:
        """Test that an expired entry triggers a fresh fetch and overwrite."""
        await seed_price(cache, "btc", 44000.0, expired=True)

        quote = await refprice_oracle.get_price("btc")

        assert quote.price_usd == 45000.0
        assert quote.stale is False
        assert price_feed.call_count == 1

        entry = await cache.get("oracle:refprice:btc")
        assert entry is not None and entry.is_fresh()


class TestRateLimiting:
    """Tests for stale serving and retries."""

    @pytest.mark.asyncio
    async def test_stale_served_on_rate_limit(
        self,
        cache: MemoryCacheStore,
        metrics: MetricsCollector,
        sleeper: RecordingSleep,
    ) -> None:
        """Test that an expired entry is served, flagged stale, without retrying."""
        seeded = await seed_price(cache, "eth", 2400.0, expired=True)
        feed = MockPriceFeed(always_rate_limited=True)
        oracle = ReferencePriceOracle(feed=feed, cache=cache, metrics=metrics, sleep=sleeper)

        quote = await oracle.get_price("eth")

        assert quote.stale is True
        assert quote.price_usd == seeded.price_usd
        assert to_iso(quote.timestamp) == to_iso(seeded.timestamp)
        assert feed.call_count == 1
        assert sleeper.delays == []
        assert metrics.get_counter("stale_served") == 1

    @pytest.mark.asyncio
    async def test_retry_bound_without_cache(
        self,
        cache: MemoryCacheStore,
        retry_policy: RetryPolicy,
        sleeper: RecordingSleep,
    ) -> None:
        """Test at most three attempts, then UpstreamUnavailableError."""
        feed = MockPriceFeed(always_rate_limited=True)
        oracle = ReferencePriceOracle(
            feed=feed, cache=cache, retry_policy=retry_policy, sleep=sleeper
        )

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await oracle.get_price("eth")

        assert not isinstance(exc_info.value, RateLimitedError)
        assert feed.call_count == 3
        assert sleeper.delays == [0.5, 1.0]
        assert await cache.get("oracle:refprice:eth") is None

    @pytest.mark.asyncio
    async def test_recovers_after_rate_limit(
        self, cache: MemoryCacheStore, sleeper: RecordingSleep
    ) -> None:
        """Test that a retry after a 429 succeeds and caches."""
        feed = MockPriceFeed(script=[RateLimitedError("429"), 2600.0])
        oracle = ReferencePriceOracle(feed=feed, cache=cache, sleep=sleeper)

        quote = await oracle.get_price("eth")

        assert quote.price_usd == 2600.0
        assert quote.stale is False
        assert feed.call_count == 2
        assert sleeper.delays == [0.5]
        assert await cache.get("oracle:refprice:eth") is not None

    @pytest.mark.asyncio
    async def test_backoff_is_capped(self, cache: MemoryCacheStore, sleeper: RecordingSleep) -> None:
        """Test that backoff never exceeds the configured cap."""
        feed = MockPriceFeed(always_rate_limited=True)
        policy = RetryPolicy(max_attempts=5, base_delay=1.0, max_delay=3.0)
        oracle = ReferencePriceOracle(feed=feed, cache=cache, retry_policy=policy, sleep=sleeper)

        with pytest.raises(UpstreamUnavailableError):
            await oracle.get_price("sol")

        assert feed.call_count == 5
        assert sleeper.delays == [1.0, 2.0, 3.0, 3.0]

    @pytest.mark.asyncio
    async def test_non_rate_limit_failure_not_retried(
        self, cache: MemoryCacheStore, sleeper: RecordingSleep
    ) -> None:
        """Test that other upstream errors fail immediately."""
        feed = MockPriceFeed(script=[UpstreamUnavailableError("CoinGecko API error: 503")])
        oracle = ReferencePriceOracle(feed=feed, cache=cache, sleep=sleeper)

        with pytest.raises(UpstreamUnavailableError, match="503"):
            await oracle.get_price("eth")

        assert feed.call_count == 1
        assert sleeper.delays == []

    @pytest.mark.asyncio
    async def test_non_rate_limit_failure_ignores_stale_cache(
        self, cache: MemoryCacheStore, sleeper: RecordingSleep
    ) -> None:
        """Test that stale serving applies to rate limiting only."""
        await seed_price(cache, "eth", 2400.0, expired=True)
        feed = MockPriceFeed(script=[UpstreamUnavailableError("CoinGecko API error: 500")])
        oracle = ReferencePriceOracle(feed=feed, cache=cache, sleep=sleeper)

        with pytest.raises(UpstreamUnavailableError):
            await oracle.get_price("eth")


class TestBatchLookup:
    """Tests for multi-symbol lookups."""

    @pytest.mark.asyncio
    async def test_mixed_results(
        self, refprice_oracle: ReferencePriceOracle, price_feed: MockPriceFeed
    ) -> None:
        """Test that one bad symbol does not fail the batch."""
        result = await refprice_oracle.get_prices(["eth", "BTC", "doge", "eth"])

        assert sorted(q.symbol for q in result.prices) == ["BTC", "ETH"]
        assert set(result.errors) == {"doge"}
        assert isinstance(result.errors["doge"], NotFoundError)
        assert sorted(price_feed.calls) == ["bitcoin", "ethereum"]
