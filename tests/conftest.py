"""
Pytest configuration and shared fixtures.

Provides reusable test fixtures for all test modules.
"""

import random

import pytest

from marketoracle.cache.store import MemoryCacheStore
from marketoracle.oracle.dex import DexPairOracle
from marketoracle.oracle.refprice import ReferencePriceOracle
from marketoracle.oracle.retry import RetryPolicy
from marketoracle.strategy.costs import CostModel
from marketoracle.strategy.price_source import StaticBasePrices, SyntheticPriceSource
from marketoracle.strategy.scanner import ArbitrageScanner
from marketoracle.telemetry.metrics import MetricsCollector
from tests.mocks.upstream import (
    USDC_WETH_POOL,
    MockPairFeed,
    MockPriceFeed,
    RecordingSleep,
    dexscreener_pair,
)


# =============================================================================
# Shared Infrastructure
# =============================================================================


@pytest.fixture
def cache() -> MemoryCacheStore:
    """Empty in-memory cache store."""
    return MemoryCacheStore()


@pytest.fixture
def metrics() -> MetricsCollector:
    """Fresh metrics collector."""
    return MetricsCollector()


@pytest.fixture
def sleeper() -> RecordingSleep:
    """Sleeper recording backoff delays."""
    return RecordingSleep()


@pytest.fixture
def retry_policy() -> RetryPolicy:
    """Default three-attempt policy with a 0.5s base delay."""
    return RetryPolicy(max_attempts=3, base_delay=0.5, max_delay=8.0)


# =============================================================================
# Reference Oracle Fixtures
# =============================================================================


@pytest.fixture
def price_feed() -> MockPriceFeed:
    """Healthy CoinGecko stand-in."""
    return MockPriceFeed()


@pytest.fixture
def refprice_oracle(
    price_feed: MockPriceFeed,
    cache: MemoryCacheStore,
    retry_policy: RetryPolicy,
    metrics: MetricsCollector,
    sleeper: RecordingSleep,
) -> ReferencePriceOracle:
    """Reference oracle over the mock feed with a 5 minute TTL."""
    return ReferencePriceOracle(
        feed=price_feed,
        cache=cache,
        ttl_seconds=300.0,
        retry_policy=retry_policy,
        metrics=metrics,
        sleep=sleeper,
    )


# =============================================================================
# DEX Oracle Fixtures
# =============================================================================


@pytest.fixture
def pair_feed() -> MockPairFeed:
    """DexScreener stand-in knowing one Uniswap pool."""
    return MockPairFeed(
        pairs={("ethereum", USDC_WETH_POOL): dexscreener_pair(fee_tier="5")},
    )


@pytest.fixture
def dex_oracle(
    pair_feed: MockPairFeed,
    cache: MemoryCacheStore,
    metrics: MetricsCollector,
) -> DexPairOracle:
    """DEX oracle over the mock feed with a 10 second TTL."""
    return DexPairOracle(feed=pair_feed, cache=cache, ttl_seconds=10.0, metrics=metrics)


# =============================================================================
# Scanner Fixtures
# =============================================================================


@pytest.fixture
def rng() -> random.Random:
    """Seeded random generator for reproducible scans."""
    return random.Random(42)


@pytest.fixture
def cost_model() -> CostModel:
    """Default gas table with a 15 bps bridge surcharge."""
    return CostModel()


@pytest.fixture
def scanner(rng: random.Random, cost_model: CostModel, metrics: MetricsCollector) -> ArbitrageScanner:
    """Scanner over synthetic prices around the static base table."""
    return ArbitrageScanner(
        price_source=SyntheticPriceSource(base_prices=StaticBasePrices(), rng=rng),
        cost_model=cost_model,
        rng=rng,
        metrics=metrics,
    )
