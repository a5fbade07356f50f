"""Mock implementations for testing."""

from tests.mocks.upstream import (
    USDC_WETH_POOL,
    ChainPriceSource,
    MockPairFeed,
    MockPriceFeed,
    RecordingSleep,
    SequencePriceSource,
    dexscreener_pair,
)


__all__ = [
    "USDC_WETH_POOL",
    "ChainPriceSource",
    "MockPairFeed",
    "MockPriceFeed",
    "RecordingSleep",
    "SequencePriceSource",
    "dexscreener_pair",
]
