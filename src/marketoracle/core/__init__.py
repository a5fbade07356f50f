"""Core module containing type definitions and the error taxonomy."""

from marketoracle.core.errors import (
    InvalidRequestError,
    NotFoundError,
    OracleError,
    RateLimitedError,
    UpstreamUnavailableError,
)
from marketoracle.core.types import (
    ArbitrageOpportunity,
    BasePriceProvider,
    CacheEntry,
    DexPairFeed,
    DexSnapshot,
    PriceQuote,
    PriceSource,
    ReferencePriceFeed,
    VenueQuote,
)


__all__ = [
    "ArbitrageOpportunity",
    "BasePriceProvider",
    "CacheEntry",
    "DexPairFeed",
    "DexSnapshot",
    "InvalidRequestError",
    "NotFoundError",
    "OracleError",
    "PriceQuote",
    "PriceSource",
    "RateLimitedError",
    "ReferencePriceFeed",
    "UpstreamUnavailableError",
    "VenueQuote",
]
