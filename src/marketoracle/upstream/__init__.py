"""Upstream market-data provider clients."""

from marketoracle.upstream.client import UpstreamClient
from marketoracle.upstream.coingecko import CoinGeckoClient
from marketoracle.upstream.dexscreener import DexScreenerClient
from marketoracle.upstream.rate_limiter import RateLimiter, TokenBucket


__all__ = [
    "CoinGeckoClient",
    "DexScreenerClient",
    "RateLimiter",
    "TokenBucket",
    "UpstreamClient",
]
