"""
Service container wiring the oracles and scanner from settings.

One container lives on the FastAPI app for its whole lifetime; the cache
store and upstream sessions are the only state shared across requests.
"""

import logging
from dataclasses import dataclass

from marketoracle.cache.store import CacheStore, MemoryCacheStore
from marketoracle.config.settings import Settings
from marketoracle.core.types import PriceSource
from marketoracle.oracle.dex import DexPairOracle
from marketoracle.oracle.refprice import ReferencePriceOracle
from marketoracle.oracle.retry import RetryPolicy
from marketoracle.strategy.price_source import (
    LiveDexPriceSource,
    OracleBasePrices,
    StaticBasePrices,
    SyntheticPriceSource,
)
from marketoracle.strategy.scanner import ArbitrageScanner
from marketoracle.telemetry.metrics import MetricsCollector
from marketoracle.upstream.client import UpstreamClient
from marketoracle.upstream.coingecko import CoinGeckoClient
from marketoracle.upstream.dexscreener import DexScreenerClient
from marketoracle.upstream.rate_limiter import RateLimiter


logger = logging.getLogger(__name__)


@dataclass
class OracleServices:
    """Everything a request handler needs."""

    cache: CacheStore
    metrics: MetricsCollector
    refprice: ReferencePriceOracle
    dex: DexPairOracle
    scanner: ArbitrageScanner
    clients: tuple[UpstreamClient, ...] = ()

    async def close(self) -> None:
        """Close upstream HTTP sessions."""
        for client in self.clients:
            await client.close()


def build_services(settings: Settings) -> OracleServices:
    """
    Build the production service graph.

    Args:
        settings: Application settings.

    Returns:
        Wired services with live upstream clients.
    """
    metrics = MetricsCollector()
    cache = MemoryCacheStore()

    api_key = settings.coingecko_api_key.get_secret_value() if settings.coingecko_api_key else None
    coingecko = CoinGeckoClient(
        base_url=settings.coingecko_base_url,
        rate_limiter=RateLimiter(settings.coingecko_requests_per_minute),
        timeout=settings.request_timeout_s,
        api_key=api_key,
        metrics=metrics,
    )
    dexscreener = DexScreenerClient(
        base_url=settings.dexscreener_base_url,
        rate_limiter=RateLimiter(settings.dexscreener_requests_per_minute),
        timeout=settings.request_timeout_s,
        metrics=metrics,
    )

    refprice = ReferencePriceOracle(
        feed=coingecko,
        cache=cache,
        ttl_seconds=settings.refprice_ttl_s,
        retry_policy=RetryPolicy(
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay_s,
            max_delay=settings.retry_max_delay_s,
        ),
        metrics=metrics,
    )
    dex = DexPairOracle(
        feed=dexscreener,
        cache=cache,
        ttl_seconds=settings.dex_ttl_s,
        metrics=metrics,
    )

    price_source: PriceSource
    if settings.scanner_price_mode == "live":
        price_source = LiveDexPriceSource(dex, settings.scanner_live_pairs)
    elif settings.scanner_base_prices == "oracle":
        price_source = SyntheticPriceSource(base_prices=OracleBasePrices(refprice))
    else:
        price_source = SyntheticPriceSource(base_prices=StaticBasePrices())
    logger.info(f"Arbitrage scanner using {settings.scanner_price_mode} venue prices")

    scanner = ArbitrageScanner(
        price_source=price_source,
        samples_per_chain=settings.scanner_samples_per_chain,
        max_results=settings.scanner_max_results,
        max_concurrency=settings.scanner_max_concurrency,
        quote_all_venues=settings.scanner_price_mode == "live",
        metrics=metrics,
    )

    return OracleServices(
        cache=cache,
        metrics=metrics,
        refprice=refprice,
        dex=dex,
        scanner=scanner,
        clients=(coingecko, dexscreener),
    )
