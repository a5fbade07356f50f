"""
Reference price oracle.

Serves per-symbol USD prices from a TTL cache in front of CoinGecko.
When CoinGecko rate-limits a request, any cached price (even an expired
one) is served flagged as stale; without one, the call is retried with
exponential backoff before giving up.
"""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

import orjson

from marketoracle.cache.store import CacheStore
from marketoracle.config.constants import (
    COINGECKO_IDS,
    REFPRICE_CACHE_PREFIX,
    REFPRICE_TTL_SECONDS,
    SOURCE_COINGECKO,
)
from marketoracle.core.errors import (
    InvalidRequestError,
    NotFoundError,
    OracleError,
    RateLimitedError,
    UpstreamUnavailableError,
)
from marketoracle.core.types import CacheEntry, PriceQuote, ReferencePriceFeed
from marketoracle.oracle.retry import RetryPolicy, Sleeper, default_sleep
from marketoracle.telemetry.metrics import MetricsCollector
from marketoracle.utils.time import expires_in, utc_now


logger = logging.getLogger(__name__)


@dataclass
class BatchPriceResult:
    """Outcome of a multi-symbol lookup."""

    prices: list[PriceQuote] = field(default_factory=list)
    errors: dict[str, OracleError] = field(default_factory=dict)


def refprice_cache_key(symbol: str) -> str:
    """Cache key for a normalized (lowercase) symbol."""
    return f"{REFPRICE_CACHE_PREFIX}:{symbol}"


class ReferencePriceOracle:
    """
    Cache-first reference price lookups.

    Features:
    - Fresh cache hits never touch the upstream
    - Stale-on-rate-limit fallback
    - Bounded, serialized retries with exponential backoff
    """

    def __init__(
        self,
        feed: ReferencePriceFeed,
        cache: CacheStore,
        ttl_seconds: float = REFPRICE_TTL_SECONDS,
        retry_policy: RetryPolicy | None = None,
        symbol_map: dict[str, str] | None = None,
        metrics: MetricsCollector | None = None,
        sleep: Sleeper = default_sleep,
    ) -> None:
        """
        Initialize the oracle.

        Args:
            feed: Upstream price client.
            cache: Shared cache store.
            ttl_seconds: Freshness window of a cached price.
            retry_policy: Backoff policy for rate-limited calls.
            symbol_map: Lowercase ticker -> provider coin id.
            metrics: Optional metrics sink.
            sleep: Coroutine used to wait between attempts.
        """
        self._feed = feed
        self._cache = cache
        self._ttl = ttl_seconds
        self._retry = retry_policy or RetryPolicy()
        self._symbol_map = symbol_map if symbol_map is not None else dict(COINGECKO_IDS)
        self._metrics = metrics or MetricsCollector()
        self._sleep = sleep

    @property
    def supported_symbols(self) -> frozenset[str]:
        """Lowercase tickers this oracle can price."""
        return frozenset(self._symbol_map)

    def resolve(self, symbol: str) -> tuple[str, str]:
        """
        Normalize a ticker and map it to the provider id.

        Returns:
            Tuple of (lowercase symbol, provider coin id).

        Raises:
            InvalidRequestError: If the symbol is blank.
            NotFoundError: If the symbol is not supported.
        """
        normalized = symbol.strip().lower()
        if not normalized:
            raise InvalidRequestError("Symbol required")

        coin_id = self._symbol_map.get(normalized)
        if coin_id is None:
            raise NotFoundError(f"Unknown symbol: {normalized}")

        return normalized, coin_id

    async def get_price(self, symbol: str) -> PriceQuote:
        """
        Get the USD reference price of a symbol.

        Args:
            symbol: Ticker, case-insensitive (e.g., "eth").

        Returns:
            The quote; `stale` is set when an expired cache entry was served.

        Raises:
            InvalidRequestError: Blank symbol.
            NotFoundError: Unknown symbol.
            UpstreamUnavailableError: Upstream failed and no fallback applied.
        """
        normalized, coin_id = self.resolve(symbol)
        key = refprice_cache_key(normalized)

        cached = await self._cache.get(key)
        if cached is not None and cached.is_fresh():
            logger.debug(f"Cache hit for {normalized}")
            self._metrics.increment_counter("cache_hits")
            return self._decode(cached)

        self._metrics.increment_counter("cache_misses")
        logger.info(f"Fetching fresh reference price for {normalized} from CoinGecko")

        price = await self._fetch_with_retry(normalized, coin_id, cached)
        if isinstance(price, PriceQuote):
            return price

        quote = PriceQuote(
            symbol=normalized.upper(),
            price_usd=price,
            timestamp=utc_now(),
            source=SOURCE_COINGECKO,
        )
        await self._cache.put(
            key,
            orjson.dumps(quote.to_payload()).decode(),
            expires_in(self._ttl),
        )
        return quote

    async def _fetch_with_retry(
        self,
        symbol: str,
        coin_id: str,
        cached: CacheEntry | None,
    ) -> float | PriceQuote:
        """
        Call the upstream under the retry policy.

        Returns:
            The fresh price, or the stale cached quote if the upstream
            rate-limited us while a cache entry existed.
        """
        last_error: RateLimitedError | None = None

        for attempt in range(self._retry.max_attempts):
            self._metrics.increment_counter("upstream_fetches")
            try:
                return await self._feed.get_usd_price(coin_id)
            except RateLimitedError as e:
                last_error = e

                if cached is not None:
                    logger.warning(f"Rate limited on {symbol}; serving stale cached price")
                    self._metrics.increment_counter("stale_served")
                    return self._decode(cached).as_stale()

                if not self._retry.has_attempts_after(attempt):
                    break

                delay = self._retry.delay_for(attempt)
                logger.info(
                    f"Rate limited on {symbol} (attempt {attempt + 1}/"
                    f"{self._retry.max_attempts}); retrying in {delay:.2f}s"
                )
                self._metrics.increment_counter("upstream_retries")
                await self._sleep(delay)
            except UpstreamUnavailableError:
                logger.error(f"Reference price fetch failed for {symbol}")
                raise

        raise UpstreamUnavailableError(
            f"CoinGecko unavailable for {symbol}: rate limited after "
            f"{self._retry.max_attempts} attempts"
        ) from last_error

    async def get_prices(self, symbols: Iterable[str]) -> BatchPriceResult:
        """
        Look up several symbols concurrently.

        Each symbol follows `get_price` semantics independently; failures
        are reported per symbol instead of failing the batch.
        """
        unique = list(dict.fromkeys(s.strip().lower() for s in symbols))
        outcomes = await asyncio.gather(
            *(self.get_price(symbol) for symbol in unique),
            return_exceptions=True,
        )

        result = BatchPriceResult()
        for symbol, outcome in zip(unique, outcomes, strict=True):
            if isinstance(outcome, PriceQuote):
                result.prices.append(outcome)
            elif isinstance(outcome, OracleError):
                result.errors[symbol] = outcome
            else:
                raise outcome

        return result

    @staticmethod
    def _decode(entry: CacheEntry) -> PriceQuote:
        return PriceQuote.from_payload(orjson.loads(entry.value))
