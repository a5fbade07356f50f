"""
Cross-venue arbitrage scanner.

Builds a price matrix of sampled (chain, venue) quotes per asset, prices
every pair of quotes net of gas and bridge cost, and ranks what survives
the profit threshold.
"""

import asyncio
import logging
import random
import uuid
from collections.abc import Sequence
from itertools import combinations

from marketoracle.config.constants import (
    DEFAULT_ASSETS,
    DEFAULT_VENUES,
    MAX_CONCURRENT_QUOTES,
    MAX_SCAN_RESULTS,
    SAMPLES_PER_CHAIN,
)
from marketoracle.core.errors import OracleError
from marketoracle.core.types import ArbitrageOpportunity, PriceSource, VenueQuote
from marketoracle.strategy.costs import CostModel
from marketoracle.strategy.price_source import SyntheticPriceSource
from marketoracle.telemetry.metrics import MetricsCollector
from marketoracle.utils.math import spread_bps
from marketoracle.utils.time import utc_now


logger = logging.getLogger(__name__)


class ArbitrageScanner:
    """
    Scans assets across chains and venues for arbitrage.

    Features:
    - Pluggable price source (synthetic or live DEX)
    - Concurrent, bounded venue quoting; a failed venue is dropped
    - Ranking by net profit after execution costs
    """

    def __init__(
        self,
        price_source: PriceSource | None = None,
        cost_model: CostModel | None = None,
        venues: Sequence[str] = DEFAULT_VENUES,
        default_assets: Sequence[str] = DEFAULT_ASSETS,
        samples_per_chain: int = SAMPLES_PER_CHAIN,
        max_results: int = MAX_SCAN_RESULTS,
        max_concurrency: int = MAX_CONCURRENT_QUOTES,
        quote_all_venues: bool = False,
        rng: random.Random | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        """
        Initialize the scanner.

        Args:
            price_source: Per-venue price provider.
            cost_model: Gas/bridge cost and confidence model.
            venues: Venue names sampled on every chain.
            default_assets: Asset basket scanned when no asset is given.
            samples_per_chain: Venue quotes drawn per chain when sampling.
            quote_all_venues: Quote every chain x venue combination once
                instead of sampling (live prices).
            max_results: Maximum opportunities returned.
            max_concurrency: Concurrent venue quotes per asset.
            rng: Random generator used for venue selection.
            metrics: Optional metrics sink.
        """
        if not venues:
            raise ValueError("At least one venue is required")

        self._rng = rng or random.Random()
        self._price_source = price_source or SyntheticPriceSource(rng=self._rng)
        self._costs = cost_model or CostModel()
        self._venues = tuple(venues)
        self._default_assets = tuple(default_assets)
        self._samples_per_chain = samples_per_chain
        self._max_results = max_results
        self._max_concurrency = max_concurrency
        self._quote_all_venues = quote_all_venues
        self._metrics = metrics or MetricsCollector()

    async def scan(
        self,
        asset: str | None,
        min_profit_bps: float,
        chains: Sequence[str],
    ) -> list[ArbitrageOpportunity]:
        """
        Find the best arbitrage opportunities.

        Args:
            asset: Single asset to scan, or None for the default basket.
            min_profit_bps: Minimum net profit to report.
            chains: Chains to sample venues on.

        Returns:
            Up to `max_results` opportunities, best net profit first.
        """
        self._metrics.increment_counter("scans")

        chain_ids = [c.strip().lower() for c in chains if c.strip()]
        if not chain_ids:
            return []

        assets = [asset.strip().upper()] if asset and asset.strip() else list(self._default_assets)

        opportunities: list[ArbitrageOpportunity] = []
        for symbol in assets:
            quotes = await self.sample_quotes(symbol, chain_ids)
            opportunities.extend(self.find_opportunities(symbol, quotes, min_profit_bps))

        opportunities.sort(key=lambda o: o.net_profit_bps, reverse=True)
        cross_chain = sum(1 for o in opportunities if o.is_cross_chain)
        self._metrics.increment_counter("opportunities_found", len(opportunities))
        self._metrics.increment_counter("cross_chain_opportunities", cross_chain)

        logger.info(
            f"Scanned {len(assets)} asset(s) on {len(chain_ids)} chain(s): "
            f"{len(opportunities)} opportunities >= {min_profit_bps} bps "
            f"({cross_chain} cross-chain)"
        )
        return opportunities[: self._max_results]

    async def sample_quotes(self, asset: str, chains: Sequence[str]) -> list[VenueQuote]:
        """
        Draw venue quotes for one asset.

        When sampling, venues are picked uniformly (with replacement) per
        chain; otherwise every venue of every chain is quoted once. Quotes
        are fetched concurrently. A venue whose quote raises an OracleError
        is left out; any other exception is a bug in the price source and
        aborts the scan.

        The price source is prepared once for the asset before any venue
        is quoted. If that fails with an OracleError the asset yields no
        quotes.
        """
        try:
            await self._price_source.prepare(asset)
        except OracleError as e:
            logger.warning(f"Skipping {asset}: {e.message}")
            self._metrics.increment_counter("assets_skipped")
            return []

        if self._quote_all_venues:
            slots = [(chain, venue) for chain in chains for venue in self._venues]
        else:
            slots = [
                (chain, self._rng.choice(self._venues))
                for chain in chains
                for _ in range(self._samples_per_chain)
            ]
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def quote(chain: str, venue: str) -> VenueQuote | None:
            async with semaphore:
                try:
                    price = await self._price_source.get_price(asset, chain, venue)
                except OracleError as e:
                    logger.debug(f"Skipping {venue}@{chain} for {asset}: {e.message}")
                    self._metrics.increment_counter("venues_skipped")
                    return None

            if price <= 0:
                self._metrics.increment_counter("venues_skipped")
                return None
            return VenueQuote(chain=chain, venue=venue, price=price)

        results = await asyncio.gather(*(quote(chain, venue) for chain, venue in slots))
        return [q for q in results if q is not None]

    def find_opportunities(
        self,
        asset: str,
        quotes: Sequence[VenueQuote],
        min_profit_bps: float,
    ) -> list[ArbitrageOpportunity]:
        """
        Price every pair of quotes and keep the profitable ones.

        The cheaper quote of a pair is the buy leg; equal prices yield
        nothing. Result order follows the input, unranked.
        """
        opportunities: list[ArbitrageOpportunity] = []
        timestamp = utc_now()

        for first, second in combinations(quotes, 2):
            if first.price == second.price:
                continue

            buy, sell = (first, second) if first.price < second.price else (second, first)

            spread = spread_bps(buy.price, sell.price)
            gas_cost = self._costs.estimate_cost_bps(buy.chain, sell.chain)
            net_profit = spread - gas_cost

            if net_profit < min_profit_bps:
                continue

            opportunities.append(
                ArbitrageOpportunity(
                    id=str(uuid.uuid4()),
                    asset=asset,
                    buy_chain=buy.chain,
                    buy_venue=buy.venue,
                    buy_price=buy.price,
                    sell_chain=sell.chain,
                    sell_venue=sell.venue,
                    sell_price=sell.price,
                    spread_bps=spread,
                    net_profit_bps=net_profit,
                    estimated_gas_cost_bps=gas_cost,
                    confidence=self._costs.confidence(spread, buy.chain, sell.chain),
                    timestamp=timestamp,
                )
            )

        return opportunities
