"""
Price sources for the arbitrage scanner.

The scanner only sees the `PriceSource` protocol: `(asset, chain, venue)
-> price`. The synthetic source models venue dispersion around a base
price; the live source asks the DEX oracle for a registered pool.
"""

import logging
import random

from marketoracle.config.constants import (
    BASE_PRICES_USD,
    MAX_PRICE_VARIATION,
    UNKNOWN_ASSET_BASE_PRICE,
)
from marketoracle.core.errors import NotFoundError, OracleError, UpstreamUnavailableError
from marketoracle.core.types import BasePriceProvider
from marketoracle.oracle.dex import DexPairOracle
from marketoracle.oracle.refprice import ReferencePriceOracle


logger = logging.getLogger(__name__)


# Scanner chain names -> DexScreener chain ids
DEXSCREENER_CHAIN_IDS: dict[str, str] = {
    "eth": "ethereum",
    "polygon": "polygon",
    "arbitrum": "arbitrum",
    "optimism": "optimism",
    "base": "base",
    "avalanche": "avalanche",
    "bsc": "bsc",
}


class StaticBasePrices:
    """
    Fixed reference prices.

    Unknown assets price at 1.0 instead of failing.
    """

    def __init__(self, prices: dict[str, float] | None = None) -> None:
        self._prices = {k.upper(): v for k, v in (prices or BASE_PRICES_USD).items()}

    async def get_base_price(self, asset: str) -> float:
        price = self._prices.get(asset.upper())
        if price is None:
            logger.warning(f"No base price for {asset}; defaulting to {UNKNOWN_ASSET_BASE_PRICE}")
            return UNKNOWN_ASSET_BASE_PRICE
        return price


class OracleBasePrices:
    """Reference-oracle prices with a static fallback."""

    def __init__(
        self,
        oracle: ReferencePriceOracle,
        fallback: StaticBasePrices | None = None,
    ) -> None:
        self._oracle = oracle
        self._fallback = fallback or StaticBasePrices()

    async def get_base_price(self, asset: str) -> float:
        try:
            quote = await self._oracle.get_price(asset)
        except OracleError as e:
            logger.info(f"Reference price for {asset} unavailable ({e.message}); using fallback")
            return await self._fallback.get_base_price(asset)
        return quote.price_usd


class SyntheticPriceSource:
    """
    Venue prices modeled as a base price perturbed by bounded noise.

    Every call draws an independent factor uniformly from
    [-max_variation, +max_variation). `prepare` pins the base price of an
    asset so that every venue of a scan perturbs the same observation.
    """

    def __init__(
        self,
        base_prices: BasePriceProvider | None = None,
        max_variation: float = MAX_PRICE_VARIATION,
        rng: random.Random | None = None,
    ) -> None:
        """
        Initialize the source.

        Args:
            base_prices: Canonical price provider.
            max_variation: Maximum relative deviation (0.005 = 0.5%).
            rng: Random generator, seedable for reproducible scans.
        """
        self._base_prices = base_prices or StaticBasePrices()
        self._max_variation = max_variation
        self._rng = rng or random.Random()
        self._bases: dict[str, float] = {}

    async def prepare(self, asset: str) -> None:
        """Look up the base price once; later quotes of the asset reuse it."""
        key = asset.upper()
        self._bases[key] = await self._base_prices.get_base_price(key)

    async def get_price(self, asset: str, chain: str, venue: str) -> float:
        key = asset.upper()
        base_price = self._bases.get(key)
        if base_price is None:
            base_price = await self._base_prices.get_base_price(key)
        variation = (self._rng.random() - 0.5) * 2 * self._max_variation
        return base_price * (1 + variation)


class LiveDexPriceSource:
    """
    Venue prices from the DEX oracle.

    Pools are looked up in a registry keyed `ASSET:chain:Venue`.
    Unregistered combinations raise NotFoundError, which the scanner
    treats as a missing venue.
    """

    def __init__(self, oracle: DexPairOracle, pairs: dict[str, str]) -> None:
        self._oracle = oracle
        self._pairs = dict(pairs)

    @staticmethod
    def pair_key(asset: str, chain: str, venue: str) -> str:
        return f"{asset.upper()}:{chain.lower()}:{venue}"

    async def prepare(self, asset: str) -> None:
        """Nothing to resolve up front; every pool is read through the oracle cache."""

    async def get_price(self, asset: str, chain: str, venue: str) -> float:
        pair_address = self._pairs.get(self.pair_key(asset, chain, venue))
        if pair_address is None:
            raise NotFoundError(f"No {venue} pool registered for {asset} on {chain}")

        snapshot = await self._oracle.get_pair_snapshot(
            DEXSCREENER_CHAIN_IDS.get(chain, chain), pair_address
        )
        if snapshot.price_usd <= 0:
            raise UpstreamUnavailableError(f"No price for {venue} pool {pair_address}")
        return snapshot.price_usd
