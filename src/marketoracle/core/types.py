"""
Type definitions for the oracle service.

This module contains the dataclasses, TypedDicts, and Protocol definitions
shared by the oracles, the scanner and the HTTP layer. Using slots=True for
memory efficiency and faster attribute access.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Protocol, TypedDict

from marketoracle.utils.time import age_seconds, parse_iso, to_iso, utc_now


# =============================================================================
# Cache Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class CacheEntry:
    """
    One row of the cache table.

    `value` is an opaque serialized payload owned by the oracle that wrote it.
    An entry past `expires_at` is stale but still readable.
    """

    key: str
    value: str
    expires_at: datetime
    created_at: datetime = field(default_factory=utc_now)

    def is_fresh(self, now: datetime | None = None) -> bool:
        """Check whether the entry is still inside its TTL."""
        return self.expires_at > (now or utc_now())


# =============================================================================
# Market Data Types
# =============================================================================


class PriceQuotePayload(TypedDict):
    """Wire format of a reference price."""

    symbol: str
    price_usd: float
    ts: str
    source: str


class DexSnapshotPayload(TypedDict):
    """Wire format of a DEX pair snapshot."""

    chain: str
    pair_address: str
    price_usd: float
    liquidity_usd: float
    volume_24h_usd: float
    fee_bps: int
    ts: str
    source: str


@dataclass(slots=True, frozen=True)
class PriceQuote:
    """
    USD reference price for a symbol.

    Rebuilt per request from either the cache or an upstream fetch.
    """

    symbol: str
    price_usd: float
    timestamp: datetime
    source: str
    stale: bool = False

    def as_stale(self) -> "PriceQuote":
        """Return a copy flagged as served past its TTL."""
        return replace(self, stale=True)

    @property
    def freshness_sec(self) -> float:
        """Age of the underlying observation in seconds."""
        return age_seconds(self.timestamp)

    def to_payload(self) -> PriceQuotePayload:
        """Serialize for caching."""
        return {
            "symbol": self.symbol,
            "price_usd": self.price_usd,
            "ts": to_iso(self.timestamp),
            "source": self.source,
        }

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "PriceQuote":
        """Rebuild a quote from its cached payload."""
        return cls(
            symbol=data["symbol"],
            price_usd=float(data["price_usd"]),
            timestamp=parse_iso(data["ts"]),
            source=data["source"],
        )


@dataclass(slots=True, frozen=True)
class DexSnapshot:
    """Liquidity, volume and price of a single DEX pair."""

    chain: str
    pair_address: str
    price_usd: float
    liquidity_usd: float
    volume_24h_usd: float
    fee_bps: int
    timestamp: datetime
    source: str

    def to_payload(self) -> DexSnapshotPayload:
        """Serialize for caching and for the HTTP response."""
        return {
            "chain": self.chain,
            "pair_address": self.pair_address,
            "price_usd": self.price_usd,
            "liquidity_usd": self.liquidity_usd,
            "volume_24h_usd": self.volume_24h_usd,
            "fee_bps": self.fee_bps,
            "ts": to_iso(self.timestamp),
            "source": self.source,
        }

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "DexSnapshot":
        """Rebuild a snapshot from its cached payload."""
        return cls(
            chain=data["chain"],
            pair_address=data["pair_address"],
            price_usd=float(data["price_usd"]),
            liquidity_usd=float(data["liquidity_usd"]),
            volume_24h_usd=float(data["volume_24h_usd"]),
            fee_bps=int(data["fee_bps"]),
            timestamp=parse_iso(data["ts"]),
            source=data["source"],
        )


# =============================================================================
# Arbitrage Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class VenueQuote:
    """One sampled point of the price matrix."""

    chain: str
    venue: str
    price: float


@dataclass(slots=True)
class ArbitrageOpportunity:
    """
    Cross-venue arbitrage opportunity.

    The buy leg is always the cheaper venue, so `spread_bps` is never
    negative. `net_profit_bps` is the spread after estimated gas and
    bridge costs.
    """

    id: str
    asset: str
    buy_chain: str
    buy_venue: str
    buy_price: float
    sell_chain: str
    sell_venue: str
    sell_price: float
    spread_bps: float
    net_profit_bps: float
    estimated_gas_cost_bps: float
    confidence: int
    timestamp: datetime

    @property
    def is_cross_chain(self) -> bool:
        """Check if settlement requires a bridge."""
        return self.buy_chain != self.sell_chain

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the HTTP response."""
        return {
            "id": self.id,
            "asset": self.asset,
            "buy_chain": self.buy_chain,
            "buy_venue": self.buy_venue,
            "buy_price": self.buy_price,
            "sell_chain": self.sell_chain,
            "sell_venue": self.sell_venue,
            "sell_price": self.sell_price,
            "spread_bps": self.spread_bps,
            "net_profit_bps": self.net_profit_bps,
            "estimated_gas_cost_bps": self.estimated_gas_cost_bps,
            "confidence": self.confidence,
            "timestamp": to_iso(self.timestamp),
        }


# =============================================================================
# Protocols (Interfaces)
# =============================================================================


class PriceSource(Protocol):
    """Protocol for per-venue price providers used by the scanner."""

    async def prepare(self, asset: str) -> None:
        """Called once per asset before a scan quotes its venues."""
        ...

    async def get_price(self, asset: str, chain: str, venue: str) -> float:
        """Get the price of `asset` on `venue` deployed on `chain`."""
        ...


class BasePriceProvider(Protocol):
    """Protocol for canonical (venue-independent) asset prices."""

    async def get_base_price(self, asset: str) -> float:
        """Get the reference USD price of an asset."""
        ...


class ReferencePriceFeed(Protocol):
    """Protocol for upstream reference price clients."""

    async def get_usd_price(self, coin_id: str) -> float:
        """Get the USD price of a provider coin id."""
        ...


class DexPairFeed(Protocol):
    """Protocol for upstream DEX pair clients."""

    async def get_pair(self, chain: str, pair_address: str) -> dict[str, Any] | None:
        """Get raw pair data, or None if the provider does not know the pair."""
        ...
