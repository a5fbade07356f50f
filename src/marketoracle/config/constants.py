"""
Oracle and scanner constants.

This module contains all hardcoded values used throughout the oracle service.
Values are organized by category for easy maintenance and auditing.
"""

from typing import Final


# =============================================================================
# Upstream API Endpoints
# =============================================================================

COINGECKO_REST_URL: Final[str] = "https://api.coingecko.com"
DEXSCREENER_REST_URL: Final[str] = "https://api.dexscreener.com"

# API Endpoints
ENDPOINT_SIMPLE_PRICE: Final[str] = "/api/v3/simple/price"
ENDPOINT_DEX_PAIRS: Final[str] = "/latest/dex/pairs"

SOURCE_COINGECKO: Final[str] = "coingecko"
SOURCE_DEXSCREENER: Final[str] = "dexscreener"

# HTTP status returned by providers when the request budget is exhausted
HTTP_TOO_MANY_REQUESTS: Final[int] = 429


# =============================================================================
# Symbol Mapping
# =============================================================================

# Lowercase ticker -> CoinGecko coin id
COINGECKO_IDS: Final[dict[str, str]] = {
    "eth": "ethereum",
    "btc": "bitcoin",
    "sol": "solana",
    "matic": "matic-network",
    "arb": "arbitrum",
    "op": "optimism",
    "avax": "avalanche-2",
    "link": "chainlink",
    "uni": "uniswap",
    "aave": "aave",
    "usdc": "usd-coin",
    "usdt": "tether",
    "dai": "dai",
    "wbtc": "wrapped-bitcoin",
}


# =============================================================================
# Cache Configuration
# =============================================================================

REFPRICE_CACHE_PREFIX: Final[str] = "oracle:refprice"
DEX_CACHE_PREFIX: Final[str] = "oracle:dex"

# Free-tier price APIs allow only a few calls per minute
REFPRICE_TTL_SECONDS: Final[float] = 300.0
# DEX prices move every block
DEX_TTL_SECONDS: Final[float] = 10.0

# Fee tier assumed when DexScreener omits one
DEFAULT_DEX_FEE_BPS: Final[int] = 1


# =============================================================================
# Retry Strategy
# =============================================================================

MAX_FETCH_ATTEMPTS: Final[int] = 3
MIN_RETRY_DELAY: Final[float] = 0.5  # seconds
MAX_RETRY_DELAY: Final[float] = 8.0  # seconds
RETRY_MULTIPLIER: Final[float] = 2.0


# =============================================================================
# Rate Limiting
# =============================================================================

# CoinGecko public tier: ~30 calls/minute
COINGECKO_REQUESTS_PER_MINUTE: Final[int] = 30
# DexScreener pairs endpoint: 300 calls/minute
DEXSCREENER_REQUESTS_PER_MINUTE: Final[int] = 300

DEFAULT_REQUEST_TIMEOUT: Final[float] = 10.0  # seconds


# =============================================================================
# Arbitrage Scanner
# =============================================================================

DEFAULT_ASSETS: Final[tuple[str, ...]] = ("USDC", "USDT", "DAI", "ETH", "WBTC")

DEFAULT_VENUES: Final[tuple[str, ...]] = (
    "Uniswap",
    "SushiSwap",
    "Curve",
    "Balancer",
    "PancakeSwap",
)

# Placeholder reference prices used when no live oracle is wired
BASE_PRICES_USD: Final[dict[str, float]] = {
    "USDC": 1.0,
    "USDT": 1.0,
    "DAI": 1.0,
    "ETH": 2500.0,
    "WBTC": 45000.0,
}
UNKNOWN_ASSET_BASE_PRICE: Final[float] = 1.0

# Execution cost per chain, in basis points of notional
GAS_COST_BPS: Final[dict[str, float]] = {
    "eth": 30.0,
    "polygon": 5.0,
    "arbitrum": 8.0,
    "optimism": 10.0,
    "base": 7.0,
    "avalanche": 12.0,
    "bsc": 6.0,
}
DEFAULT_GAS_COST_BPS: Final[float] = 10.0
BRIDGE_COST_BPS: Final[float] = 15.0

SAMPLES_PER_CHAIN: Final[int] = 2
MAX_PRICE_VARIATION: Final[float] = 0.005  # +/-0.5%
MAX_SCAN_RESULTS: Final[int] = 10
MAX_CONCURRENT_QUOTES: Final[int] = 8

BPS_PER_UNIT: Final[float] = 10_000.0


# =============================================================================
# Confidence Scoring
# =============================================================================

BASE_CONFIDENCE: Final[int] = 70
# (spread threshold in bps, bonus), checked in order
SPREAD_CONFIDENCE_TIERS: Final[tuple[tuple[float, int], ...]] = (
    (100.0, 15),
    (50.0, 10),
    (20.0, 5),
)
SAME_CHAIN_BONUS: Final[int] = 10
HIGH_GAS_PENALTY: Final[int] = 10


# =============================================================================
# HTTP API
# =============================================================================

CORS_ALLOW_HEADERS: Final[tuple[str, ...]] = (
    "authorization",
    "x-client-info",
    "apikey",
    "content-type",
)


# =============================================================================
# Logging & Telemetry
# =============================================================================

LOG_FORMAT: Final[str] = "%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

# Maximum log queue size
MAX_LOG_QUEUE_SIZE: Final[int] = 10_000
