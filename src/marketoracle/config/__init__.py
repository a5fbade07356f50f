"""Configuration module for the oracle service."""

from marketoracle.config.constants import (
    COINGECKO_REST_URL,
    DEX_TTL_SECONDS,
    DEXSCREENER_REST_URL,
    MAX_FETCH_ATTEMPTS,
    REFPRICE_TTL_SECONDS,
)
from marketoracle.config.settings import Settings, get_settings


__all__ = [
    "Settings",
    "get_settings",
    "COINGECKO_REST_URL",
    "DEXSCREENER_REST_URL",
    "DEX_TTL_SECONDS",
    "MAX_FETCH_ATTEMPTS",
    "REFPRICE_TTL_SECONDS",
]
