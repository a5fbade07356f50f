"""
Application settings with environment variable support.

Uses Pydantic Settings for type-safe configuration with automatic
environment variable loading and validation.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from marketoracle.config.constants import (
    COINGECKO_REQUESTS_PER_MINUTE,
    COINGECKO_REST_URL,
    DEFAULT_REQUEST_TIMEOUT,
    DEX_TTL_SECONDS,
    DEXSCREENER_REQUESTS_PER_MINUTE,
    DEXSCREENER_REST_URL,
    MAX_CONCURRENT_QUOTES,
    MAX_FETCH_ATTEMPTS,
    MAX_RETRY_DELAY,
    MAX_SCAN_RESULTS,
    MIN_RETRY_DELAY,
    REFPRICE_TTL_SECONDS,
    SAMPLES_PER_CHAIN,
)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Sensitive values use SecretStr for safe handling.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Upstream Providers
    # =========================================================================

    coingecko_base_url: str = Field(
        default=COINGECKO_REST_URL,
        description="Base URL of the CoinGecko REST API",
    )
    coingecko_api_key: SecretStr | None = Field(
        default=None,
        description="Optional CoinGecko demo API key",
    )
    dexscreener_base_url: str = Field(
        default=DEXSCREENER_REST_URL,
        description="Base URL of the DexScreener REST API",
    )

    request_timeout_s: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT,
        gt=0.0,
        le=60.0,
        description="Total timeout for a single upstream request",
    )

    coingecko_requests_per_minute: int = Field(
        default=COINGECKO_REQUESTS_PER_MINUTE,
        ge=1,
        description="Request budget for CoinGecko",
    )
    dexscreener_requests_per_minute: int = Field(
        default=DEXSCREENER_REQUESTS_PER_MINUTE,
        ge=1,
        description="Request budget for DexScreener",
    )

    # =========================================================================
    # Cache Configuration
    # =========================================================================

    refprice_ttl_s: float = Field(
        default=REFPRICE_TTL_SECONDS,
        gt=0.0,
        description="Freshness window for reference prices",
    )
    dex_ttl_s: float = Field(
        default=DEX_TTL_SECONDS,
        gt=0.0,
        description="Freshness window for DEX pair snapshots",
    )

    # =========================================================================
    # Retry Policy
    # =========================================================================

    retry_max_attempts: int = Field(
        default=MAX_FETCH_ATTEMPTS,
        ge=1,
        le=10,
        description="Upstream attempts per reference price request",
    )
    retry_base_delay_s: float = Field(
        default=MIN_RETRY_DELAY,
        ge=0.0,
        description="First backoff delay after a rate-limited attempt",
    )
    retry_max_delay_s: float = Field(
        default=MAX_RETRY_DELAY,
        ge=0.0,
        description="Upper bound for a single backoff delay",
    )

    # =========================================================================
    # Arbitrage Scanner
    # =========================================================================

    scanner_price_mode: Literal["synthetic", "live"] = Field(
        default="synthetic",
        description="Where venue prices come from",
    )
    scanner_base_prices: Literal["static", "oracle"] = Field(
        default="static",
        description="Base prices for synthetic mode: fixed table or reference oracle",
    )
    scanner_max_results: int = Field(
        default=MAX_SCAN_RESULTS,
        ge=1,
        le=100,
        description="Maximum opportunities returned by one scan",
    )
    scanner_samples_per_chain: int = Field(
        default=SAMPLES_PER_CHAIN,
        ge=1,
        le=10,
        description="Venue quotes sampled per chain",
    )
    scanner_max_concurrency: int = Field(
        default=MAX_CONCURRENT_QUOTES,
        ge=1,
        le=64,
        description="Concurrent venue fetches in live mode",
    )
    scanner_live_pairs: dict[str, str] = Field(
        default_factory=dict,
        description="Live mode pair registry: 'ASSET:chain:Venue' -> pair address",
    )

    # =========================================================================
    # Server
    # =========================================================================

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8000, ge=1, le=65535, description="Bind port")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("coingecko_base_url", "dexscreener_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoints are appended with a leading slash."""
        return v.rstrip("/")

    @field_validator("retry_max_delay_s", mode="after")
    @classmethod
    def validate_max_delay(cls, v: float) -> float:
        """Warn if backoff cap is too long for an interactive request."""
        if v > 30.0:
            import warnings

            warnings.warn(
                f"Retry delay cap {v}s may exceed client request timeouts",
                stacklevel=2,
            )
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are loaded only once.
    Clear cache with `get_settings.cache_clear()` if needed.
    """
    return Settings()
