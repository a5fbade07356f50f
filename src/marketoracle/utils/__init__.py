"""Utility functions for the oracle service."""

from marketoracle.utils.math import clamp, parse_float, safe_divide, spread_bps
from marketoracle.utils.time import (
    age_seconds,
    expires_in,
    get_timestamp_ms,
    get_timestamp_us,
    parse_iso,
    to_iso,
    utc_now,
)


__all__ = [
    "age_seconds",
    "clamp",
    "expires_in",
    "get_timestamp_ms",
    "get_timestamp_us",
    "parse_float",
    "parse_iso",
    "safe_divide",
    "spread_bps",
    "to_iso",
    "utc_now",
]
