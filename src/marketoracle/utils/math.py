"""
Mathematical utilities for spread and cost calculations.

All spreads and costs are expressed in basis points of notional.
"""

from typing import Final

from marketoracle.config.constants import BPS_PER_UNIT


# Epsilon for floating point comparisons
EPSILON: Final[float] = 1e-10


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Safely divide two numbers, returning default on division by zero.

    Args:
        numerator: The dividend.
        denominator: The divisor.
        default: Value to return if denominator is zero.

    Returns:
        Result of division or default value.
    """
    if abs(denominator) < EPSILON:
        return default
    return numerator / denominator


def spread_bps(buy_price: float, sell_price: float) -> float:
    """
    Price difference between two venues in bps of the lower (buy) price.

    Example:
        >>> spread_bps(100.0, 101.0)
        100.0
    """
    return safe_divide(sell_price - buy_price, buy_price) * BPS_PER_UNIT


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp a value into [lower, upper]."""
    return max(lower, min(upper, value))


def parse_float(value: object, default: float = 0.0) -> float:
    """
    Parse a numeric field from an upstream payload.

    Providers return numbers both as JSON numbers and as strings; anything
    unparseable yields `default`.
    """
    if value is None or value == "":
        return default
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
