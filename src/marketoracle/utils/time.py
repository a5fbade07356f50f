"""
Time utilities.

All oracle timestamps are timezone-aware UTC datetimes, serialized as
ISO-8601 strings on the wire.
"""

import time
from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """
    Get the current time as an aware UTC datetime.

    Returns:
        Current time in UTC.
    """
    return datetime.now(tz=UTC)


def get_timestamp_ms() -> int:
    """
    Get current timestamp in milliseconds.

    Used by the rate limiter, where only differences matter.

    Returns:
        Current Unix timestamp in milliseconds.
    """
    return time.time_ns() // 1_000_000


def get_timestamp_us() -> int:
    """Get current timestamp in microseconds."""
    return time.time_ns() // 1000


def expires_in(seconds: float, now: datetime | None = None) -> datetime:
    """
    Compute an expiry instant.

    Args:
        seconds: Time-to-live in seconds.
        now: Reference time (defaults to the current UTC time).

    Returns:
        The instant `seconds` after `now`.
    """
    return (now or utc_now()) + timedelta(seconds=seconds)


def to_iso(value: datetime) -> str:
    """
    Format a datetime for JSON payloads.

    Example:
        >>> to_iso(datetime(2024, 1, 1, 12, 0, tzinfo=UTC))
        '2024-01-01T12:00:00.000Z'
    """
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp produced by `to_iso`.

    Naive values are assumed to be UTC.
    """
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def age_seconds(since: datetime, now: datetime | None = None) -> float:
    """Seconds elapsed since `since`, never negative."""
    return max(0.0, ((now or utc_now()) - since).total_seconds())
