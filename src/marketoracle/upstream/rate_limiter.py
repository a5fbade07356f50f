"""
Token bucket rate limiter for upstream API requests.

Keeps outbound traffic inside a provider's per-minute budget so that
rate-limit responses stay the exception rather than the rule.
"""

import asyncio
from dataclasses import dataclass, field

from marketoracle.utils.time import get_timestamp_ms


@dataclass
class TokenBucket:
    """
    Token bucket implementation for rate limiting.

    Tokens are added at a constant rate up to a maximum capacity.
    Each request consumes one token.
    """

    capacity: int
    refill_rate: float  # tokens per second
    tokens: float = field(init=False)
    last_refill: int = field(init=False)  # milliseconds
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialize with full bucket."""
        self.tokens = float(self.capacity)
        self.last_refill = get_timestamp_ms()

    def _refill(self) -> None:
        """Add tokens based on elapsed time."""
        now = get_timestamp_ms()
        elapsed_seconds = (now - self.last_refill) / 1000.0

        self.tokens = min(
            self.capacity,
            self.tokens + (elapsed_seconds * self.refill_rate),
        )
        self.last_refill = now

    async def acquire(self, tokens: int = 1) -> None:
        """
        Acquire tokens, waiting until enough have been refilled.

        Args:
            tokens: Number of tokens to acquire.
        """
        async with self._lock:
            self._refill()

            if self.tokens < tokens:
                wait_seconds = (tokens - self.tokens) / self.refill_rate
                await asyncio.sleep(wait_seconds)
                self._refill()

            self.tokens -= tokens


class RateLimiter:
    """
    Per-provider request budget.

    Wraps a bucket that refills `requests_per_minute` tokens per minute,
    with a burst capacity of `burst` requests.
    """

    def __init__(self, requests_per_minute: int, burst: int | None = None) -> None:
        """
        Initialize rate limiter.

        Args:
            requests_per_minute: Sustained request budget.
            burst: Maximum requests allowed back to back (default: a
                sixth of the per-minute budget, at least 1).
        """
        self._requests_per_minute = requests_per_minute
        self._bucket = TokenBucket(
            capacity=burst or max(1, requests_per_minute // 6),
            refill_rate=requests_per_minute / 60.0,
        )

    async def acquire(self) -> None:
        """Wait for permission to send one request."""
        await self._bucket.acquire(1)

    @property
    def requests_per_minute(self) -> int:
        """Configured sustained budget."""
        return self._requests_per_minute

    @property
    def available(self) -> float:
        """Get approximate number of available request tokens."""
        return self._bucket.tokens
