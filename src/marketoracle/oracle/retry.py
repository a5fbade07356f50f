"""
Retry policy for rate-limited upstream calls.

The policy is immutable; the attempt counter lives in the caller's frame,
so concurrent requests never share retry state.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from marketoracle.config.constants import (
    MAX_FETCH_ATTEMPTS,
    MAX_RETRY_DELAY,
    MIN_RETRY_DELAY,
    RETRY_MULTIPLIER,
)


Sleeper = Callable[[float], Awaitable[None]]


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """
    Bounded exponential backoff.

    Attempt `n` (zero-based) that fails is followed by a delay of
    `min(base_delay * multiplier**n, max_delay)` before attempt `n + 1`.
    """

    max_attempts: int = MAX_FETCH_ATTEMPTS
    base_delay: float = MIN_RETRY_DELAY
    max_delay: float = MAX_RETRY_DELAY
    multiplier: float = RETRY_MULTIPLIER

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("retry delays must be non-negative")

    def delay_for(self, attempt: int) -> float:
        """
        Backoff after a failed attempt.

        Example:
            >>> RetryPolicy(base_delay=0.5, max_delay=1.5).delay_for(2)
            1.5
        """
        return min(self.base_delay * self.multiplier**attempt, self.max_delay)

    def has_attempts_after(self, attempt: int) -> bool:
        """Check whether another attempt follows attempt `attempt`."""
        return attempt + 1 < self.max_attempts


async def default_sleep(seconds: float) -> None:
    """Sleep on the running event loop."""
    await asyncio.sleep(seconds)
