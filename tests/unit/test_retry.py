"""
Unit tests for RetryPolicy.
"""

import pytest

from marketoracle.oracle.retry import RetryPolicy


class TestRetryPolicy:
    """Tests for bounded exponential backoff."""

    def test_defaults(self) -> None:
        """Test default policy values."""
        policy = RetryPolicy()

        assert policy.max_attempts == 3
        assert policy.base_delay == 0.5
        assert policy.multiplier == 2.0

    def test_exponential_delays(self) -> None:
        """Test base * 2^attempt growth."""
        policy = RetryPolicy(base_delay=0.5, max_delay=100.0)

        assert policy.delay_for(0) == 0.5
        assert policy.delay_for(1) == 1.0
        assert policy.delay_for(2) == 2.0
        assert policy.delay_for(3) == 4.0

    def test_delay_capped(self) -> None:
        """Test that delays never exceed the cap."""
        policy = RetryPolicy(base_delay=1.0, max_delay=3.0)

        assert policy.delay_for(1) == 2.0
        assert policy.delay_for(2) == 3.0
        assert policy.delay_for(10) == 3.0

    def test_has_attempts_after(self) -> None:
        """Test attempt bound bookkeeping."""
        policy = RetryPolicy(max_attempts=3)

        assert policy.has_attempts_after(0)
        assert policy.has_attempts_after(1)
        assert not policy.has_attempts_after(2)

    def test_invalid_attempts(self) -> None:
        """Test that at least one attempt is required."""
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

    def test_negative_delay(self) -> None:
        """Test that negative delays are rejected."""
        with pytest.raises(ValueError):
            RetryPolicy(base_delay=-1.0)
