"""
Metrics collection for the oracle service.

Tracks cache behavior, upstream latencies, and scan counts
with efficient in-memory storage.
"""

import time
from collections import deque
from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class LatencyStats:
    """Aggregated latency statistics."""

    min_us: int = 0
    max_us: int = 0
    avg_us: float = 0.0
    p50_us: int = 0
    p95_us: int = 0
    p99_us: int = 0
    count: int = 0


class MetricsCollector:
    """
    Collects and aggregates service metrics.

    Counter names used across the service:
    - cache_hits, cache_misses, stale_served
    - upstream_fetches, upstream_retries, upstream_errors, upstream_rate_limited
    - scans, opportunities_found, venues_skipped
    """

    def __init__(self, latency_window_size: int = 1000) -> None:
        """
        Initialize metrics collector.

        Args:
            latency_window_size: Number of samples to keep for latency stats.
        """
        self._window_size = latency_window_size
        self._latencies: dict[str, deque[int]] = {}
        self._counters: dict[str, int] = {}
        self._start_time = time.time()

    def record_latency(self, name: str, latency_us: int) -> None:
        """
        Record a latency measurement.

        Args:
            name: Metric name (e.g., "coingecko_request").
            latency_us: Latency in microseconds.
        """
        if name not in self._latencies:
            self._latencies[name] = deque(maxlen=self._window_size)

        self._latencies[name].append(latency_us)

    def increment_counter(self, name: str, value: int = 1) -> None:
        """Increment a counter."""
        self._counters[name] = self._counters.get(name, 0) + value

    def get_counter(self, name: str) -> int:
        """Get counter value."""
        return self._counters.get(name, 0)

    def get_latency_stats(self, name: str) -> LatencyStats:
        """
        Get aggregated latency statistics.

        Args:
            name: Metric name.

        Returns:
            LatencyStats with percentiles.
        """
        samples = self._latencies.get(name)
        if not samples:
            return LatencyStats()

        sorted_samples = sorted(samples)
        n = len(sorted_samples)

        return LatencyStats(
            min_us=sorted_samples[0],
            max_us=sorted_samples[-1],
            avg_us=sum(sorted_samples) / n,
            p50_us=sorted_samples[n // 2],
            p95_us=sorted_samples[int(n * 0.95)] if n > 1 else sorted_samples[-1],
            p99_us=sorted_samples[int(n * 0.99)] if n > 1 else sorted_samples[-1],
            count=n,
        )

    @property
    def cache_hit_rate(self) -> float:
        """Fraction of oracle lookups answered from a fresh cache entry."""
        hits = self.get_counter("cache_hits")
        total = hits + self.get_counter("cache_misses")
        return hits / total if total > 0 else 0.0

    @property
    def uptime_seconds(self) -> float:
        """Get collector uptime in seconds."""
        return time.time() - self._start_time

    def snapshot(self) -> dict[str, Any]:
        """Get all metrics as a JSON-serializable dict."""
        return {
            "uptime_seconds": round(self.uptime_seconds, 3),
            "cache_hit_rate": round(self.cache_hit_rate, 4),
            "counters": dict(self._counters),
            "latencies": {name: asdict(self.get_latency_stats(name)) for name in self._latencies},
        }
