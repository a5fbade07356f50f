"""Telemetry module for logging and metrics."""

from marketoracle.telemetry.logger import AsyncLogger, setup_logging
from marketoracle.telemetry.metrics import LatencyStats, MetricsCollector


__all__ = [
    "AsyncLogger",
    "LatencyStats",
    "MetricsCollector",
    "setup_logging",
]
