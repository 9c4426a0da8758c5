"""Telemetry module for logging, metrics, and reporting."""

from pricedash.telemetry.logger import AsyncLogger, setup_logging
from pricedash.telemetry.metrics import FetchStats, MetricsCollector


__all__ = [
    "AsyncLogger",
    "FetchStats",
    "MetricsCollector",
    "setup_logging",
]
