"""
Metrics collection for the fetch pipeline.

Counters for fetch outcomes and rolling latency windows, kept in memory
for the lifetime of a session.
"""

import time
from collections import deque
from dataclasses import dataclass

from pricedash.config.constants import LATENCY_WINDOW_SIZE


# Counter names
FETCHES_STARTED = "fetches_started"
FETCHES_SUCCEEDED = "fetches_succeeded"
FETCHES_FAILED = "fetches_failed"
FETCHES_SKIPPED = "fetches_skipped"
STALE_RESPONSES_DROPPED = "stale_responses_dropped"
LATE_RESPONSES_IGNORED = "late_responses_ignored"

# Latency names
FETCH_LATENCY = "fetch_latency"


@dataclass
class LatencyStats:
    """Aggregated latency statistics in milliseconds."""

    min_ms: float = 0.0
    max_ms: float = 0.0
    avg_ms: float = 0.0
    p50_ms: float = 0.0
    p95_ms: float = 0.0
    count: int = 0


@dataclass
class FetchStats:
    """Fetch outcome summary."""

    started: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    stale_dropped: int = 0

    @property
    def success_rate(self) -> float:
        """Share of completed fetches that succeeded."""
        total = self.succeeded + self.failed
        return self.succeeded / total if total > 0 else 0.0


class MetricsCollector:
    """
    Collects counters and latency samples.

    Latency samples are kept in a bounded window per metric name, so
    statistics describe recent behaviour only.
    """

    def __init__(self, latency_window_size: int = LATENCY_WINDOW_SIZE) -> None:
        """
        Initialize the collector.

        Args:
            latency_window_size: Samples kept per latency metric.
        """
        self._window_size = latency_window_size
        self._latencies: dict[str, deque[float]] = {}
        self._counters: dict[str, int] = {}
        self._start_time = time.time()

    def record_latency(self, name: str, latency_ms: float) -> None:
        """Record one latency sample in milliseconds."""
        if name not in self._latencies:
            self._latencies[name] = deque(maxlen=self._window_size)
        self._latencies[name].append(latency_ms)

    def increment_counter(self, name: str, value: int = 1) -> None:
        self._counters[name] = self._counters.get(name, 0) + value

    def get_counter(self, name: str) -> int:
        return self._counters.get(name, 0)

    def get_latency_stats(self, name: str) -> LatencyStats:
        """
        Aggregate the latency window of one metric.

        Returns:
            LatencyStats, all zero when no samples were recorded.
        """
        samples = self._latencies.get(name)
        if not samples:
            return LatencyStats()

        ordered = sorted(samples)
        n = len(ordered)

        return LatencyStats(
            min_ms=ordered[0],
            max_ms=ordered[-1],
            avg_ms=sum(ordered) / n,
            p50_ms=ordered[n // 2],
            p95_ms=ordered[min(int(n * 0.95), n - 1)],
            count=n,
        )

    @property
    def fetch_stats(self) -> FetchStats:
        return FetchStats(
            started=self.get_counter(FETCHES_STARTED),
            succeeded=self.get_counter(FETCHES_SUCCEEDED),
            failed=self.get_counter(FETCHES_FAILED),
            skipped=self.get_counter(FETCHES_SKIPPED),
            stale_dropped=self.get_counter(STALE_RESPONSES_DROPPED),
        )

    @property
    def uptime_seconds(self) -> float:
        return time.time() - self._start_time

    def to_dict(self) -> dict[str, object]:
        """Export counters and latency summaries."""
        return {
            "uptime_seconds": self.uptime_seconds,
            "counters": dict(self._counters),
            "latencies": {
                name: {
                    "min": stats.min_ms,
                    "max": stats.max_ms,
                    "avg": stats.avg_ms,
                    "p50": stats.p50_ms,
                    "p95": stats.p95_ms,
                    "count": stats.count,
                }
                for name, stats in (
                    (name, self.get_latency_stats(name)) for name in self._latencies
                )
            },
            "success_rate": self.fetch_stats.success_rate,
        }

    def reset(self) -> None:
        """Reset all metrics."""
        self._latencies.clear()
        self._counters.clear()
        self._start_time = time.time()
