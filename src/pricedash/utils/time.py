"""
Time utilities.

Millisecond wall-clock timestamps for snapshots and history entries,
monotonic timing for latency measurement, and display formatting.
"""

import time
from datetime import datetime

from pricedash.config.constants import TIME_LABEL_FORMAT


def get_timestamp_ms() -> int:
    """
    Get current Unix timestamp in milliseconds.

    Returns:
        Milliseconds since the epoch.
    """
    return time.time_ns() // 1_000_000


def format_time_label(timestamp_ms: int, fmt: str = TIME_LABEL_FORMAT) -> str:
    """
    Format a timestamp as a local wall-clock label.

    Args:
        timestamp_ms: Unix timestamp in milliseconds.
        fmt: strftime format.

    Returns:
        Label such as '14:03:27'.
    """
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime(fmt)


def format_duration_ms(duration_ms: float) -> str:
    """
    Format a duration for display.

    Examples:
        >>> format_duration_ms(250)
        '250ms'
        >>> format_duration_ms(1500)
        '1.50s'
        >>> format_duration_ms(90_000)
        '1m30s'
    """
    if duration_ms < 1000:
        return f"{duration_ms:.0f}ms"
    if duration_ms < 60_000:
        return f"{duration_ms / 1000:.2f}s"
    minutes, seconds = divmod(int(duration_ms // 1000), 60)
    return f"{minutes}m{seconds:02d}s"


class LatencyTimer:
    """
    Context manager measuring elapsed time with a monotonic clock.

    Example:
        >>> with LatencyTimer() as timer:
        ...     do_something()
        >>> timer.elapsed_ms
    """

    __slots__ = ("_start_ns", "elapsed_ms")

    def __init__(self) -> None:
        self._start_ns: int = 0
        self.elapsed_ms: float = 0.0

    def __enter__(self) -> "LatencyTimer":
        self._start_ns = time.perf_counter_ns()
        return self

    def __exit__(self, *args: object) -> None:
        self.elapsed_ms = (time.perf_counter_ns() - self._start_ns) / 1_000_000
