"""Utility functions for the dashboard."""

from pricedash.utils.time import (
    LatencyTimer,
    format_duration_ms,
    format_time_label,
    get_timestamp_ms,
)


__all__ = [
    "LatencyTimer",
    "format_duration_ms",
    "format_time_label",
    "get_timestamp_ms",
]
