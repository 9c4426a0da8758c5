"""Configuration module for the dashboard."""

from pricedash.config.constants import (
    DEFAULT_API_URL,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_FETCH_INTERVAL_MS,
    DEFAULT_HISTORY_CAPACITY,
)
from pricedash.config.settings import Settings, get_settings


__all__ = [
    "Settings",
    "get_settings",
    "DEFAULT_API_URL",
    "DEFAULT_DEBOUNCE_MS",
    "DEFAULT_FETCH_INTERVAL_MS",
    "DEFAULT_HISTORY_CAPACITY",
]
