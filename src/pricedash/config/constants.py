"""
Dashboard constants and default configuration values.

Every hardcoded value used by the dashboard lives here, grouped by concern.
Catalog membership itself is defined by the enums in `pricedash.core.types`.
"""

from typing import Final


# =============================================================================
# Aggregation Endpoint
# =============================================================================

DEFAULT_API_URL: Final[str] = "http://localhost:5000/arbitrage"

# Query parameter carrying the active symbol
SYMBOL_QUERY_PARAM: Final[str] = "symbol"

DEFAULT_REQUEST_TIMEOUT: Final[float] = 10.0  # seconds


# =============================================================================
# Scheduling
# =============================================================================

DEFAULT_FETCH_INTERVAL_MS: Final[int] = 60_000
DEFAULT_DEBOUNCE_MS: Final[int] = 300


# =============================================================================
# History
# =============================================================================

DEFAULT_HISTORY_CAPACITY: Final[int] = 20

# Wall-clock label attached to each history entry
TIME_LABEL_FORMAT: Final[str] = "%H:%M:%S"


# =============================================================================
# Display
# =============================================================================

PRICE_DISPLAY_PRECISION: Final[int] = 2
UNAVAILABLE_LABEL: Final[str] = "N/A"

DEFAULT_REPORT_INTERVAL: Final[float] = 1.0  # seconds


# =============================================================================
# Dashboard Server
# =============================================================================

DEFAULT_SERVER_HOST: Final[str] = "0.0.0.0"
DEFAULT_SERVER_PORT: Final[int] = 8000


# =============================================================================
# Logging & Telemetry
# =============================================================================

LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

MAX_LOG_QUEUE_SIZE: Final[int] = 10_000

# Samples kept per latency metric
LATENCY_WINDOW_SIZE: Final[int] = 500
