"""
Pytest configuration and shared fixtures.

Provides reusable test fixtures for all test modules.
"""

import itertools
from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from pricedash.config.settings import Settings
from pricedash.core.types import PriceQuote, Snapshot, Source, Symbol
from pricedash.exchange.models import PriceResponse
from pricedash.market.history import HistoryBuffer
from pricedash.market.selection import SelectionState
from tests.mocks.price_api import MockPriceClient


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    """Fast settings: long interval, no debounce, no startup fetch."""
    return Settings(
        _env_file=None,
        fetch_interval_ms=60_000,
        debounce_ms=0,
        fetch_on_start=False,
    )


@pytest.fixture
def settings_with_sources(settings: Settings) -> Settings:
    """Settings with Binance and Coinbase enabled at start."""
    return settings.model_copy(update={"initial_sources": [Source.BINANCE, Source.COINBASE]})


# =============================================================================
# Market Fixtures
# =============================================================================


@pytest.fixture
def selection() -> SelectionState:
    """Selection with default symbol and nothing enabled."""
    return SelectionState()


@pytest.fixture
def ticking_clock() -> Callable[[], int]:
    """Clock advancing one second per call, starting 2024-01-01 00:00:00 UTC."""
    counter = itertools.count()
    return lambda: 1704067200000 + next(counter) * 1000


@pytest.fixture
def history(ticking_clock: Callable[[], int]) -> HistoryBuffer:
    """Empty history buffer with the default capacity."""
    return HistoryBuffer(clock=ticking_clock)


@pytest.fixture
def sample_response() -> dict[str, float | None]:
    """Response with a price, an explicit null and a source nobody enabled."""
    return {"Binance": 50000.12, "Coinbase": None, "Bybit": 50010.0}


@pytest.fixture
def make_snapshot() -> Callable[..., Snapshot]:
    """Factory building snapshots from source -> price keyword pairs."""

    def _make(symbol: Symbol = Symbol.BTCUSDT, request_id: int = 0, **prices: float | None) -> Snapshot:
        quotes = {
            Source(name): PriceQuote(source=Source(name), price=price)
            for name, price in prices.items()
        }
        return Snapshot(symbol=symbol, quotes=quotes, request_id=request_id)

    return _make


# =============================================================================
# Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_client() -> MockPriceClient:
    """Mock client returning the default scripted payload."""
    return MockPriceClient()


@pytest.fixture
def async_price_source(sample_response: dict[str, float | None]) -> AsyncMock:
    """AsyncMock price source answering every call with sample_response."""
    source = AsyncMock()
    source.get_prices.return_value = PriceResponse.model_validate(sample_response)
    return source
