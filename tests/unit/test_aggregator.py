"""
Unit tests for Aggregator.

Tests the response filter and the fetch result mapping.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from pricedash.core.errors import EmptySelectionError, TransportError
from pricedash.core.types import FetchErr, FetchOk, Source, Symbol
from pricedash.market.aggregator import Aggregator
from pricedash.market.selection import SelectionState
from tests.mocks.price_api import MockPriceClient


class TestProcess:
    """Tests for the pure filter step."""

    def test_keeps_enabled_sources_only(self, sample_response: dict[str, float | None]) -> None:
        """Test Binance/Coinbase enabled, Bybit in response but not enabled."""
        snapshot = Aggregator.process(
            sample_response,
            [Source.BINANCE, Source.COINBASE],
            Symbol.BTCUSDT,
        )

        assert snapshot.sources == (Source.BINANCE, Source.COINBASE)
        assert snapshot.as_dict() == {Source.BINANCE: 50000.12, Source.COINBASE: None}
        assert Source.BYBIT not in snapshot

    def test_null_kept_as_unavailable(self, sample_response: dict[str, float | None]) -> None:
        """Test null prices stay None and never become zero."""
        snapshot = Aggregator.process(sample_response, [Source.COINBASE], Symbol.BTCUSDT)

        quote = snapshot.get(Source.COINBASE)
        assert quote is not None
        assert quote.price is None
        assert not quote.is_available
        assert snapshot.numeric_prices() == {}

    def test_enabled_but_missing_is_absent(self, sample_response: dict[str, float | None]) -> None:
        """Test enabled sources missing from the response are left out."""
        snapshot = Aggregator.process(
            sample_response,
            [Source.BINANCE, Source.HUOBI],
            Symbol.BTCUSDT,
        )

        assert Source.HUOBI not in snapshot
        assert len(snapshot) == 1

    def test_keys_are_intersection(self) -> None:
        """Test snapshot keys equal enabled ∩ response keys."""
        response = {"Gateio": 1.0, "Bitfinex": 2.0, "Huobi": None, "Unknown": 3.0}
        enabled = {Source.GATEIO, Source.HUOBI, Source.BINANCE}

        snapshot = Aggregator.process(response, enabled, Symbol.DOGEUSDT, request_id=7)

        assert set(snapshot) == {Source.GATEIO, Source.HUOBI}
        assert snapshot.request_id == 7
        assert snapshot.symbol is Symbol.DOGEUSDT

    def test_to_dict(self, sample_response: dict[str, float | None]) -> None:
        """Test JSON-ready form uses source names."""
        snapshot = Aggregator.process(sample_response, list(Source), Symbol.BTCUSDT)

        data = snapshot.to_dict()

        assert data["symbol"] == "BTCUSDT"
        assert data["quotes"] == {"Binance": 50000.12, "Coinbase": None, "Bybit": 50010.0}


class TestFetch:
    """Tests for Aggregator.fetch against a mock client."""

    @pytest.mark.asyncio
    async def test_fetch_ok(self, mock_client: MockPriceClient) -> None:
        """Test success maps to FetchOk with the filtered snapshot."""
        selection = SelectionState(symbol=Symbol.ETHUSDT, enabled=[Source.BYBIT])
        aggregator = Aggregator(mock_client, selection)

        result = await aggregator.fetch(request_id=3)

        assert isinstance(result, FetchOk)
        assert result.is_ok
        assert result.request_id == 3
        assert result.snapshot.as_dict() == {Source.BYBIT: 50010.0}
        assert mock_client.calls == [Symbol.ETHUSDT]

    @pytest.mark.asyncio
    async def test_fetch_err(self, mock_client: MockPriceClient) -> None:
        """Test transport failure maps to FetchErr."""
        mock_client.queue_error(TransportError("boom", status=500))
        selection = SelectionState(enabled=[Source.BINANCE])
        aggregator = Aggregator(mock_client, selection)

        result = await aggregator.fetch(request_id=1)

        assert isinstance(result, FetchErr)
        assert not result.is_ok
        assert result.error.status == 500
        assert result.symbol is Symbol.BTCUSDT

    @pytest.mark.asyncio
    async def test_empty_selection_raises(
        self,
        mock_client: MockPriceClient,
        selection: SelectionState,
    ) -> None:
        """Test no request is issued with nothing enabled."""
        aggregator = Aggregator(mock_client, selection)

        with pytest.raises(EmptySelectionError):
            await aggregator.fetch()

        assert mock_client.call_count == 0

    @pytest.mark.asyncio
    async def test_selection_read_at_processing_time(self) -> None:
        """Test a toggle during the request applies to its snapshot."""
        client = MockPriceClient(latency=0.05)
        selection = SelectionState(enabled=[Source.BINANCE])
        aggregator = Aggregator(client, selection)

        task = asyncio.create_task(aggregator.fetch())
        await asyncio.sleep(0.01)
        selection.toggle_source(Source.COINBASE)
        result = await task

        assert isinstance(result, FetchOk)
        assert result.snapshot.sources == (Source.BINANCE, Source.COINBASE)

    @pytest.mark.asyncio
    async def test_symbol_read_at_call_time(self, async_price_source: AsyncMock) -> None:
        """Test the active symbol is passed to the client."""
        selection = SelectionState(symbol=Symbol.TONUSDT, enabled=[Source.BINANCE])
        aggregator = Aggregator(async_price_source, selection)

        result = await aggregator.fetch(request_id=9)

        async_price_source.get_prices.assert_awaited_once_with(Symbol.TONUSDT)
        assert isinstance(result, FetchOk)
        assert result.snapshot.symbol is Symbol.TONUSDT
        assert result.snapshot.captured_at_ms > 0
