"""
Unit tests for SelectionState.

Tests symbol and source commands, catalog validation and callbacks.
"""

import pytest

from pricedash.core.errors import InvalidSourceError, InvalidSymbolError
from pricedash.core.types import Source, Symbol
from pricedash.market.selection import SelectionState


class TestSelectionState:
    """Tests for SelectionState."""

    def test_initialization(self, selection: SelectionState) -> None:
        """Test defaults: BTCUSDT and nothing enabled."""
        assert selection.symbol is Symbol.BTCUSDT
        assert selection.enabled_sources == ()
        assert selection.is_empty
        assert len(selection) == 0

    def test_initial_sources_from_strings(self) -> None:
        """Test initial set accepts catalog names."""
        selection = SelectionState(symbol="ETHUSDT", enabled=["Bybit", Source.BINANCE])

        assert selection.symbol is Symbol.ETHUSDT
        assert selection.enabled_sources == (Source.BINANCE, Source.BYBIT)

    def test_set_symbol(self, selection: SelectionState) -> None:
        """Test replacing the active symbol."""
        result = selection.set_symbol("SOLUSDT")

        assert result is Symbol.SOLUSDT
        assert selection.symbol is Symbol.SOLUSDT

    def test_set_unknown_symbol_rejected(self, selection: SelectionState) -> None:
        """Test unknown symbols leave state untouched."""
        with pytest.raises(InvalidSymbolError):
            selection.set_symbol("FOOUSDT")

        assert selection.symbol is Symbol.BTCUSDT

    def test_toggle_source(self, selection: SelectionState) -> None:
        """Test toggling flips one flag and reports the new value."""
        assert selection.toggle_source(Source.BINANCE) is True
        assert selection.is_enabled("Binance")

        assert selection.toggle_source("Binance") is False
        assert not selection.is_enabled(Source.BINANCE)

    def test_double_toggle_is_identity(self, selection: SelectionState) -> None:
        """Test toggling twice restores the original set."""
        selection.toggle_source(Source.COINBASE)
        before = selection.enabled_sources

        selection.toggle_source(Source.HUOBI)
        selection.toggle_source(Source.HUOBI)

        assert selection.enabled_sources == before

    def test_toggle_unknown_source_rejected(self, selection: SelectionState) -> None:
        """Test unknown sources are rejected before any change."""
        selection.toggle_source(Source.BINANCE)

        with pytest.raises(InvalidSourceError):
            selection.toggle_source("Kraken")

        assert selection.enabled_sources == (Source.BINANCE,)

    def test_select_all_clear_all_then_toggle(self, selection: SelectionState) -> None:
        """Test select all, clear all, then one toggle leaves exactly that source."""
        selection.select_all()
        assert selection.enabled_sources == tuple(Source)

        selection.clear_all()
        assert selection.is_empty

        selection.toggle_source(Source.BINANCE)
        assert selection.enabled_sources == (Source.BINANCE,)

    def test_enabled_sources_catalog_order(self, selection: SelectionState) -> None:
        """Test enabled sources come back in catalog order, not toggle order."""
        selection.toggle_source(Source.BYBIT)
        selection.toggle_source(Source.COINGECKO)
        selection.toggle_source(Source.BINANCE)

        assert selection.enabled_sources == (Source.BINANCE, Source.COINGECKO, Source.BYBIT)

    def test_enable_disable_idempotent(self, selection: SelectionState) -> None:
        """Test enable/disable only change state when needed."""
        calls: list[SelectionState] = []
        selection.register_callback(calls.append)

        selection.enable(Source.GATEIO)
        selection.enable(Source.GATEIO)
        assert len(calls) == 1

        selection.disable(Source.GATEIO)
        selection.disable(Source.GATEIO)
        assert len(calls) == 2
        assert selection.is_empty

    def test_callback_registration(self, selection: SelectionState) -> None:
        """Test callbacks fire after each command with the updated state."""
        seen: list[tuple[Symbol, tuple[Source, ...]]] = []

        def callback(state: SelectionState) -> None:
            seen.append((state.symbol, state.enabled_sources))

        selection.register_callback(callback)
        selection.toggle_source(Source.BITFINEX)
        selection.set_symbol(Symbol.LINKUSDT)

        assert seen == [
            (Symbol.BTCUSDT, (Source.BITFINEX,)),
            (Symbol.LINKUSDT, (Source.BITFINEX,)),
        ]

    def test_callback_unregistration(self, selection: SelectionState) -> None:
        """Test unregistered callbacks are no longer called."""
        calls: list[SelectionState] = []
        selection.register_callback(calls.append)
        selection.unregister_callback(calls.append)

        selection.select_all()

        assert calls == []

    def test_repr(self, selection: SelectionState) -> None:
        """Test repr lists symbol and enabled sources."""
        selection.toggle_source(Source.COINBASE)

        assert repr(selection) == "SelectionState(symbol=BTCUSDT, enabled=[Coinbase])"
