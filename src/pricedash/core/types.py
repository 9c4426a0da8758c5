"""
Type definitions for the dashboard.

Catalog enums, quote/snapshot/history dataclasses, the typed fetch result
and the Protocol implemented by price clients. Dataclasses use slots=True
and are frozen, and their mappings are wrapped in read-only proxies, so
published state cannot be mutated by readers.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Protocol

from pricedash.core.errors import InvalidSourceError, InvalidSymbolError, TransportError


if TYPE_CHECKING:
    from pricedash.exchange.models import PriceResponse


# =============================================================================
# Catalogs
# =============================================================================


class Symbol(str, Enum):
    """Tradable instruments, in display order."""

    BTCUSDT = "BTCUSDT"
    ETHUSDT = "ETHUSDT"
    BNBUSDT = "BNBUSDT"
    XRPUSDT = "XRPUSDT"
    SOLUSDT = "SOLUSDT"
    DOGEUSDT = "DOGEUSDT"
    SHIBUSDT = "SHIBUSDT"
    LINKUSDT = "LINKUSDT"
    TONUSDT = "TONUSDT"

    @classmethod
    def parse(cls, value: "Symbol | str") -> "Symbol":
        """Resolve a catalog symbol, raising InvalidSymbolError for unknown values."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidSymbolError(value) from None


class Source(str, Enum):
    """Exchanges and data providers quoted by the aggregation endpoint."""

    BINANCE = "Binance"
    COINBASE = "Coinbase"
    COINMARKETCAP = "CoinMarketCap"
    COINGECKO = "CoinGecko"
    CRYPTOCOMPARE = "CryptoCompare"
    BITFINEX = "Bitfinex"
    HUOBI = "Huobi"
    GATEIO = "Gateio"
    BYBIT = "Bybit"

    @classmethod
    def parse(cls, value: "Source | str") -> "Source":
        """Resolve a catalog source, raising InvalidSourceError for unknown values."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidSourceError(value) from None


class ResponseOrdering(str, Enum):
    """How overlapping fetch completions are applied."""

    # Drop completions of requests older than the last applied one
    LATEST_REQUEST = "latest_request"
    # Whichever completion arrives last overwrites the snapshot
    LAST_WRITE_WINS = "last_write_wins"


# =============================================================================
# Market Data Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class PriceQuote:
    """
    A single source's quote.

    price is None when the source reported no quote. It is never
    replaced by zero.
    """

    source: Source
    price: float | None

    @property
    def is_available(self) -> bool:
        """Check if the quote carries a numeric price."""
        return self.price is not None


@dataclass(slots=True, frozen=True, eq=False)
class Snapshot:
    """
    Filtered quotes produced from one fetch response.

    Keys are the sources that were enabled when the response was processed,
    in catalog order.
    """

    symbol: Symbol
    quotes: Mapping[Source, PriceQuote]
    request_id: int = 0
    captured_at_ms: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "quotes", MappingProxyType(dict(self.quotes)))

    def __len__(self) -> int:
        return len(self.quotes)

    def __contains__(self, source: object) -> bool:
        return source in self.quotes

    def __iter__(self) -> Iterator[Source]:
        return iter(self.quotes)

    def get(self, source: Source) -> PriceQuote | None:
        """Get the quote for a source, or None if it is not in the snapshot."""
        return self.quotes.get(source)

    @property
    def sources(self) -> tuple[Source, ...]:
        """Sources present in the snapshot."""
        return tuple(self.quotes)

    def as_dict(self) -> dict[Source, float | None]:
        """Map each source to its price or None."""
        return {source: quote.price for source, quote in self.quotes.items()}

    def numeric_prices(self) -> dict[Source, float]:
        """Only the sources with a numeric price."""
        return {
            source: quote.price
            for source, quote in self.quotes.items()
            if quote.price is not None
        }

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation."""
        return {
            "symbol": self.symbol.value,
            "request_id": self.request_id,
            "captured_at_ms": self.captured_at_ms,
            "quotes": {source.value: price for source, price in self.as_dict().items()},
        }


@dataclass(slots=True, frozen=True)
class HistoryEntry:
    """
    One timestamped, symbol-tagged row of the price history.

    prices holds numeric quotes only; unavailable or absent sources are
    missing from the mapping and must be charted as gaps.
    """

    timestamp: str
    timestamp_ms: int
    symbol: Symbol
    prices: Mapping[Source, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "prices", MappingProxyType(dict(self.prices)))

    def to_record(self) -> dict[str, Any]:
        """Flatten to a chart row: timestamp, symbol and one key per source."""
        record: dict[str, Any] = {"timestamp": self.timestamp, "symbol": self.symbol.value}
        for source, price in self.prices.items():
            record[source.value] = price
        return record


# =============================================================================
# Fetch Results
# =============================================================================


@dataclass(slots=True, frozen=True)
class FetchOk:
    """Successful fetch carrying the new snapshot."""

    snapshot: Snapshot

    @property
    def request_id(self) -> int:
        return self.snapshot.request_id

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(slots=True, frozen=True)
class FetchErr:
    """Failed fetch; no snapshot was produced."""

    request_id: int
    symbol: Symbol
    error: TransportError

    @property
    def is_ok(self) -> bool:
        return False


FetchResult = FetchOk | FetchErr


# =============================================================================
# Protocols
# =============================================================================


class PriceSource(Protocol):
    """Anything that can return the raw per-source prices for a symbol."""

    async def get_prices(self, symbol: Symbol) -> "PriceResponse":
        ...
