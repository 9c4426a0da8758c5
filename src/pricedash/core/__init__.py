"""Core module containing domain types, errors, the event bus and the session."""

from pricedash.core.errors import (
    DashboardError,
    EmptySelectionError,
    InvalidSourceError,
    InvalidSymbolError,
    SessionClosedError,
    TransportError,
)
from pricedash.core.event_bus import Event, EventBus, EventType
from pricedash.core.types import (
    FetchErr,
    FetchOk,
    FetchResult,
    HistoryEntry,
    PriceQuote,
    ResponseOrdering,
    Snapshot,
    Source,
    Symbol,
)


__all__ = [
    "DashboardError",
    "EmptySelectionError",
    "Event",
    "EventBus",
    "EventType",
    "FetchErr",
    "FetchOk",
    "FetchResult",
    "HistoryEntry",
    "InvalidSourceError",
    "InvalidSymbolError",
    "PriceQuote",
    "ResponseOrdering",
    "SessionClosedError",
    "Snapshot",
    "Source",
    "Symbol",
    "TransportError",
]
