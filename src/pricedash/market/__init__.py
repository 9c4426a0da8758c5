"""In-memory market state: selection, aggregation and history."""

from pricedash.market.aggregator import Aggregator
from pricedash.market.history import HistoryBuffer
from pricedash.market.selection import SelectionState


__all__ = [
    "Aggregator",
    "HistoryBuffer",
    "SelectionState",
]
