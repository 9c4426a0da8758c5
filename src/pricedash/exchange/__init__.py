"""Integration with the price aggregation endpoint."""

from pricedash.exchange.client import PriceClient
from pricedash.exchange.models import PriceResponse


__all__ = [
    "PriceClient",
    "PriceResponse",
]
