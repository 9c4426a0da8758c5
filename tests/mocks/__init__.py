"""Mock implementations for testing."""

from tests.mocks.price_api import MockPriceClient


__all__ = [
    "MockPriceClient",
]
