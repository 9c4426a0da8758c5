"""
Pydantic models for aggregation endpoint responses.

The endpoint returns a flat JSON object mapping source names to a price
(number or numeric string) or null.
"""

import logging
import math
from collections.abc import Iterator
from typing import Any

from pydantic import RootModel, field_validator


logger = logging.getLogger(__name__)


def _coerce_price(source: str, value: Any) -> float | None:
    """Convert one raw value to a float, or None when it is not a usable price."""
    if value is None:
        return None
    if isinstance(value, bool):
        logger.debug(f"Ignoring boolean price for {source}: {value!r}")
        return None
    if isinstance(value, int | float):
        try:
            price = float(value)
        except OverflowError:
            logger.debug(f"Ignoring out-of-range price for {source}")
            return None
    elif isinstance(value, str):
        # float() accepts digit separators, which upstream never sends
        if "_" in value:
            logger.debug(f"Ignoring non-numeric price for {source}: {value!r}")
            return None
        try:
            price = float(value.strip())
        except ValueError:
            logger.debug(f"Ignoring non-numeric price for {source}: {value!r}")
            return None
    else:
        logger.debug(f"Ignoring unsupported price type for {source}: {type(value).__name__}")
        return None

    if not math.isfinite(price):
        return None
    return price


class PriceResponse(RootModel[dict[str, float | None]]):
    """
    Per-source prices for one symbol.

    Keys are upstream source names; values are floats, or None where the
    source is listed but has no quote. Sources missing from the mapping
    reported no data at all.
    """

    @field_validator("root", mode="before")
    @classmethod
    def coerce_prices(cls, value: Any) -> Any:
        """Turn numeric strings into floats and unusable values into None."""
        if not isinstance(value, dict):
            # Let pydantic reject it with a proper validation error
            return value
        return {str(key): _coerce_price(str(key), raw) for key, raw in value.items()}

    def __contains__(self, key: object) -> bool:
        return key in self.root

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, key: str) -> float | None:
        return self.root[key]

    def get(self, key: str) -> float | None:
        return self.root.get(key)
