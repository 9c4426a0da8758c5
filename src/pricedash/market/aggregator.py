"""
Aggregator: one upstream call into one typed fetch result.

The filter step is a pure function so it can be exercised without I/O.
The enabled-source set is read when the response is processed, not when
the request is issued, so a toggle made while a request is in flight
applies to that request's snapshot.
"""

import logging
from collections.abc import Iterable, Mapping

from pricedash.core.errors import EmptySelectionError, TransportError
from pricedash.core.types import (
    FetchErr,
    FetchOk,
    FetchResult,
    PriceQuote,
    PriceSource,
    Snapshot,
    Source,
    Symbol,
)
from pricedash.market.selection import SelectionState
from pricedash.utils.time import get_timestamp_ms


logger = logging.getLogger(__name__)


class Aggregator:
    """
    Turns one price response into one Snapshot.

    Never retries; a failed call yields FetchErr and the caller decides
    what to keep on screen.
    """

    def __init__(self, client: PriceSource, selection: SelectionState) -> None:
        """
        Initialize the aggregator.

        Args:
            client: Source of raw per-source prices.
            selection: Selection read at call and processing time.
        """
        self._client = client
        self._selection = selection

    @staticmethod
    def process(
        response: Mapping[str, float | None],
        enabled: Iterable[Source],
        symbol: Symbol,
        request_id: int = 0,
        captured_at_ms: int = 0,
    ) -> Snapshot:
        """
        Filter a response down to the enabled sources.

        For each enabled source (catalog order) whose key is present in the
        response, its value, price or None, is copied. Enabled sources
        missing from the response are left out; sources in the response
        that are not enabled never appear.

        Args:
            response: Raw source-name -> price mapping.
            enabled: Sources enabled at processing time.
            symbol: Symbol the response belongs to.
            request_id: Sequence number of the originating request.
            captured_at_ms: Capture timestamp.

        Returns:
            Snapshot with keys exactly `enabled ∩ keys(response)`.
        """
        wanted = set(enabled)
        quotes: dict[Source, PriceQuote] = {}

        for source in Source:
            if source not in wanted or source.value not in response:
                continue
            quotes[source] = PriceQuote(source=source, price=response[source.value])

        return Snapshot(
            symbol=symbol,
            quotes=quotes,
            request_id=request_id,
            captured_at_ms=captured_at_ms,
        )

    async def fetch(self, request_id: int = 0) -> FetchResult:
        """
        Query the endpoint for the active symbol and build a snapshot.

        Args:
            request_id: Sequence number assigned by the caller.

        Returns:
            FetchOk with the snapshot, or FetchErr on transport failure.

        Raises:
            EmptySelectionError: If no source is enabled when called.
        """
        if self._selection.is_empty:
            raise EmptySelectionError("No sources enabled")

        symbol = self._selection.symbol

        try:
            response = await self._client.get_prices(symbol)
        except TransportError as e:
            logger.debug(f"Fetch #{request_id} for {symbol.value} failed: {e}")
            return FetchErr(request_id=request_id, symbol=symbol, error=e)

        snapshot = self.process(
            response.root,
            self._selection.enabled_sources,
            symbol,
            request_id=request_id,
            captured_at_ms=get_timestamp_ms(),
        )
        logger.debug(
            f"Fetch #{request_id} for {symbol.value}: "
            f"{len(snapshot)}/{len(response)} sources kept"
        )
        return FetchOk(snapshot=snapshot)
