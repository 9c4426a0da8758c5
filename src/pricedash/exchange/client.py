"""
Async client for the price aggregation endpoint.

One pooled aiohttp session, orjson decoding, and a single error type
(TransportError) for everything that prevents a usable response.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import aiohttp
import orjson
from pydantic import ValidationError

from pricedash.config.constants import (
    DEFAULT_API_URL,
    DEFAULT_REQUEST_TIMEOUT,
    SYMBOL_QUERY_PARAM,
)
from pricedash.core.errors import TransportError
from pricedash.core.types import Symbol
from pricedash.exchange.models import PriceResponse


logger = logging.getLogger(__name__)


class PriceClient:
    """
    Async client for `GET <base_url>?symbol=<S>`.

    Features:
    - Single session with keep-alive
    - orjson for JSON decoding
    - Network, HTTP and payload failures all raise TransportError
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Full URL of the aggregation endpoint.
            timeout: Total timeout per request in seconds.
        """
        self._base_url = base_url
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=10,
                keepalive_timeout=30,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=self._timeout,
                headers={"Accept": "application/json"},
                json_serialize=lambda x: orjson.dumps(x).decode(),
            )
        return self._session

    async def close(self) -> None:
        """Close the client session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    @asynccontextmanager
    async def _request_context(self) -> AsyncIterator[aiohttp.ClientSession]:
        """Translate transport exceptions into TransportError."""
        session = await self._get_session()
        try:
            yield session
        except aiohttp.ClientError as e:
            raise TransportError(f"Network error: {e}") from e
        except asyncio.TimeoutError as e:
            raise TransportError("Request timed out") from e

    async def _handle_response(self, response: aiohttp.ClientResponse) -> Any:
        """Check status and decode the body."""
        body = await response.read()

        if response.status >= 400:
            snippet = body[:200].decode(errors="replace")
            raise TransportError(
                f"HTTP {response.status} from price endpoint: {snippet}",
                status=response.status,
            )

        try:
            return orjson.loads(body)
        except orjson.JSONDecodeError as e:
            raise TransportError(f"Invalid JSON response: {e}", status=response.status) from e

    async def get_prices(self, symbol: Symbol) -> PriceResponse:
        """
        Fetch the latest per-source prices for a symbol.

        Args:
            symbol: Catalog symbol to query.

        Returns:
            Parsed per-source prices.

        Raises:
            TransportError: On network, HTTP or payload failure.
        """
        params = {SYMBOL_QUERY_PARAM: Symbol.parse(symbol).value}

        async with self._request_context() as session:
            async with session.get(self._base_url, params=params) as response:
                data = await self._handle_response(response)

        try:
            prices = PriceResponse.model_validate(data)
        except ValidationError as e:
            raise TransportError(f"Unexpected payload shape: {e.error_count()} error(s)") from e

        logger.debug(f"Received {len(prices)} source prices for {params[SYMBOL_QUERY_PARAM]}")
        return prices

    async def __aenter__(self) -> "PriceClient":
        await self._get_session()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
