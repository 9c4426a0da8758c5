"""
FastAPI server for the price dashboard.

Exposes the user commands and read-only session state over HTTP, and
pushes state changes to browser clients over a WebSocket. The session
lives on app.state for the lifetime of the application.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import orjson
from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from pricedash import __version__
from pricedash.config.settings import Settings, get_settings
from pricedash.core.errors import (
    InvalidSourceError,
    InvalidSymbolError,
    SessionClosedError,
)
from pricedash.core.event_bus import Event, EventType
from pricedash.core.session import DashboardSession
from pricedash.core.types import PriceSource, Source, Symbol


logger = logging.getLogger(__name__)

# Events forwarded to WebSocket clients, with their message type
PUSHED_EVENTS: dict[EventType, str] = {
    EventType.SNAPSHOT_UPDATED: "snapshot",
    EventType.HISTORY_APPENDED: "history",
    EventType.FETCH_FAILED: "fetch_failed",
    EventType.STALE_RESPONSE_DROPPED: "stale_dropped",
}


def _event_data(event: Event[Any]) -> Any:
    """JSON-ready payload for an event."""
    payload = event.payload
    if hasattr(payload, "to_dict"):
        return payload.to_dict()
    if hasattr(payload, "to_record"):
        return payload.to_record()
    return payload


class ClientHub:
    """Connected WebSocket clients and broadcast."""

    def __init__(self) -> None:
        self._clients: list[WebSocket] = []

    def add(self, websocket: WebSocket) -> None:
        self._clients.append(websocket)

    def remove(self, websocket: WebSocket) -> None:
        if websocket in self._clients:
            self._clients.remove(websocket)

    @property
    def count(self) -> int:
        return len(self._clients)

    async def broadcast(self, message_type: str, data: Any) -> None:
        """Send one message to every client, dropping those that fail."""
        if not self._clients:
            return

        message = orjson.dumps({"type": message_type, "data": data}).decode()
        disconnected = []
        for client in self._clients:
            try:
                await client.send_text(message)
            except Exception as e:
                logger.debug(f"Dropping WebSocket client: {e}")
                disconnected.append(client)
        for client in disconnected:
            self.remove(client)

    async def on_event(self, event: Event[Any]) -> None:
        """Event bus handler forwarding pushed events."""
        message_type = PUSHED_EVENTS.get(event.type)
        if message_type:
            await self.broadcast(message_type, _event_data(event))


def create_app(
    settings: Settings | None = None,
    client: PriceSource | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings for the session (defaults to get_settings()).
        client: Price source override, mainly for tests.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        session = DashboardSession(settings=settings or get_settings(), client=client)
        hub = ClientHub()
        for event_type in PUSHED_EVENTS:
            session.event_bus.subscribe(event_type, hub.on_event)

        app.state.session = session
        app.state.hub = hub
        await session.start()
        try:
            yield
        finally:
            await session.stop()

    app = FastAPI(title="Price Dashboard", version=__version__, lifespan=lifespan)

    app.add_exception_handler(InvalidSymbolError, _bad_request)
    app.add_exception_handler(InvalidSourceError, _bad_request)
    app.add_exception_handler(SessionClosedError, _conflict)

    app.get("/api/catalog")(get_catalog)
    app.get("/api/state")(get_state)
    app.get("/api/history")(get_history)
    app.get("/api/metrics")(get_metrics)
    app.post("/api/symbol")(set_symbol)
    app.post("/api/sources/select-all")(select_all)
    app.post("/api/sources/clear-all")(clear_all)
    app.post("/api/sources/{source}/toggle")(toggle_source)
    app.post("/api/fetch")(fetch_now)
    app.post("/api/history/reset")(reset_history)
    app.websocket("/ws")(websocket_endpoint)
    return app


async def _bad_request(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


async def _conflict(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": str(exc)})


def _session(request: Request) -> DashboardSession:
    return request.app.state.session  # type: ignore[no-any-return]


async def _broadcast_selection(request: Request) -> dict[str, Any]:
    session = _session(request)
    data = {
        "symbol": session.symbol.value,
        "enabled_sources": [s.value for s in session.enabled_sources],
    }
    await request.app.state.hub.broadcast("selection", data)
    return data


# =============================================================================
# Read Endpoints
# =============================================================================


async def get_catalog() -> dict[str, Any]:
    return {
        "symbols": [s.value for s in Symbol],
        "sources": [s.value for s in Source],
    }


async def get_state(request: Request) -> dict[str, Any]:
    return _session(request).view().to_dict()


async def get_history(request: Request) -> dict[str, Any]:
    session = _session(request)
    return {
        "capacity": session.history_capacity,
        "fields": [s.value for s in session.history_fields()],
        "entries": session.history_records(),
    }


async def get_metrics(request: Request) -> dict[str, Any]:
    return _session(request).metrics.to_dict()


# =============================================================================
# Command Endpoints
# =============================================================================


async def set_symbol(request: Request, symbol: str) -> dict[str, Any]:
    _session(request).set_symbol(symbol)
    return await _broadcast_selection(request)


async def toggle_source(request: Request, source: str) -> dict[str, Any]:
    enabled = _session(request).toggle_source(source)
    data = await _broadcast_selection(request)
    return {"source": Source.parse(source).value, "enabled": enabled, **data}


async def select_all(request: Request) -> dict[str, Any]:
    _session(request).select_all()
    return await _broadcast_selection(request)


async def clear_all(request: Request) -> dict[str, Any]:
    _session(request).clear_all()
    return await _broadcast_selection(request)


async def fetch_now(request: Request) -> dict[str, Any]:
    if _session(request).fetch_now():
        return {"status": "scheduled"}
    return {"status": "skipped", "reason": "empty_selection"}


async def reset_history(request: Request) -> dict[str, Any]:
    _session(request).reset_history()
    await request.app.state.hub.broadcast("history_reset", None)
    return {"status": "reset"}


# =============================================================================
# WebSocket
# =============================================================================


async def websocket_endpoint(websocket: WebSocket) -> None:
    hub: ClientHub = websocket.app.state.hub
    session: DashboardSession = websocket.app.state.session

    await websocket.accept()
    hub.add(websocket)
    await websocket.send_text(
        orjson.dumps({"type": "init", "data": session.view().to_dict()}).decode()
    )

    try:
        while True:
            # Clients only listen; incoming text is ignored
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        hub.remove(websocket)


app = create_app()


def main() -> None:
    import uvicorn

    from pricedash.telemetry.logger import setup_logging

    settings = get_settings()
    async_logger = setup_logging(settings.log_level, settings.log_file)

    print(
        f"""
╔═══════════════════════════════════════════════════════════════╗
║              PRICE DASHBOARD - API SERVER                     ║
╚═══════════════════════════════════════════════════════════════╝

API:      http://localhost:{settings.server_port}/api/state
Upstream: {settings.api_url}
Press Ctrl+C to stop.
    """
    )
    try:
        uvicorn.run(
            create_app(settings),
            host=settings.server_host,
            port=settings.server_port,
            log_level="warning",
        )
    finally:
        async_logger.stop()


if __name__ == "__main__":
    main()
