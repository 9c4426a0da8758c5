"""Dashboard module for the HTTP/WebSocket API."""

from pricedash.dashboard.server import create_app, main


__all__ = [
    "create_app",
    "main",
]
