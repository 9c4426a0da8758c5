"""Exception hierarchy for the dashboard."""


class DashboardError(Exception):
    """Base exception for dashboard errors."""


class TransportError(DashboardError):
    """The aggregation endpoint could not be reached or returned unusable data."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class EmptySelectionError(DashboardError):
    """A fetch was attempted with no enabled sources."""


class InvalidSymbolError(DashboardError, ValueError):
    """A command referenced a symbol outside the catalog."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Unknown symbol: {value!r}")
        self.value = value


class InvalidSourceError(DashboardError, ValueError):
    """A command referenced a source outside the catalog."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Unknown source: {value!r}")
        self.value = value


class SessionClosedError(DashboardError):
    """A command was issued to a session that has been stopped."""
