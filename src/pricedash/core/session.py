"""
Dashboard session: the explicit owner of all dashboard state.

Created when a dashboard opens and stopped when it closes. It wires the
selection, scheduler, aggregator and history together, and is the single
writer of the current snapshot and the history buffer.
"""

import logging
from dataclasses import dataclass
from typing import Any

from pricedash.config.settings import Settings, get_settings
from pricedash.core.errors import SessionClosedError
from pricedash.core.event_bus import Event, EventBus, EventType
from pricedash.core.types import (
    FetchErr,
    FetchResult,
    HistoryEntry,
    PriceSource,
    ResponseOrdering,
    Snapshot,
    Source,
    Symbol,
)
from pricedash.exchange.client import PriceClient
from pricedash.market.aggregator import Aggregator
from pricedash.market.history import HistoryBuffer
from pricedash.market.selection import SelectionState
from pricedash.scheduler.fetch import FetchScheduler
from pricedash.telemetry.metrics import (
    FETCH_LATENCY,
    FETCHES_FAILED,
    FETCHES_SKIPPED,
    FETCHES_STARTED,
    FETCHES_SUCCEEDED,
    LATE_RESPONSES_IGNORED,
    STALE_RESPONSES_DROPPED,
    MetricsCollector,
)
from pricedash.utils.time import LatencyTimer


logger = logging.getLogger(__name__)

EVENT_SOURCE = "session"


@dataclass(slots=True, frozen=True)
class DashboardView:
    """Read-only picture of the session for presentation adapters."""

    symbol: Symbol
    enabled_sources: tuple[Source, ...]
    snapshot: Snapshot | None
    history: tuple[HistoryEntry, ...]
    running: bool
    last_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol.value,
            "enabled_sources": [s.value for s in self.enabled_sources],
            "snapshot": self.snapshot.to_dict() if self.snapshot else None,
            "history": [entry.to_record() for entry in self.history],
            "running": self.running,
            "last_error": self.last_error,
        }


class DashboardSession:
    """
    Owns the state of one dashboard session.

    Manages:
    - Selection commands (symbol, sources)
    - Scheduler lifecycle (interval timer, manual fetch)
    - Applying fetch results to the snapshot and history
    - Publishing every state change on the event bus

    Transport failures leave the last snapshot and history untouched.
    Completions arriving after stop() are ignored.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: PriceSource | None = None,
        event_bus: EventBus | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        """
        Initialize the session.

        Args:
            settings: Dashboard settings (defaults to get_settings()).
            client: Price source; a PriceClient owned by the session is
                created from settings when omitted.
            event_bus: Bus receiving state-change events.
            metrics: Metrics collector.
        """
        self._settings = settings or get_settings()
        self._event_bus = event_bus or EventBus()
        self._metrics = metrics or MetricsCollector()

        self._owned_client: PriceClient | None = None
        if client is None:
            self._owned_client = PriceClient(
                base_url=self._settings.api_url,
                timeout=self._settings.request_timeout,
            )
            client = self._owned_client
        self._client: PriceSource = client

        self._selection = SelectionState(
            symbol=self._settings.default_symbol,
            enabled=self._settings.initial_sources,
        )
        self._selection.register_callback(self._on_selection_changed)
        self._history = HistoryBuffer(capacity=self._settings.history_capacity)
        self._aggregator = Aggregator(self._client, self._selection)
        self._scheduler = FetchScheduler(
            job=self._run_fetch,
            selection=self._selection,
            interval=self._settings.fetch_interval_seconds,
            debounce=self._settings.debounce_seconds,
            on_skip=self._on_fetch_skipped,
        )

        self._snapshot: Snapshot | None = None
        self._last_error: str | None = None
        self._next_request_id = 0
        self._last_applied_id = 0
        self._running = False
        self._closed = False

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Start the fetch scheduler."""
        if self._closed:
            raise SessionClosedError("Session has been stopped")
        if self._running:
            return

        self._running = True
        self._scheduler.start(fetch_immediately=self._settings.fetch_on_start)
        logger.info(
            f"Session started: {self._selection.symbol.value}, "
            f"{len(self._selection)} source(s) enabled"
        )
        await self._event_bus.publish(
            Event(EventType.SESSION_STARTED, self.view(), source=EVENT_SOURCE)
        )

    async def stop(self) -> None:
        """
        Stop the scheduler and release the owned client.

        A fetch still running is not awaited; its completion is ignored.
        """
        if self._closed:
            return

        self._closed = True
        self._running = False
        await self._scheduler.stop()

        if self._owned_client is not None:
            await self._owned_client.close()

        logger.info("Session stopped")
        await self._event_bus.publish(
            Event(EventType.SESSION_STOPPED, self.view(), source=EVENT_SOURCE)
        )

    async def __aenter__(self) -> "DashboardSession":
        await self.start()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.stop()

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError("Session has been stopped")

    # =========================================================================
    # User Commands
    # =========================================================================

    def set_symbol(self, symbol: Symbol | str) -> Symbol:
        """
        Change the active symbol. History is kept.

        Raises:
            InvalidSymbolError: For symbols outside the catalog.
            SessionClosedError: After stop().
        """
        self._ensure_open()
        previous = self._selection.symbol
        current = self._selection.set_symbol(symbol)

        if current is not previous:
            logger.info(f"Symbol changed: {previous.value} -> {current.value}")
            self._event_bus.publish_sync(
                Event(
                    EventType.SYMBOL_CHANGED,
                    {"previous": previous, "symbol": current},
                    source=EVENT_SOURCE,
                )
            )
        return current

    def toggle_source(self, source: Source | str) -> bool:
        """
        Flip one source on or off.

        Returns:
            Whether the source is now enabled.
        """
        self._ensure_open()
        return self._selection.toggle_source(source)

    def select_all(self) -> None:
        self._ensure_open()
        self._selection.select_all()

    def clear_all(self) -> None:
        self._ensure_open()
        self._selection.clear_all()

    def fetch_now(self) -> bool:
        """
        Request an immediate (debounced) fetch.

        Returns:
            False if suppressed because no source is enabled.
        """
        self._ensure_open()
        return self._scheduler.fetch_now()

    def reset_history(self) -> None:
        """Explicitly discard the price history."""
        self._ensure_open()
        self._history.clear()
        logger.info("History reset")
        self._event_bus.publish_sync(Event(EventType.HISTORY_RESET, None, source=EVENT_SOURCE))

    # =========================================================================
    # Fetch Pipeline
    # =========================================================================

    async def _run_fetch(self) -> None:
        """Scheduled job: one fetch, then apply its result."""
        self._next_request_id += 1
        request_id = self._next_request_id
        self._metrics.increment_counter(FETCHES_STARTED)

        with LatencyTimer() as timer:
            result = await self._aggregator.fetch(request_id)
        self._metrics.record_latency(FETCH_LATENCY, timer.elapsed_ms)

        await self._apply_result(result)

    async def _apply_result(self, result: FetchResult) -> None:
        """Single writer of snapshot and history."""
        if self._closed:
            self._metrics.increment_counter(LATE_RESPONSES_IGNORED)
            logger.debug(f"Ignoring fetch #{result.request_id}: session stopped")
            return

        if isinstance(result, FetchErr):
            self._metrics.increment_counter(FETCHES_FAILED)
            if self._is_stale(result.request_id):
                logger.debug(
                    f"Fetch #{result.request_id} failed after #{self._last_applied_id} "
                    f"was applied; not reporting it"
                )
                return

            self._last_error = str(result.error)
            logger.warning(
                f"Fetch #{result.request_id} for {result.symbol.value} failed: "
                f"{result.error}; keeping last snapshot"
            )
            await self._event_bus.publish(
                Event(
                    EventType.FETCH_FAILED,
                    {
                        "request_id": result.request_id,
                        "symbol": result.symbol,
                        "error": str(result.error),
                        "status": result.error.status,
                    },
                    source=EVENT_SOURCE,
                )
            )
            return

        snapshot = result.snapshot
        if self._is_stale(snapshot.request_id):
            self._metrics.increment_counter(STALE_RESPONSES_DROPPED)
            logger.info(
                f"Dropping stale fetch #{snapshot.request_id} "
                f"(#{self._last_applied_id} already applied)"
            )
            await self._event_bus.publish(
                Event(EventType.STALE_RESPONSE_DROPPED, snapshot, source=EVENT_SOURCE)
            )
            return

        self._last_applied_id = max(self._last_applied_id, snapshot.request_id)
        self._snapshot = snapshot
        self._last_error = None
        entry = self._history.append(snapshot, snapshot.symbol)
        self._metrics.increment_counter(FETCHES_SUCCEEDED)

        logger.debug(
            f"Applied fetch #{snapshot.request_id}: {len(snapshot)} quote(s), "
            f"{len(entry.prices)} numeric, history {len(self._history)}/{self._history.capacity}"
        )
        await self._event_bus.publish(
            Event(EventType.SNAPSHOT_UPDATED, snapshot, source=EVENT_SOURCE)
        )
        await self._event_bus.publish(
            Event(EventType.HISTORY_APPENDED, entry, source=EVENT_SOURCE)
        )

    def _is_stale(self, request_id: int) -> bool:
        """True if a newer request was already applied under LATEST_REQUEST."""
        return (
            self._settings.response_ordering is ResponseOrdering.LATEST_REQUEST
            and request_id < self._last_applied_id
        )

    def _on_fetch_skipped(self, reason: str) -> None:
        self._metrics.increment_counter(FETCHES_SKIPPED)
        self._event_bus.publish_sync(
            Event(EventType.FETCH_SKIPPED, {"reason": reason}, source=EVENT_SOURCE)
        )

    def _on_selection_changed(self, selection: SelectionState) -> None:
        self._event_bus.publish_sync(
            Event(
                EventType.SELECTION_CHANGED,
                {"symbol": selection.symbol, "enabled_sources": selection.enabled_sources},
                source=EVENT_SOURCE,
            )
        )

    async def wait_idle(self) -> None:
        """Wait until no fetch is pending or running."""
        await self._scheduler.wait_idle()

    # =========================================================================
    # Read Access
    # =========================================================================

    def view(self) -> DashboardView:
        """Immutable view of the current state."""
        return DashboardView(
            symbol=self._selection.symbol,
            enabled_sources=self._selection.enabled_sources,
            snapshot=self._snapshot,
            history=self._history.entries(),
            running=self._running,
            last_error=self._last_error,
        )

    @property
    def symbol(self) -> Symbol:
        return self._selection.symbol

    @property
    def enabled_sources(self) -> tuple[Source, ...]:
        return self._selection.enabled_sources

    @property
    def snapshot(self) -> Snapshot | None:
        """Latest applied snapshot, or None before the first success."""
        return self._snapshot

    @property
    def history(self) -> tuple[HistoryEntry, ...]:
        return self._history.entries()

    def history_fields(self) -> tuple[Source, ...]:
        return self._history.fields()

    def history_records(self) -> list[dict[str, Any]]:
        return self._history.to_records()

    @property
    def history_capacity(self) -> int:
        return self._history.capacity

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    @property
    def scheduler(self) -> FetchScheduler:
        return self._scheduler

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_closed(self) -> bool:
        return self._closed
