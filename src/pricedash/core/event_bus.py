"""
Internal event bus for state-change notification.

The session publishes every state change here; presentation adapters
(terminal reporter, WebSocket push) subscribe without holding a mutation
path back into the session.
"""

import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Generic, TypeVar

from pricedash.utils.time import get_timestamp_ms


logger = logging.getLogger(__name__)


class EventType(Enum):
    """Dashboard event types."""

    # Session lifecycle
    SESSION_STARTED = auto()
    SESSION_STOPPED = auto()

    # Selection
    SYMBOL_CHANGED = auto()
    SELECTION_CHANGED = auto()

    # Fetch outcome
    FETCH_SKIPPED = auto()
    FETCH_FAILED = auto()
    STALE_RESPONSE_DROPPED = auto()
    SNAPSHOT_UPDATED = auto()

    # History
    HISTORY_APPENDED = auto()
    HISTORY_RESET = auto()


T = TypeVar("T")


@dataclass
class Event(Generic[T]):
    """Event with typed payload."""

    type: EventType
    payload: T
    timestamp_ms: int = 0
    source: str = ""

    def __post_init__(self) -> None:
        if not self.timestamp_ms:
            self.timestamp_ms = get_timestamp_ms()


EventHandler = Callable[[Event[Any]], Awaitable[None]]
SyncEventHandler = Callable[[Event[Any]], None]


class EventBus:
    """
    Publish/subscribe bus with sync and async handlers.

    Handlers run in priority order (higher first). A failing handler is
    logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType, list[tuple[int, EventHandler]]] = defaultdict(list)
        self._sync_handlers: dict[EventType, list[tuple[int, SyncEventHandler]]] = defaultdict(list)
        self._paused = False

    def subscribe(
        self,
        event_type: EventType,
        handler: EventHandler,
        priority: int = 0,
    ) -> None:
        """
        Subscribe an async handler.

        Args:
            event_type: Event type to handle.
            handler: Coroutine function receiving the event.
            priority: Higher runs earlier.
        """
        self._handlers[event_type].append((priority, handler))
        self._handlers[event_type].sort(key=lambda x: x[0], reverse=True)

    def subscribe_sync(
        self,
        event_type: EventType,
        handler: SyncEventHandler,
        priority: int = 0,
    ) -> None:
        """Subscribe a plain function."""
        self._sync_handlers[event_type].append((priority, handler))
        self._sync_handlers[event_type].sort(key=lambda x: x[0], reverse=True)

    def unsubscribe(
        self,
        event_type: EventType,
        handler: EventHandler | SyncEventHandler,
    ) -> bool:
        """
        Remove a handler.

        Returns:
            True if the handler was registered.
        """
        for registry in (self._handlers, self._sync_handlers):
            entries: list[tuple[int, Any]] = registry[event_type]  # type: ignore[assignment]
            for i, (_, registered) in enumerate(entries):
                if registered is handler:
                    entries.pop(i)
                    return True
        return False

    async def publish(self, event: Event[Any]) -> None:
        """Deliver an event to sync handlers, then async handlers."""
        if self._paused:
            return

        self._deliver_sync(event)

        for _, handler in self._handlers[event.type]:
            try:
                await handler(event)
            except Exception as e:
                logger.error(f"Async handler error for {event.type.name}: {e}")

    def publish_sync(self, event: Event[Any]) -> None:
        """
        Deliver an event to sync handlers only.

        Used from synchronous user commands; async subscribers that need
        those changes observe them through the next async event.
        """
        if self._paused:
            return

        self._deliver_sync(event)

    def _deliver_sync(self, event: Event[Any]) -> None:
        for _, handler in self._sync_handlers[event.type]:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Sync handler error for {event.type.name}: {e}")

    def pause(self) -> None:
        """Pause event delivery."""
        self._paused = True

    def resume(self) -> None:
        """Resume event delivery."""
        self._paused = False

    def clear(self, event_type: EventType | None = None) -> None:
        """Drop handlers for one event type, or for all of them."""
        if event_type:
            self._handlers[event_type].clear()
            self._sync_handlers[event_type].clear()
        else:
            self._handlers.clear()
            self._sync_handlers.clear()

    def handler_count(self, event_type: EventType) -> int:
        """Number of handlers registered for an event type."""
        return len(self._handlers[event_type]) + len(self._sync_handlers[event_type])

    @property
    def is_paused(self) -> bool:
        return self._paused
