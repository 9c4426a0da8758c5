"""
Fetch scheduler: decides when a fetch happens, not what it fetches.

Timer ticks and manual requests both go through one debounce gate. An
empty selection turns a trigger into a no-op, both when the trigger
arrives and again when the debounced call fires.
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from pricedash.config.constants import DEFAULT_DEBOUNCE_MS, DEFAULT_FETCH_INTERVAL_MS
from pricedash.market.selection import SelectionState
from pricedash.scheduler.debounce import Debouncer


logger = logging.getLogger(__name__)


# Called with the trigger reason whenever a fetch is suppressed
SkipCallback = Callable[[str], None]

TRIGGER_TIMER = "timer"
TRIGGER_MANUAL = "manual"
TRIGGER_STARTUP = "startup"


class FetchScheduler:
    """
    Interval timer plus manual trigger, funnelled through a Debouncer.

    Lifecycle:
    - start(): launch the interval task
    - trigger()/fetch_now(): request a fetch
    - stop(): cancel the interval task and any pending debounced call;
      a fetch already running is left to finish
    """

    def __init__(
        self,
        job: Callable[[], Awaitable[None]],
        selection: SelectionState,
        interval: float = DEFAULT_FETCH_INTERVAL_MS / 1000,
        debounce: float = DEFAULT_DEBOUNCE_MS / 1000,
        on_skip: SkipCallback | None = None,
    ) -> None:
        """
        Initialize the scheduler.

        Args:
            job: Coroutine function performing one fetch.
            selection: Selection consulted by the empty-selection guard.
            interval: Timer period in seconds.
            debounce: Debounce window in seconds.
            on_skip: Notified when a trigger is suppressed.
        """
        if interval <= 0:
            raise ValueError(f"Fetch interval must be positive, got {interval}")

        self._job = job
        self._selection = selection
        self._interval = interval
        self._on_skip = on_skip
        self._gate = Debouncer(self._execute, wait=debounce, name="fetch")
        self._timer_task: asyncio.Task[None] | None = None
        self._running = False

        self._skipped = 0
        self._ticks = 0

    def start(self, fetch_immediately: bool = False) -> None:
        """
        Start the recurring timer.

        Args:
            fetch_immediately: Also trigger one fetch right away.

        Raises:
            RuntimeError: If the scheduler was stopped before.
        """
        if self._gate.is_closed:
            raise RuntimeError("Fetch scheduler cannot be restarted after stop()")
        if self._running:
            return

        self._running = True
        self._timer_task = asyncio.create_task(self._run_timer(), name="fetch-timer")
        logger.info(f"Fetch scheduler started (every {self._interval:g}s)")

        if fetch_immediately:
            self.trigger(TRIGGER_STARTUP)

    async def stop(self) -> None:
        """Cancel the timer and pending trigger. Idempotent."""
        self._gate.close()

        if self._timer_task is not None:
            self._timer_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._timer_task
            self._timer_task = None

        if self._running:
            self._running = False
            logger.info("Fetch scheduler stopped")

    async def _run_timer(self) -> None:
        while self._running:
            await asyncio.sleep(self._interval)
            self._ticks += 1
            self.trigger(TRIGGER_TIMER)

    def trigger(self, reason: str = TRIGGER_MANUAL) -> bool:
        """
        Request a fetch through the debounce gate.

        Returns:
            False if the request was suppressed (empty selection or stopped).
        """
        if self._gate.is_closed:
            logger.debug(f"Ignoring {reason} trigger: scheduler stopped")
            return False

        if self._selection.is_empty:
            self._skip(reason)
            return False

        self._gate.trigger(reason)
        return True

    def fetch_now(self) -> bool:
        """User-initiated fetch."""
        return self.trigger(TRIGGER_MANUAL)

    async def _execute(self, reason: str) -> None:
        # Selection may have been cleared during the quiet window
        if self._selection.is_empty:
            self._skip(reason)
            return

        logger.debug(f"Running fetch ({reason})")
        await self._job()

    def _skip(self, reason: str) -> None:
        self._skipped += 1
        logger.debug(f"Skipping {reason} fetch: no sources enabled")
        if self._on_skip is not None:
            self._on_skip(reason)

    async def wait_idle(self) -> None:
        """Wait for pending and running fetches to finish."""
        await self._gate.wait_idle()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def skipped_count(self) -> int:
        return self._skipped

    @property
    def tick_count(self) -> int:
        return self._ticks

    @property
    def gate(self) -> Debouncer:
        return self._gate
