"""
Trailing-edge debounce gate for coroutine functions.

A trigger (re)starts a quiet window. When the window closes with no
further trigger, the wrapped coroutine runs once with the arguments of
the last trigger. Runs that already started are never cancelled by new
triggers; the gate only serializes initiation.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any


logger = logging.getLogger(__name__)


class Debouncer:
    """
    Coalesce bursts of calls into one trailing execution.

    Example:
        >>> gate = Debouncer(fetch, wait=0.3)
        >>> gate.trigger()
        >>> gate.trigger()   # restarts the window; fetch runs once
    """

    def __init__(
        self,
        func: Callable[..., Awaitable[Any]],
        wait: float,
        name: str = "debounce",
    ) -> None:
        """
        Initialize the gate.

        Args:
            func: Coroutine function to run after the quiet window.
            wait: Quiet window in seconds.
            name: Label used in logs and task names.
        """
        if wait < 0:
            raise ValueError(f"Debounce window must be non-negative, got {wait}")

        self._func = func
        self._wait = wait
        self._name = name
        self._handle: asyncio.TimerHandle | None = None
        self._args: tuple[Any, ...] = ()
        self._kwargs: dict[str, Any] = {}
        self._in_flight: set[asyncio.Task[Any]] = set()
        self._closed = False

        self._triggers = 0
        self._executions = 0

    def trigger(self, *args: Any, **kwargs: Any) -> None:
        """
        Request an execution.

        Must be called from a running event loop. Arguments replace those of
        any earlier pending trigger.
        """
        if self._closed:
            logger.debug(f"{self._name}: trigger ignored, gate closed")
            return

        loop = asyncio.get_running_loop()
        self._triggers += 1
        self._args = args
        self._kwargs = kwargs

        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self._wait, self._fire)

    def _fire(self) -> None:
        self._handle = None
        if self._closed:
            return

        args, kwargs = self._args, self._kwargs
        self._args, self._kwargs = (), {}
        self._executions += 1

        task = asyncio.ensure_future(self._run(args, kwargs))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _run(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        try:
            await self._func(*args, **kwargs)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"{self._name}: debounced call failed: {e}")

    def cancel(self) -> None:
        """Drop the pending execution, if any. In-flight runs continue."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._args, self._kwargs = (), {}

    def close(self) -> None:
        """Cancel the pending execution and refuse further triggers."""
        self.cancel()
        self._closed = True

    async def wait_idle(self) -> None:
        """Wait until no execution is pending or running."""
        while self._handle is not None or self._in_flight:
            if self._in_flight:
                await asyncio.gather(*self._in_flight, return_exceptions=True)
            else:
                await asyncio.sleep(self._wait / 2 or 0.001)

    @property
    def pending(self) -> bool:
        """True while a trigger is waiting for its window to close."""
        return self._handle is not None

    @property
    def in_flight(self) -> int:
        """Number of executions currently running."""
        return len(self._in_flight)

    @property
    def trigger_count(self) -> int:
        return self._triggers

    @property
    def execution_count(self) -> int:
        return self._executions

    @property
    def coalesced_count(self) -> int:
        """Triggers absorbed into a later one."""
        pending = 1 if self._handle is not None else 0
        return self._triggers - self._executions - pending

    @property
    def is_closed(self) -> bool:
        return self._closed
