"""
Terminal reporter for a dashboard session.

Renders a boxed panel with the active symbol, the current price table,
history fill and fetch statistics. Reads the session only through its
immutable view.
"""

import asyncio
import sys
from datetime import timedelta
from typing import TextIO

from pricedash import __version__
from pricedash.config.constants import PRICE_DISPLAY_PRECISION, UNAVAILABLE_LABEL
from pricedash.core.session import DashboardSession, DashboardView
from pricedash.core.types import PriceQuote
from pricedash.telemetry.metrics import FETCH_LATENCY
from pricedash.utils.time import format_duration_ms


def format_price(quote: PriceQuote | None) -> str:
    """'$50,000.12' for numeric quotes, 'N/A' otherwise."""
    if quote is None or quote.price is None:
        return UNAVAILABLE_LABEL
    return f"${quote.price:,.{PRICE_DISPLAY_PRECISION}f}"


class CLIReporter:
    """
    Live terminal panel.

    Redraws the whole panel on every refresh; use render() directly when
    writing to something other than a terminal.
    """

    # Box drawing characters
    BOX_TL = "\u2554"  # ╔
    BOX_TR = "\u2557"  # ╗
    BOX_BL = "\u255a"  # ╚
    BOX_BR = "\u255d"  # ╝
    BOX_H = "\u2550"  # ═
    BOX_V = "\u2551"  # ║
    BOX_LT = "\u2560"  # ╠
    BOX_RT = "\u2563"  # ╣
    THIN_V = "\u2502"  # │

    def __init__(
        self,
        session: DashboardSession,
        width: int = 64,
        output: TextIO | None = None,
    ) -> None:
        """
        Initialize the reporter.

        Args:
            session: Session to display.
            width: Panel width in characters.
            output: Output stream (default: stdout).
        """
        self._session = session
        self._width = width
        self._output = output or sys.stdout
        self._running = False
        self._task: asyncio.Task[None] | None = None

    def _format_uptime(self, seconds: float) -> str:
        total = int(timedelta(seconds=int(seconds)).total_seconds())
        hours, remainder = divmod(total, 3600)
        minutes, secs = divmod(remainder, 60)
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"

    def _line(self, content: str) -> str:
        inner = self._width - 2
        return f"{self.BOX_V}{content.ljust(inner)[:inner]}{self.BOX_V}"

    def _divider(self) -> str:
        return f"{self.BOX_LT}{self.BOX_H * (self._width - 2)}{self.BOX_RT}"

    def _price_rows(self, view: DashboardView) -> list[str]:
        if view.snapshot is None or len(view.snapshot) == 0:
            return ["  No prices yet"]

        rows = [f"  {'Exchange':<18}{self.THIN_V} {'Price (USD)':>16}"]
        for source in view.snapshot:
            price = format_price(view.snapshot.get(source))
            rows.append(f"  {source.value:<18}{self.THIN_V} {price:>16}")
        return rows

    def render(self) -> str:
        """
        Render the panel.

        Returns:
            Panel text without trailing newline.
        """
        view = self._session.view()
        metrics = self._session.metrics
        stats = metrics.fetch_stats
        latency = metrics.get_latency_stats(FETCH_LATENCY)

        lines = [f"{self.BOX_TL}{self.BOX_H * (self._width - 2)}{self.BOX_TR}"]
        lines.append(self._line(f"  PRICE DASHBOARD v{__version__} | {view.symbol.value}"))
        lines.append(self._divider())

        enabled = ", ".join(s.value for s in view.enabled_sources) or "none"
        lines.append(self._line(f"  Sources: {enabled}"))
        uptime = self._format_uptime(metrics.uptime_seconds)
        lines.append(self._line(f"  Uptime: {uptime}  |  {'RUNNING' if view.running else 'STOPPED'}"))
        lines.append(self._divider())

        for row in self._price_rows(view):
            lines.append(self._line(row))
        lines.append(self._divider())

        capacity = self._session.history_capacity
        last = view.history[-1].timestamp if view.history else "---"
        lines.append(self._line(f"  History: {len(view.history)}/{capacity}  |  Last: {last}"))

        avg = format_duration_ms(latency.avg_ms) if latency.count else "---"
        lines.append(
            self._line(
                f"  Fetches OK: {stats.succeeded}  Failed: {stats.failed}  "
                f"Skipped: {stats.skipped}  Avg: {avg}"
            )
        )
        if view.last_error:
            lines.append(self._line(f"  Last error: {view.last_error}"))

        lines.append(f"{self.BOX_BL}{self.BOX_H * (self._width - 2)}{self.BOX_BR}")
        return "\n".join(lines)

    def display(self) -> None:
        """Clear the screen and draw the panel once."""
        self._output.write("\033[2J\033[H")
        self._output.write(self.render())
        self._output.write("\n")
        self._output.flush()

    async def run(self, interval: float = 1.0) -> None:
        """Redraw every `interval` seconds until stopped."""
        self._running = True
        while self._running:
            self.display()
            await asyncio.sleep(interval)

    def start(self, interval: float = 1.0) -> asyncio.Task[None]:
        """Start redrawing in a background task."""
        self._task = asyncio.create_task(self.run(interval))
        return self._task

    def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            self._task = None

    def status_line(self) -> str:
        """One-line summary for logs."""
        view = self._session.view()
        stats = self._session.metrics.fetch_stats
        prices = view.snapshot.numeric_prices() if view.snapshot else {}
        quoted = f"{len(prices)}/{len(view.enabled_sources)}"
        return (
            f"{view.symbol.value} | quoted {quoted} | "
            f"history {len(view.history)} | ok {stats.succeeded} fail {stats.failed}"
        )
