"""
Rolling price history for charting.

A count-bounded FIFO of history entries. Entries are evicted by count,
never by age, and the buffer is not cleared when the symbol changes:
every entry carries the symbol it was captured for.
"""

from collections import deque
from collections.abc import Callable, Iterator
from typing import Any

from pricedash.config.constants import DEFAULT_HISTORY_CAPACITY
from pricedash.core.types import HistoryEntry, Snapshot, Source, Symbol
from pricedash.utils.time import format_time_label, get_timestamp_ms


class HistoryBuffer:
    """
    Fixed-capacity, insertion-ordered sequence of HistoryEntry.

    Invariant: len(buffer) <= capacity after every append.
    """

    __slots__ = ("_entries", "_capacity", "_clock", "_total_appended")

    def __init__(
        self,
        capacity: int = DEFAULT_HISTORY_CAPACITY,
        clock: Callable[[], int] = get_timestamp_ms,
    ) -> None:
        """
        Initialize an empty buffer.

        Args:
            capacity: Maximum number of entries kept.
            clock: Returns the current Unix time in milliseconds.
        """
        if capacity < 1:
            raise ValueError(f"History capacity must be positive, got {capacity}")

        self._capacity = capacity
        self._entries: deque[HistoryEntry] = deque(maxlen=capacity)
        self._clock = clock
        self._total_appended = 0

    def append(self, snapshot: Snapshot, symbol: Symbol) -> HistoryEntry:
        """
        Record a snapshot, evicting the oldest entry if the buffer is full.

        Only numeric quotes become fields of the entry; unavailable quotes
        are left out rather than zero-filled.

        Args:
            snapshot: Snapshot to record.
            symbol: Symbol the snapshot was captured for.

        Returns:
            The appended entry.
        """
        now_ms = self._clock()
        entry = HistoryEntry(
            timestamp=format_time_label(now_ms),
            timestamp_ms=now_ms,
            symbol=symbol,
            prices=snapshot.numeric_prices(),
        )
        # deque(maxlen) drops from the left on overflow
        self._entries.append(entry)
        self._total_appended += 1
        return entry

    def clear(self) -> None:
        """Remove every entry."""
        self._entries.clear()

    def entries(self) -> tuple[HistoryEntry, ...]:
        """All entries, oldest first."""
        return tuple(self._entries)

    @property
    def latest(self) -> HistoryEntry | None:
        return self._entries[-1] if self._entries else None

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def total_appended(self) -> int:
        """Appends since creation, including evicted entries."""
        return self._total_appended

    @property
    def is_full(self) -> bool:
        return len(self._entries) == self._capacity

    def fields(self) -> tuple[Source, ...]:
        """Sources that have a numeric value in at least one entry, catalog order."""
        seen = {source for entry in self._entries for source in entry.prices}
        return tuple(s for s in Source if s in seen)

    def series(self, source: Source) -> list[tuple[str, float | None]]:
        """
        One chart line: (timestamp label, price) per entry.

        Entries without a value for the source yield None so the chart
        shows a gap.
        """
        return [(entry.timestamp, entry.prices.get(source)) for entry in self._entries]

    def to_records(self) -> list[dict[str, Any]]:
        """Flattened chart rows, oldest first."""
        return [entry.to_record() for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(tuple(self._entries))
