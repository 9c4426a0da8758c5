"""
Selection state: the active symbol and the set of enabled sources.

Pure data mutated only by user commands. Readers get immutable views;
listeners registered with `register_callback` are notified after every
change.
"""

from collections.abc import Callable, Iterable

from pricedash.core.types import Source, Symbol


# Type alias for change callbacks
SelectionCallback = Callable[["SelectionState"], None]


class SelectionState:
    """
    Active symbol plus one enabled flag per catalog source.

    All sources start disabled unless an initial set is given. Unknown
    symbols or sources are rejected before any state changes.
    """

    __slots__ = ("_symbol", "_enabled", "_callbacks")

    def __init__(
        self,
        symbol: Symbol | str = Symbol.BTCUSDT,
        enabled: Iterable[Source | str] = (),
    ) -> None:
        """
        Initialize selection.

        Args:
            symbol: Initially active symbol.
            enabled: Sources enabled initially.
        """
        self._symbol = Symbol.parse(symbol)
        self._enabled: set[Source] = {Source.parse(s) for s in enabled}
        self._callbacks: list[SelectionCallback] = []

    def register_callback(self, callback: SelectionCallback) -> None:
        """Register a function called with this selection after each change."""
        self._callbacks.append(callback)

    def unregister_callback(self, callback: SelectionCallback) -> None:
        """Unregister a previously registered callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify(self) -> None:
        for callback in self._callbacks:
            callback(self)

    # =========================================================================
    # Commands
    # =========================================================================

    def set_symbol(self, symbol: Symbol | str) -> Symbol:
        """
        Replace the active symbol.

        Raises:
            InvalidSymbolError: If symbol is not in the catalog.
        """
        self._symbol = Symbol.parse(symbol)
        self._notify()
        return self._symbol

    def toggle_source(self, source: Source | str) -> bool:
        """
        Flip one source's enabled flag.

        Returns:
            The new flag.

        Raises:
            InvalidSourceError: If source is not in the catalog.
        """
        resolved = Source.parse(source)
        if resolved in self._enabled:
            self._enabled.discard(resolved)
        else:
            self._enabled.add(resolved)
        self._notify()
        return resolved in self._enabled

    def enable(self, source: Source | str) -> None:
        """Enable one source; no-op if already enabled."""
        resolved = Source.parse(source)
        if resolved not in self._enabled:
            self._enabled.add(resolved)
            self._notify()

    def disable(self, source: Source | str) -> None:
        """Disable one source; no-op if already disabled."""
        resolved = Source.parse(source)
        if resolved in self._enabled:
            self._enabled.discard(resolved)
            self._notify()

    def select_all(self) -> None:
        """Enable every catalog source."""
        self._enabled = set(Source)
        self._notify()

    def clear_all(self) -> None:
        """Disable every catalog source."""
        self._enabled = set()
        self._notify()

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def symbol(self) -> Symbol:
        return self._symbol

    @property
    def enabled_sources(self) -> tuple[Source, ...]:
        """Enabled sources in catalog order."""
        return tuple(s for s in Source if s in self._enabled)

    def is_enabled(self, source: Source | str) -> bool:
        return Source.parse(source) in self._enabled

    @property
    def is_empty(self) -> bool:
        """True when no source is enabled."""
        return not self._enabled

    def __len__(self) -> int:
        return len(self._enabled)

    def __repr__(self) -> str:
        names = ",".join(s.value for s in self.enabled_sources)
        return f"SelectionState(symbol={self._symbol.value}, enabled=[{names}])"
