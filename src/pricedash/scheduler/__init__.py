"""Fetch timing: interval timer, manual trigger and debounce gate."""

from pricedash.scheduler.debounce import Debouncer
from pricedash.scheduler.fetch import FetchScheduler


__all__ = [
    "Debouncer",
    "FetchScheduler",
]
