"""Load balancing over a fixed set of items."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from typing import Generic, TypeVar

T = TypeVar("T")


class RoundRobin(Generic[T]):
    """Thread-safe round-robin selection over a non-empty list of items."""

    def __init__(self, items: Iterable[T]) -> None:
        self._items = list(items)
        if not self._items:
            raise ValueError("no items passed")
        self._lock = threading.Lock()
        self._next = 0

    def next(self) -> T:
        """Return the next item, wrapping around after the last."""
        with self._lock:
            item = self._items[self._next]
            self._next = (self._next + 1) % len(self._items)
        return item