"""Fixed-capacity, oldest-first eviction buffer for stamped readings."""

from __future__ import annotations

from collections import deque
from typing import Deque, Generic, Iterator, Optional, Tuple, TypeVar

HISTORY_CAPACITY = 100
RECENT_WINDOW = 20

T = TypeVar("T")


class BoundedHistory(Generic[T]):
    """Insertion-ordered buffer that drops its oldest entry once full.

    Eviction is a property of the underlying ``deque(maxlen=capacity)``, so the
    length bound holds after every ``append`` without separate trimming.
    Existing entries are never reordered.
    """

    def __init__(self, capacity: int = HISTORY_CAPACITY) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ValueError(f"History capacity must be a positive integer, got {capacity!r}.")
        self.capacity = capacity
        self._items: Deque[T] = deque(maxlen=capacity)

    def append(self, item: T) -> Optional[T]:
        """Add ``item`` and return the entry evicted to make room, if any."""
        evicted: Optional[T] = None
        if len(self._items) == self.capacity:
            evicted = self._items[0]
        self._items.append(item)
        return evicted

    def recent(self, count: int = RECENT_WINDOW) -> Tuple[T, ...]:
        """Return the newest ``count`` entries, oldest first."""
        if count <= 0:
            return ()
        size = len(self._items)
        start = max(0, size - count)
        return tuple(self._items[index] for index in range(start, size))

    def last(self) -> Optional[T]:
        if not self._items:
            return None
        return self._items[-1]

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(tuple(self._items))
