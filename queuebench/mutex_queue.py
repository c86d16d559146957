"""FIFO queue in which every operation holds one shared lock."""

from __future__ import annotations

import threading
from collections import deque
from typing import Any

from queuebench.core import QueueEmpty


class MutexQueue:
    """Unbounded FIFO queue serialised by a single lock."""

    def __init__(self) -> None:
        self._items: deque[Any] = deque()
        self._lock = threading.Lock()

    def enqueue(self, item: Any) -> None:
        """Put ``item`` at the back."""
        with self._lock:
            self._items.append(item)

    def dequeue(self) -> Any:
        """Take the oldest item, raising QueueEmpty when there is none."""
        with self._lock:
            try:
                return self._items.popleft()
            except IndexError:
                raise QueueEmpty from None