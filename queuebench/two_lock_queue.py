"""A linked FIFO queue with separate head and tail locks."""

from __future__ import annotations

import threading
from typing import Any

from queuebench.core import QueueEmpty


class _Link:
    __slots__ = ("payload", "successor")

    def __init__(self, payload: Any) -> None:
        self.payload = payload
        self.successor: _Link | None = None


class TwoLockQueue:
    """FIFO queue where producers and consumers contend on different locks.

    A dummy link sits at the front so that producers only touch the back and
    consumers only touch the front.
    """

    def __init__(self) -> None:
        self._front = self._back = _Link(None)
        self._front_lock = threading.Lock()
        self._back_lock = threading.Lock()

    def enqueue(self, item: Any) -> None:
        """Link ``item`` after the current last element."""
        link = _Link(item)
        with self._back_lock:
            self._back.successor = link
            self._back = link

    def dequeue(self) -> Any:
        """Unlink the first element and return it; QueueEmpty if there is none."""
        with self._front_lock:
            first = self._front.successor
            if first is None:
                raise QueueEmpty
            payload, first.payload = first.payload, None
            self._front = first
        return payload