"""Atomic primitives shared by the queue implementations."""

from __future__ import annotations

import threading
from typing import Any


class QueueEmpty(Exception):
    """Raised by ``dequeue`` when the queue holds no items."""


def _same(current: Any, expected: Any) -> bool:
    return current is expected or current == expected


class AtomicCell:
    """A single value whose reads and updates are each indivisible.

    Comparison in :meth:`compare_exchange` is by identity first and then by
    equality, so cells can hold node references, tuples of them, or integers.
    """

    __slots__ = ("_value", "_lock")

    def __init__(self, value: Any) -> None:
        self._value = value
        self._lock = threading.Lock()

    def load(self) -> Any:
        """Return the current value."""
        with self._lock:
            return self._value

    def store(self, value: Any) -> None:
        """Replace the current value."""
        with self._lock:
            self._value = value

    def compare_exchange(self, expected: Any, desired: Any) -> bool:
        """Set the value to ``desired`` if it currently matches ``expected``.

        Returns whether the exchange took place.
        """
        with self._lock:
            if _same(self._value, expected):
                self._value = desired
                return True
            return False

    def fetch_add(self, delta: int) -> int:
        """Add ``delta`` and return the value held before the addition."""
        with self._lock:
            old = self._value
            self._value = old + delta
            return old

    def fetch_or(self, mask: int) -> int:
        """Bitwise-or ``mask`` into the value and return the previous value."""
        with self._lock:
            old = self._value
            self._value = old | mask
            return old

    def __repr__(self) -> str:
        return f"AtomicCell({self.load()!r})"