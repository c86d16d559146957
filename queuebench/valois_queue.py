"""Valois' non-blocking linked FIFO queue with a dummy head node."""

from __future__ import annotations

from typing import Any

from queuebench.core import AtomicCell, QueueEmpty


class _Cell:
    __slots__ = ("item", "link")

    def __init__(self, item: Any) -> None:
        self.item = item
        self.link = AtomicCell(None)


class ValoisQueue:
    """Lock-free FIFO queue; threads help one another advance the tail."""

    def __init__(self) -> None:
        dummy = _Cell(None)
        self._first = AtomicCell(dummy)
        self._last = AtomicCell(dummy)

    def enqueue(self, item: Any) -> None:
        """Attach ``item`` after the last cell with a compare-and-swap."""
        cell = _Cell(item)
        while True:
            last = self._last.load()
            after = last.link.load()
            if last is not self._last.load():
                continue
            if after is not None:
                # Help complete an enqueue whose cell is linked but not yet last.
                self._last.compare_exchange(last, after)
            elif last.link.compare_exchange(None, cell):
                self._last.compare_exchange(last, cell)
                return

    def dequeue(self) -> Any:
        """Advance past the dummy and return its successor's item."""
        while True:
            first = self._first.load()
            last = self._last.load()
            after = first.link.load()
            if first is not self._first.load():
                continue
            if after is None:
                raise QueueEmpty
            if first is last:
                self._last.compare_exchange(last, after)
            else:
                item = after.item
                if self._first.compare_exchange(first, after):
                    return item