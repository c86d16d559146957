"""Linked concurrent ring queue: a list of bounded rings that close when full.

Each ring (:class:`CRQ`) hands out slots through fetch-and-add counters on
its head and tail. When a ring overflows, or an enqueuer starves, the ring is
closed and the enqueuer appends a fresh ring to the list.
"""

from __future__ import annotations

import enum
from typing import Any, NamedTuple

from queuebench.core import AtomicCell, QueueEmpty

_CLOSED_BIT = 1 << 63
_T_MASK = _CLOSED_BIT - 1


class EnqueueResult(enum.Enum):
    """Outcome of offering an item to a single ring."""

    OK = "ok"
    CLOSED = "closed"


class _Unset:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<unset>"


_UNSET = _Unset()


class _Slot(NamedTuple):
    safe: bool
    idx: int
    val: Any


class CRQ:
    """One bounded ring segment of an :class:`LCRQueue`."""

    R = 1 << 10
    STARVING_THRESHOLD = R

    def __init__(self) -> None:
        self._head = AtomicCell(0)
        self._tail = AtomicCell(0)
        self._array = [AtomicCell(_Slot(True, i, _UNSET)) for i in range(self.R)]
        self.next: AtomicCell = AtomicCell(None)

    def _fix_state(self) -> None:
        """Pull the tail up to the head after dequeuers overran it."""
        while True:
            h = self._head.fetch_add(0)
            t = self._tail.fetch_add(0)
            if self._tail.load() != t:
                continue
            if h <= t:
                return
            if self._tail.compare_exchange(t, h):
                return

    def _overflowed(self, t: int) -> bool:
        h = self._head.load()
        return t < h or t - h >= self.R

    def enqueue(self, item: Any) -> EnqueueResult:
        """Try to place ``item`` in the ring; report ``CLOSED`` once it is shut."""
        iteration = 0
        while True:
            raw = self._tail.fetch_add(1)
            if raw & _CLOSED_BIT:
                return EnqueueResult.CLOSED
            t = raw & _T_MASK

            cell = self._array[t % self.R]
            slot = cell.load()
            if (
                slot.val is _UNSET
                and slot.idx <= t
                and (slot.safe or self._head.load() <= t)
                and cell.compare_exchange(slot, _Slot(True, t, item))
            ):
                return EnqueueResult.OK

            starving = False
            if not self._overflowed(t):
                starving = iteration > self.STARVING_THRESHOLD
                iteration += 1
                if not starving:
                    continue
            self._tail.fetch_or(_CLOSED_BIT)
            return EnqueueResult.CLOSED

    def dequeue(self) -> Any:
        """Remove and return the front item; raise :class:`QueueEmpty` if none."""
        while True:
            h = self._head.fetch_add(1)
            cell = self._array[h % self.R]
            while True:
                slot = cell.load()
                if slot.idx > h:
                    break
                if slot.val is not _UNSET:
                    if slot.idx == h:
                        if cell.compare_exchange(slot, _Slot(slot.safe, h + self.R, _UNSET)):
                            return slot.val
                    elif cell.compare_exchange(slot, _Slot(False, slot.idx, slot.val)):
                        break
                elif cell.compare_exchange(slot, _Slot(slot.safe, h + self.R, _UNSET)):
                    break

            t = self._tail.load() & _T_MASK
            if t <= h + 1:
                self._fix_state()
                raise QueueEmpty


class LCRQueue:
    """Unbounded lock-free FIFO queue built from a linked list of rings."""

    def __init__(self) -> None:
        ring = CRQ()
        self._head = AtomicCell(ring)
        self._tail = AtomicCell(ring)

    def enqueue(self, item: Any) -> None:
        """Append ``item`` to the back of the queue."""
        while True:
            crq = self._tail.load()
            successor = crq.next.load()
            if successor is not None:
                self._tail.compare_exchange(crq, successor)
                continue
            if crq.enqueue(item) is not EnqueueResult.CLOSED:
                return

            fresh = CRQ()
            fresh.enqueue(item)
            if crq.next.compare_exchange(None, fresh):
                self._tail.compare_exchange(crq, fresh)
                return

    def dequeue(self) -> Any:
        """Remove and return the front item; raise :class:`QueueEmpty` if none."""
        while True:
            crq = self._head.load()
            try:
                return crq.dequeue()
            except QueueEmpty:
                pass
            successor = crq.next.load()
            if successor is None:
                raise QueueEmpty
            self._head.compare_exchange(crq, successor)