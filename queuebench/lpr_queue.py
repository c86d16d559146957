"""Linked portable ring queue: rings that reserve slots with thread tokens.

Unlike :mod:`queuebench.lcr_queue`, a slot is claimed in several single-word
steps: an enqueuer first parks its thread token in the slot, then stamps the
slot's epoch, then swaps the token for the item.
"""

from __future__ import annotations

import threading
from typing import Any, NamedTuple

from queuebench.core import AtomicCell, QueueEmpty
from queuebench.lcr_queue import EnqueueResult

_CLOSED_BIT = 1 << 63
_T_MASK = _CLOSED_BIT - 1


class _Null:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<null>"


_NULL = _Null()


class _Token:
    """Marks a slot as reserved by one thread."""

    __slots__ = ("__weakref__",)


_local = threading.local()


def _thread_token() -> _Token:
    token = getattr(_local, "token", None)
    if token is None:
        token = _Token()
        _local.token = token
    return token


def _is_free(value: Any) -> bool:
    return value is _NULL or isinstance(value, _Token)


class _Stamp(NamedTuple):
    safe: bool
    epoch: int


class _Cell:
    __slots__ = ("stamp", "value")

    def __init__(self) -> None:
        self.stamp = AtomicCell(_Stamp(True, 0))
        self.value = AtomicCell(_NULL)


class PRQ:
    """One bounded ring segment of an :class:`LPRQueue`."""

    R = 1 << 10
    STARVING_THRESHOLD = R

    def __init__(self) -> None:
        self._head = AtomicCell(self.R)
        self._tail = AtomicCell(self.R)
        self._cells = [_Cell() for _ in range(self.R)]
        self.next: AtomicCell = AtomicCell(None)

    def _overflowed(self, t: int) -> bool:
        h = self._head.load()
        return t < h or t - h >= self.R

    def enqueue(self, item: Any) -> EnqueueResult:
        """Try to place ``item`` in the ring; report ``CLOSED`` once it is shut."""
        token = _thread_token()
        iteration = 0
        while True:
            raw = self._tail.fetch_add(1)
            if raw & _CLOSED_BIT:
                return EnqueueResult.CLOSED
            t = raw & _T_MASK
            cycle, i = divmod(t, self.R)

            cell = self._cells[i]
            stamp = cell.stamp.load()
            value = cell.value.load()

            if (
                _is_free(value)
                and stamp.epoch < cycle
                and (stamp.safe or self._head.load() <= t)
                and cell.value.compare_exchange(value, token)
            ):
                if not cell.stamp.compare_exchange(stamp, _Stamp(True, cycle)):
                    cell.value.compare_exchange(token, _NULL)
                elif cell.value.compare_exchange(token, item):
                    return EnqueueResult.OK

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
            cycle, i = divmod(h, self.R)
            cell = self._cells[i]

            while True:
                stamp = cell.stamp.load()
                value = cell.value.load()
                if stamp != cell.stamp.load():
                    continue

                free = _is_free(value)
                if stamp.epoch == cycle and not free:
                    cell.value.store(_NULL)
                    return value

                if stamp.epoch <= cycle and free:
                    if isinstance(value, _Token) and not cell.value.compare_exchange(
                        value, _NULL
                    ):
                        continue
                    if cell.stamp.compare_exchange(stamp, _Stamp(stamp.safe, cycle)):
                        break
                elif stamp.epoch < cycle and not free:
                    # A stale item occupies the slot: mark it unsafe.
                    if cell.stamp.compare_exchange(stamp, _Stamp(False, stamp.epoch)):
                        break
                else:
                    break

            if self._tail.load() & _T_MASK <= h + 1:
                raise QueueEmpty


class LPRQueue:
    """Unbounded lock-free FIFO queue built from a linked list of token rings."""

    def __init__(self) -> None:
        ring = PRQ()
        self._head = AtomicCell(ring)
        self._tail = AtomicCell(ring)

    def enqueue(self, item: Any) -> None:
        """Append ``item`` to the back of the queue."""
        while True:
            prq = self._tail.load()
            successor = prq.next.load()
            if successor is not None:
                self._tail.compare_exchange(prq, successor)
                continue
            if prq.enqueue(item) is not EnqueueResult.CLOSED:
                return

            fresh = PRQ()
            fresh.enqueue(item)
            if prq.next.compare_exchange(None, fresh):
                self._tail.compare_exchange(prq, fresh)
                return

    def dequeue(self) -> Any:
        """Remove and return the front item; raise :class:`QueueEmpty` if none."""
        while True:
            prq = self._head.load()
            try:
                return prq.dequeue()
            except QueueEmpty:
                pass
            successor = prq.next.load()
            if successor is None:
                raise QueueEmpty
            # Items may have landed in this ring after the first look.
            try:
                return prq.dequeue()
            except QueueEmpty:
                pass
            self._head.compare_exchange(prq, successor)