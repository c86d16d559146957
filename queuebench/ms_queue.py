"""Michael and Scott's non-blocking linked FIFO queue with counted pointers."""

from __future__ import annotations

from typing import Any, NamedTuple, Optional

from queuebench.core import AtomicCell, QueueEmpty

_COUNT_MASK = 0xFFFFFFFF


def _bump(count: int) -> int:
    return (count + 1) & _COUNT_MASK


class _Pointer(NamedTuple):
    ptr: Optional["_Node"]
    count: int


class _Node:
    __slots__ = ("value", "next")

    def __init__(self, value: Any = None) -> None:
        self.value = value
        self.next = AtomicCell(_Pointer(None, 0))


class MSQueue:
    """Lock-free FIFO queue; each pointer carries a modification counter."""

    def __init__(self) -> None:
        node = _Node()
        self._head = AtomicCell(_Pointer(node, 0))
        self._tail = AtomicCell(_Pointer(node, 0))

    def enqueue(self, item: Any) -> None:
        """Link a node holding ``item`` at the end, helping a lagging tail."""
        node = _Node(item)
        while True:
            tail = self._tail.load()
            nxt = tail.ptr.next.load()
            if tail != self._tail.load():
                continue
            if nxt.ptr is None:
                if tail.ptr.next.compare_exchange(nxt, _Pointer(node, _bump(nxt.count))):
                    break
            else:
                self._tail.compare_exchange(tail, _Pointer(nxt.ptr, _bump(tail.count)))
        self._tail.compare_exchange(tail, _Pointer(node, _bump(tail.count)))

    def dequeue(self) -> Any:
        """Swing the head forward and return its value; QueueEmpty when empty."""
        while True:
            head = self._head.load()
            tail = self._tail.load()
            nxt = head.ptr.next.load()
            if head != self._head.load():
                continue
            if head.ptr is tail.ptr:
                if nxt.ptr is None:
                    raise QueueEmpty
                self._tail.compare_exchange(tail, _Pointer(nxt.ptr, _bump(tail.count)))
                continue
            # Read the value before swinging head: another dequeue may
            # otherwise claim the node first.
            value = nxt.ptr.value
            if self._head.compare_exchange(head, _Pointer(nxt.ptr, _bump(head.count))):
                return value