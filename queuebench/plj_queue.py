"""A non-blocking linked FIFO queue driven by an explicit state analysis.

Every operation takes a consistent snapshot of head, tail and the tail's
successor, classifies the queue into one of eight states and performs the
single step that state calls for.
"""

from __future__ import annotations

from typing import Any, NamedTuple, Optional

from queuebench.core import AtomicCell, QueueEmpty

ENQ = 0
DEQ = 1

_COUNTER_MASK = 0xFFFFFFFF


class _Count(NamedTuple):
    counter: int
    mark: int

    def bumped(self, mark: Optional[int] = None) -> "_Count":
        return _Count((self.counter + 1) & _COUNTER_MASK, self.mark if mark is None else mark)


class _Pointer(NamedTuple):
    ptr: Optional["_Object"]
    count: _Count

    def moved_to(self, ptr: Optional["_Object"]) -> "_Pointer":
        """The pointer redirected to ``ptr`` with its counter advanced."""
        return _Pointer(ptr, self.count.bumped())


_NULL = _Pointer(None, _Count(0, ENQ))


class _Object:
    __slots__ = ("data", "nextobject")

    def __init__(self, data: Any) -> None:
        self.data = data
        self.nextobject = AtomicCell(_NULL)


class _Snapshot(NamedTuple):
    head: _Pointer
    tail: _Pointer
    next: _Pointer

    @property
    def state(self) -> int:
        head, tail, nxt = self.head.ptr, self.tail.ptr, self.next
        if head is not None and head is tail:
            if nxt.ptr is None:
                return 4 if nxt.count.mark == DEQ else 3
            return 5
        if head is not None and tail is not None:
            return 1 if nxt.ptr is None else 2
        if head is None and tail is None:
            return 7
        if head is not None:
            return 6
        return 8


class PLJQueue:
    """Lock-free FIFO queue whose head and tail may both be empty."""

    def __init__(self) -> None:
        self._head = AtomicCell(_NULL)
        self._tail = AtomicCell(_NULL)

    def _snapshot(self) -> _Snapshot:
        nxt = _NULL
        while True:
            first_head = self._head.load()
            while True:
                first_tail = self._tail.load()
                if first_tail.ptr is not None:
                    nxt = first_tail.ptr.nextobject.load()
                tail = self._tail.load()
                if tail == first_tail:
                    break
            head = self._head.load()
            if head == first_head:
                return _Snapshot(head, tail, nxt)

    def _collapse(self, snap: _Snapshot) -> None:
        """Help finish a dequeue of the last object: null tail, then head."""
        self._tail.compare_exchange(snap.tail, snap.tail.moved_to(None))
        self._head.compare_exchange(snap.head, snap.head.moved_to(None))

    def enqueue(self, item: Any) -> None:
        """Append ``item`` to the back of the queue."""
        obj = _Object(item)
        while True:
            snap = self._snapshot()
            state = snap.state
            if state in (1, 3):
                linked = _Pointer(obj, _Count((snap.next.count.counter + 1) & _COUNTER_MASK, ENQ))
                if snap.tail.ptr.nextobject.compare_exchange(snap.next, linked):
                    self._tail.compare_exchange(snap.tail, snap.tail.moved_to(obj))
                    return
            elif state in (2, 5):
                self._tail.compare_exchange(snap.tail, snap.tail.moved_to(snap.next.ptr))
            elif state == 4:
                self._collapse(snap)
            elif state == 6:
                self._head.compare_exchange(snap.head, snap.head.moved_to(None))
            elif state == 7:
                if self._tail.compare_exchange(snap.tail, snap.tail.moved_to(obj)):
                    self._head.compare_exchange(snap.head, snap.head.moved_to(obj))
                    return
            elif state == 8:
                self._head.compare_exchange(snap.head, snap.head.moved_to(snap.tail.ptr))

    def dequeue(self) -> Any:
        """Remove and return the front item; raise :class:`QueueEmpty` if none."""
        while True:
            snap = self._snapshot()
            state = snap.state
            taken: Optional[_Object] = None
            if state in (1, 2):
                successor = snap.head.ptr.nextobject.load().ptr
                if self._head.compare_exchange(snap.head, snap.head.moved_to(successor)):
                    taken = snap.head.ptr
            elif state == 3:
                marked = _Pointer(snap.next.ptr, snap.next.count.bumped(DEQ))
                if snap.tail.ptr.nextobject.compare_exchange(snap.next, marked):
                    taken = snap.head.ptr
                    self._collapse(snap)
            elif state == 4:
                self._collapse(snap)
            elif state == 5:
                successor = snap.tail.ptr.nextobject.load().ptr
                self._tail.compare_exchange(snap.tail, snap.tail.moved_to(successor))
            elif state == 6:
                self._head.compare_exchange(snap.head, snap.head.moved_to(None))
            elif state == 7:
                raise QueueEmpty
            elif state == 8:
                self._head.compare_exchange(snap.head, snap.head.moved_to(snap.tail.ptr))

            if taken is not None:
                old_next = taken.nextobject.load()
                taken.nextobject.store(
                    _Pointer(None, _Count((old_next.count.counter + 1) & _COUNTER_MASK, ENQ))
                )
                return taken.data