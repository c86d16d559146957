import threading
import time

import pytest

from queuebench.core import QueueEmpty
from queuebench.mutex_queue import MutexQueue

PER_PRODUCER = 2000

SCRIPTS = {
    "empty": [("get", QueueEmpty)],
    "single": [("put", 10), ("get", 10), ("get", QueueEmpty)],
    "after_empty": [
        ("put", 1), ("put", 2), ("get", 1), ("get", 2), ("get", QueueEmpty),
        ("put", 3), ("get", 3), ("get", QueueEmpty),
    ],
    "none_item": [("put", None), ("get", None), ("get", QueueEmpty)],
}


@pytest.mark.parametrize("steps", list(SCRIPTS.values()), ids=list(SCRIPTS))
def test_scripted_operations(steps):
    q = MutexQueue()
    for op, arg in steps:
        if op == "put":
            q.enqueue(arg)
        elif arg is QueueEmpty:
            with pytest.raises(QueueEmpty):
                q.dequeue()
        else:
            assert q.dequeue() == arg


def test_thousand_items_keep_order():
    q = MutexQueue()
    for n in range(1000):
        q.enqueue(n)
    assert [q.dequeue() for _ in range(1000)] == list(range(1000))


def _take_until(q, sentinel, sink):
    while True:
        try:
            got = q.dequeue()
        except QueueEmpty:
            time.sleep(0)
            continue
        if got is sentinel:
            return
        sink.append(got)


@pytest.mark.parametrize("n_producers,n_consumers", [(1, 1), (10, 1), (1, 10), (10, 10)])
def test_n_producers_n_consumers(n_producers, n_consumers):
    q = MutexQueue()
    sentinel = object()
    sinks = [[] for _ in range(n_consumers)]
    writers = [
        threading.Thread(
            target=lambda lo=p * PER_PRODUCER: [q.enqueue(v) for v in range(lo, lo + PER_PRODUCER)]
        )
        for p in range(n_producers)
    ]
    readers = [threading.Thread(target=_take_until, args=(q, sentinel, s)) for s in sinks]
    for t in writers + readers:
        t.start()
    for t in writers:
        t.join()
    for _ in readers:
        q.enqueue(sentinel)
    for t in readers:
        t.join()

    for sink in sinks:
        newest = {}
        for v in sink:
            assert v > newest.get(v // PER_PRODUCER, -1)
            newest[v // PER_PRODUCER] = v
    assert sorted(sum(sinks, [])) == list(range(n_producers * PER_PRODUCER))
    with pytest.raises(QueueEmpty):
        q.dequeue()