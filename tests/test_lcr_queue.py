import threading
import time

import pytest

from queuebench.core import QueueEmpty
from queuebench.lcr_queue import CRQ, EnqueueResult, LCRQueue

QUOTA = 1000


def empty_now(q):
    try:
        q.dequeue()
    except QueueEmpty:
        return True
    return False


@pytest.mark.parametrize("count", [0, 1, 1000, 3 * CRQ.R + 7])
def test_fifo_for_various_sizes(count):
    q = LCRQueue()
    for i in range(count):
        q.enqueue(i)
    assert [q.dequeue() for _ in range(count)] == list(range(count))
    assert empty_now(q)


def test_enqueue_after_empty():
    q = LCRQueue()
    q.enqueue(1)
    q.enqueue(2)
    assert (q.dequeue(), q.dequeue(), empty_now(q)) == (1, 2, True)
    q.enqueue(3)
    assert (q.dequeue(), empty_now(q)) == (3, True)


def test_none_and_equal_items_are_kept():
    q = LCRQueue()
    first, second = [1], [1]
    for x in (None, first, second):
        q.enqueue(x)
    got = [q.dequeue() for _ in range(3)]
    assert got[0] is None and got[1] is first and got[2] is second


def test_ring_accepts_until_full_then_closes():
    ring = CRQ()
    assert {ring.enqueue(i) for i in range(CRQ.R)} == {EnqueueResult.OK}
    assert [ring.enqueue(x) for x in ("overflow", "later")] == [EnqueueResult.CLOSED] * 2
    assert [ring.dequeue() for _ in range(CRQ.R)] == list(range(CRQ.R))
    assert empty_now(ring)


def test_ring_reusable_after_empty_dequeues():
    ring = CRQ()
    assert all(empty_now(ring) for _ in range(5))
    assert ring.enqueue("x") is EnqueueResult.OK
    assert ring.dequeue() == "x"


@pytest.mark.parametrize("n_producers,n_consumers", [(1, 1), (10, 1), (1, 10), (10, 10)])
def test_producers_consumers(n_producers, n_consumers):
    q = LCRQueue()
    poison = object()
    per_consumer = [[] for _ in range(n_consumers)]

    def feed(pid):
        for k in range(QUOTA):
            q.enqueue(pid * QUOTA + k)

    def eat(bag):
        while True:
            try:
                val = q.dequeue()
            except QueueEmpty:
                time.sleep(0)
                continue
            if val is poison:
                return
            bag.append(val)

    feeders = [threading.Thread(target=feed, args=(p,)) for p in range(n_producers)]
    eaters = [threading.Thread(target=eat, args=(bag,)) for bag in per_consumer]
    for t in feeders + eaters:
        t.start()
    for t in feeders:
        t.join()
    for _ in eaters:
        q.enqueue(poison)
    for t in eaters:
        t.join()

    for bag in per_consumer:
        by_source = [[v for v in bag if v // QUOTA == p] for p in range(n_producers)]
        assert all(s == sorted(s) for s in by_source)
    assert sorted(v for bag in per_consumer for v in bag) == list(range(n_producers * QUOTA))
    assert empty_now(q)
    q.enqueue("after")
    assert q.dequeue() == "after"