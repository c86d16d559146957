import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from queuebench.core import QueueEmpty
from queuebench.lcr_queue import EnqueueResult
from queuebench.lpr_queue import PRQ, LPRQueue

BATCH = 1000


@pytest.mark.parametrize(
    "script",
    [
        "-",
        "+10 -10 -",
        "+1 +2 -1 -2 - +3 -3 -",
    ],
    ids=["empty", "single", "after_empty"],
)
def test_token_scripts(script):
    q = LPRQueue()
    for token in script.split():
        if token.startswith("+"):
            q.enqueue(int(token[1:]))
        elif token == "-":
            with pytest.raises(QueueEmpty):
                q.dequeue()
        else:
            assert q.dequeue() == int(token[1:])


@pytest.mark.parametrize("size", [1000, 3 * PRQ.R + 7])
def test_long_runs_stay_ordered(size):
    q = LPRQueue()
    for n in range(size):
        q.enqueue(n)
    assert [q.dequeue() for _ in range(size)] == list(range(size))


def test_identity_of_items_preserved():
    q = LPRQueue()
    objs = [None, [1], [1]]
    for o in objs:
        q.enqueue(o)
    assert all(q.dequeue() is o for o in objs)


def test_full_ring_refuses_more():
    ring = PRQ()
    outcomes = [ring.enqueue(n) for n in range(PRQ.R)]
    assert outcomes.count(EnqueueResult.OK) == PRQ.R
    assert ring.enqueue("overflow") is EnqueueResult.CLOSED
    assert ring.enqueue("later") is EnqueueResult.CLOSED
    assert [ring.dequeue() for _ in outcomes] == list(range(PRQ.R))
    with pytest.raises(QueueEmpty):
        ring.dequeue()


def test_ring_closes_after_head_overruns_tail():
    ring = PRQ()
    for _ in range(2):
        with pytest.raises(QueueEmpty):
            ring.dequeue()
    assert ring.enqueue("x") is EnqueueResult.CLOSED


@pytest.mark.parametrize("makers,takers", [(1, 1), (10, 1), (1, 10), (10, 10)])
def test_parallel_traffic(makers, takers):
    q = LPRQueue()
    quit_marker = object()

    def make(m):
        for n in range(m * BATCH, (m + 1) * BATCH):
            q.enqueue(n)

    def take():
        kept = []
        while True:
            try:
                n = q.dequeue()
            except QueueEmpty:
                time.sleep(0)
                continue
            if n is quit_marker:
                return kept
            kept.append(n)

    with ThreadPoolExecutor(max_workers=makers + takers) as pool:
        takes = [pool.submit(take) for _ in range(takers)]
        list(pool.map(make, range(makers)))
        for _ in takes:
            q.enqueue(quit_marker)
        kept_lists = [f.result() for f in takes]

    for kept in kept_lists:
        for m in range(makers):
            mine = [n for n in kept if n // BATCH == m]
            assert all(a < b for a, b in zip(mine, mine[1:]))
    assert sorted(n for kept in kept_lists for n in kept) == list(range(makers * BATCH))
    q.enqueue("after")
    assert q.dequeue() == "after"