# queuebench

A collection of concurrent FIFO queue algorithms, plus a small harness that
measures their throughput and per-item latency under multi-threaded load.

## Queues

Every queue offers the same two operations:

- `enqueue(item)` appends an item.
- `dequeue()` removes and returns the oldest item, or raises `QueueEmpty`
  (from `queuebench.core`) when there is nothing to take.

| Class | Module | Algorithm |
|-------|--------|-----------|
| `MutexQueue` | `queuebench.mutex_queue` | A `collections.deque` guarded by a single lock |
| `TwoLockQueue` | `queuebench.two_lock_queue` | Linked list with separate front and back locks and a dummy node |
| `MSQueue` | `queuebench.ms_queue` | Michael–Scott queue with counted pointers |
| `ValoisQueue` | `queuebench.valois_queue` | Valois-style linked queue with a dummy head node |
| `PLJQueue` | `queuebench.plj_queue` | Queue driven by consistent snapshots classified into eight states |
| `LCRQueue` | `queuebench.lcr_queue` | Linked list of bounded ring segments (`CRQ`) that close when full |
| `LPRQueue` | `queuebench.lpr_queue` | Linked list of ring segments that reserve slots with thread tokens (`PRQ`) |

The ring segments `CRQ` and `PRQ` hold 1024 slots each; their own
`enqueue` returns `EnqueueResult.OK` or `EnqueueResult.CLOSED`
(`queuebench.lcr_queue.EnqueueResult`), and the linked queues append a fresh
segment when one closes.

The non-blocking algorithms are built on `queuebench.core.AtomicCell`, which
provides `load`, `store`, `compare_exchange`, `fetch_add` and `fetch_or`,
each made indivisible by a per-cell lock. `compare_exchange` compares by
identity first and then by equality.

```python
from queuebench.core import QueueEmpty
from queuebench.ms_queue import MSQueue

q = MSQueue()
q.enqueue("a")
q.enqueue("b")
assert q.dequeue() == "a"
assert q.dequeue() == "b"
try:
    q.dequeue()
except QueueEmpty:
    print("empty")
```

## Benchmark

```
queuebench <ops_per_thread> <work_iters> <queue_type> <n_threads> [output_file] [max_samples]
```

`queue_type` is one of `MutexQueue`, `TwoLockQueue`, `PLJQueue`, `MSQueue`,
`ValoisQueue`, `LCRQueue` or `LPRQueue`.

Each worker thread alternates between enqueueing one of its own items and
dequeueing any item, running `work_iters` rounds of synthetic work between
operations. Where the platform supports it, each thread is pinned to one
CPU. An evenly spaced subset of items (at most `max_samples`; all when it
is 0) is timed. The run prints its configuration, then wall time, average
end-to-end, enqueue and dequeue latency, and throughput. If `output_file`
is given, the sampled latencies are written there as CSV
(`e2e_ns,enqueue_ns,dequeue_ns`) below a `#` header line. The command
exits with status 1 on missing or invalid arguments or an unknown queue type.

```
queuebench 100000 0 MSQueue 4 results.csv 10000
```

The same steps are available from `queuebench.benchmark`:
`queue_factory`, `sample_stride`, `make_items`, `run_workers`, `summarize`
(returning a `Summary`), `format_summary`, `export_results` and
`run_performance_test`.

## Calibrating synthetic work

```
queuebench-calibrate <target_ns>
```

Prints the number of `work_iters` that takes roughly `target_ns`
nanoseconds on this machine, for use as the benchmark's second argument.

From Python, `queuebench.work.do_work(state, iters)` advances a 64-bit
linear congruential generator `iters` times, and
`queuebench.work.calibrate_work_iters(target_ns)` performs the calibration.

## Limits

All queues run on Python threads, so under the global interpreter lock the
benchmark measures interleaved rather than truly parallel execution, and
absolute timings are far higher than those of machine-level atomics. The
lock-free queues never free or recycle nodes themselves; dequeued nodes are
left to the garbage collector.