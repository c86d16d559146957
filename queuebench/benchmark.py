"""Throughput and latency benchmark for the queue implementations.

Every worker thread repeatedly enqueues one of its own items, does some
synthetic work, dequeues any item, and does more work. A fixed, evenly
spaced subset of items records timestamps so that per-operation and
end-to-end latencies can be reported.
"""

from __future__ import annotations

import os
import sys
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from queuebench.core import QueueEmpty
from queuebench.lcr_queue import LCRQueue
from queuebench.lpr_queue import LPRQueue
from queuebench.ms_queue import MSQueue
from queuebench.mutex_queue import MutexQueue
from queuebench.plj_queue import PLJQueue
from queuebench.two_lock_queue import TwoLockQueue
from queuebench.valois_queue import ValoisQueue
from queuebench.work import do_work

_PROG = "queuebench"
_RNG_SEED_MULTIPLIER = 0x9E3779B97F4A7C15
_MASK64 = (1 << 64) - 1

_QUEUES: Dict[str, Callable[[], Any]] = {
    "MutexQueue": MutexQueue,
    "TwoLockQueue": TwoLockQueue,
    "PLJQueue": PLJQueue,
    "MSQueue": MSQueue,
    "ValoisQueue": ValoisQueue,
    "LCRQueue": LCRQueue,
    "LPRQueue": LPRQueue,
}


@dataclass(eq=False)
class SampleItem:
    """An item passed through the queue; sampled items record timestamps (ns)."""

    should_sample: bool = False
    enqueue_start: int = 0
    enqueue_done: int = 0
    dequeue_start: int = 0
    dequeue_done: int = 0

    @property
    def enqueue_ns(self) -> int:
        return self.enqueue_done - self.enqueue_start

    @property
    def dequeue_ns(self) -> int:
        return self.dequeue_done - self.dequeue_start

    @property
    def latency_ns(self) -> int:
        return self.dequeue_done - self.enqueue_start


@dataclass(frozen=True)
class Summary:
    """Aggregate results of one benchmark run."""

    wall_s: float
    sampled: int
    total_pairs: int
    avg_latency_ns: float
    avg_enqueue_ns: float
    avg_dequeue_ns: float
    throughput_mops: float
    pair_throughput_mpairs: float


def queue_factory(queue_type: str) -> Callable[[], Any]:
    """Return the constructor for the queue named ``queue_type``."""
    try:
        return _QUEUES[queue_type]
    except KeyError:
        raise ValueError(f"Unknown queue type: {queue_type}") from None


def sample_stride(count: int, max_samples: int) -> int:
    """Spacing between sampled items so that at most ``max_samples`` are sampled."""
    if max_samples > 0 and count > max_samples:
        return count // max_samples
    return 1


def make_items(count: int, stride: int) -> List[SampleItem]:
    """Create ``count`` items, sampling every ``stride``-th one."""
    if stride < 1:
        raise ValueError("stride must be at least 1")
    return [SampleItem(should_sample=i % stride == 0) for i in range(count)]


def _pin_to_cpu(cpu_id: int) -> None:
    setaffinity = getattr(os, "sched_setaffinity", None)
    if setaffinity is None:
        return
    try:
        setaffinity(threading.get_native_id(), {cpu_id})
    except OSError:
        pass


def _cpu_count() -> int:
    return os.cpu_count() or 1


def run_workers(
    queue: Any,
    items: Sequence[SampleItem],
    ops_per_thread: int,
    n_threads: int,
    work_iters: int,
) -> Tuple[int, int]:
    """Run the enqueue/dequeue workload; return the wall start and end in ns."""
    if n_threads < 1:
        raise ValueError("n_threads must be at least 1")
    if ops_per_thread < 0:
        raise ValueError("ops_per_thread must not be negative")
    if len(items) < ops_per_thread * n_threads:
        raise ValueError("not enough items for the requested workload")

    n_cpus = _cpu_count()
    starts = [0] * n_threads
    ends = [0] * n_threads
    barrier = threading.Barrier(n_threads)
    clock = time.monotonic_ns

    def worker(t: int) -> None:
        _pin_to_cpu(t % n_cpus)
        rng = ((t + 1) * _RNG_SEED_MULTIPLIER) & _MASK64
        mine = items[t * ops_per_thread:(t + 1) * ops_per_thread]

        barrier.wait()
        starts[t] = clock()
        for item in mine:
            if item.should_sample:
                item.enqueue_start = clock()
                queue.enqueue(item)
                item.enqueue_done = clock()
            else:
                queue.enqueue(item)

            rng = do_work(rng, work_iters)

            while True:
                t0 = clock()
                try:
                    got = queue.dequeue()
                except QueueEmpty:
                    continue
                if got.should_sample:
                    got.dequeue_start = t0
                    got.dequeue_done = clock()
                break

            rng = do_work(rng, work_iters)
        ends[t] = clock()

    workers = [
        threading.Thread(target=worker, args=(t,), name=f"worker-{t}")
        for t in range(n_threads)
    ]
    for w in workers:
        w.start()
    for w in workers:
        w.join()

    return min(starts), max(ends)


def summarize(
    items: Sequence[SampleItem],
    wall_start: int,
    wall_end: int,
    ops_per_thread: int,
    n_threads: int,
) -> Summary:
    """Average the sampled latencies and compute throughput."""
    sampled_items = [item for item in items if item.should_sample]
    sampled = len(sampled_items)
    total_enqueue = sum(item.enqueue_ns for item in sampled_items)
    total_dequeue = sum(item.dequeue_ns for item in sampled_items)
    total_latency = sum(item.latency_ns for item in sampled_items)

    total_pairs = ops_per_thread * n_threads
    pairs = float(total_pairs)
    ops = 2.0 * pairs
    divisor = float(sampled) if sampled > 0 else 1.0
    wall_s = (wall_end - wall_start) / 1e9

    def rate(amount: float) -> float:
        if wall_s > 0:
            return amount / wall_s / 1e6
        return float("inf") if amount > 0 else float("nan")

    return Summary(
        wall_s=wall_s,
        sampled=sampled,
        total_pairs=total_pairs,
        avg_latency_ns=total_latency / divisor,
        avg_enqueue_ns=total_enqueue / divisor,
        avg_dequeue_ns=total_dequeue / divisor,
        throughput_mops=rate(ops),
        pair_throughput_mpairs=rate(pairs),
    )


def format_summary(summary: Summary) -> str:
    """Render a summary as the indented report lines."""
    lines = [
        f"    wall time:        {summary.wall_s:g} s",
        f"    sampled pairs:    {summary.sampled} / {summary.total_pairs}",
        f"    avg latency:      {summary.avg_latency_ns:g} ns",
        f"    avg enqueue time: {summary.avg_enqueue_ns:g} ns",
        f"    avg dequeue time: {summary.avg_dequeue_ns:g} ns",
        f"    throughput:       {summary.throughput_mops:g} Mops/s",
        f"    pair throughput:  {summary.pair_throughput_mpairs:g} Mpairs/s",
    ]
    return "\n".join(lines) + "\n"


def export_results(
    items: Sequence[SampleItem],
    wall_start: int,
    wall_end: int,
    queue_type: str,
    ops_per_thread: int,
    n_threads: int,
    work_iters: int,
    max_samples: int,
    output_file: Union[str, os.PathLike],
) -> None:
    """Write the sampled latencies as CSV, preceded by a comment header."""
    wall_s = (wall_end - wall_start) / 1e9
    with Path(output_file).open("w", encoding="utf-8", newline="") as f:
        f.write(
            f"# queue={queue_type} n_threads={n_threads}"
            f" ops_per_thread={ops_per_thread} wall_s={wall_s:g}"
            f" work_iters={work_iters} max_samples={max_samples}\n"
        )
        f.write("e2e_ns,enqueue_ns,dequeue_ns\n")
        for item in items:
            if item.should_sample:
                f.write(f"{item.latency_ns},{item.enqueue_ns},{item.dequeue_ns}\n")


def run_performance_test(
    queue_type: str,
    ops_per_thread: int,
    n_threads: int,
    work_iters: int,
    max_samples: int,
    output_file: Optional[Union[str, os.PathLike]],
) -> Summary:
    """Run one full benchmark, print its report and optionally export samples."""
    factory = queue_factory(queue_type)
    n_cpus = _cpu_count()
    count = ops_per_thread * n_threads
    stride = sample_stride(count, max_samples)

    print("  Test config:")
    print(f"    Threads:          {n_threads}")
    print(f"    Ops per thread:   {ops_per_thread}")
    print(f"    Total pairs:      {count}")
    print(f"    Hardware CPUs:    {n_cpus}")
    print(f"    Work iters:       {work_iters}")
    print(f"    Sample stride:    {stride} ({count // stride} samples)")

    print("  Generating test items", flush=True)
    items = make_items(count, stride)

    print("  Running test...", flush=True)
    wall_start, wall_end = run_workers(factory(), items, ops_per_thread, n_threads, work_iters)

    print("  Test summary:", flush=True)
    summary = summarize(items, wall_start, wall_end, ops_per_thread, n_threads)
    print(format_summary(summary), end="")

    if output_file:
        print(f"  Exporting samples to {output_file}", flush=True)
        export_results(
            items, wall_start, wall_end, queue_type, ops_per_thread,
            n_threads, work_iters, max_samples, output_file,
        )
    return summary


def _parse_count(name: str, text: str) -> int:
    try:
        value = int(text.strip())
    except ValueError:
        raise ValueError(f"invalid {name} {text!r}") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative")
    return value


def _usage() -> str:
    return (
        f"Usage: {_PROG} <ops_per_thread> <work_iters> <queue_type> <n_threads> "
        "[output_file] [max_samples]\n"
        f"  queue_type:  {' | '.join(_QUEUES)}"
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse command-line arguments and run the benchmark."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 4:
        print(_usage(), file=sys.stderr)
        return 1
    try:
        ops_per_thread = _parse_count("ops_per_thread", args[0])
        work_iters = _parse_count("work_iters", args[1])
        queue_type = args[2]
        n_threads = _parse_count("n_threads", args[3])
        if n_threads < 1:
            raise ValueError("n_threads must be at least 1")
        output_file = args[4] if len(args) > 4 else ""
        max_samples = _parse_count("max_samples", args[5]) if len(args) > 5 else 0
    except ValueError as exc:
        print(f"{_PROG}: {exc}", file=sys.stderr)
        return 1

    print(queue_type)
    if queue_type not in _QUEUES:
        print(f"Unknown queue type: {queue_type}", file=sys.stderr)
        return 1

    run_performance_test(queue_type, ops_per_thread, n_threads, work_iters, max_samples, output_file)
    return 0


if __name__ == "__main__":
    sys.exit(main())