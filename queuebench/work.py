"""Synthetic CPU work used to space out queue operations."""

from __future__ import annotations

import time

_MASK = (1 << 64) - 1
_MULTIPLIER = 6364136223846793005
_INCREMENT = 9754186451795953191
_CAL_ITERS = 2_000_000


def do_work(state: int, iters: int) -> int:
    """Advance a 64-bit linear congruential generator ``iters`` times."""
    for _ in range(iters):
        state = (state * _MULTIPLIER + _INCREMENT) & _MASK
    return state


def calibrate_work_iters(target_ns: int) -> int:
    """Estimate how many :func:`do_work` iterations take ``target_ns`` nanoseconds."""
    if target_ns < 0:
        raise ValueError("target_ns must not be negative")
    if target_ns == 0:
        return 0
    state = do_work(22, _CAL_ITERS)  # warm up
    t0 = time.monotonic_ns()
    do_work(state, _CAL_ITERS)
    t1 = time.monotonic_ns()
    elapsed = max(t1 - t0, 1)
    return (_CAL_ITERS * target_ns) // elapsed