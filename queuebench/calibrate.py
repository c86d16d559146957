"""Command that prints the work iteration count matching a target duration."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

from queuebench.work import calibrate_work_iters

_PROG = "queuebench-calibrate"


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Print the calibrated iteration count for ``<target_ns>``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1:
        print(f"Usage: {_PROG} <target_ns>", file=sys.stderr)
        return 1
    try:
        target_ns = int(args[0].strip())
        iters = calibrate_work_iters(target_ns)
    except ValueError as exc:
        print(f"{_PROG}: invalid target_ns {args[0]!r}: {exc}", file=sys.stderr)
        return 1
    print(iters)
    return 0


if __name__ == "__main__":
    sys.exit(main())