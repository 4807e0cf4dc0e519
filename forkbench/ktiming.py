"""Monotonic timing marks and running-time reports."""

from __future__ import annotations

import math
import time
from collections.abc import Sequence

_UINT64_MASK = (1 << 64) - 1


def _nsec_to_sec(nsec: float) -> float:
    return nsec * 1.0e-9


def getmark() -> int:
    """Current monotonic time in nanoseconds."""
    return time.monotonic_ns()


def diff_nsec(start: int, end: int) -> int:
    """Nanoseconds from start to end, as an unsigned 64-bit difference."""
    return (end - start) & _UINT64_MASK


def diff_sec(start: int, end: int) -> float:
    return _nsec_to_sec(diff_nsec(start, end))


def format_runtime(elapsed: Sequence[int], summary: bool = False) -> str:
    """Report individual, average and deviation of running times in nanoseconds."""
    size = len(elapsed)
    if size == 0:
        raise ValueError("no running times to report")
    lines = []
    if not summary:
        lines.extend(
            "Running time %d: %gs" % (i, _nsec_to_sec(ns))
            for i, ns in enumerate(elapsed, start=1)
        )
    ave = sum(elapsed) // size
    std_dev = 0.0
    if size > 1:
        dev_sq_sum = sum((float(ns) - ave) ** 2 for ns in elapsed)
        std_dev = math.sqrt(dev_sq_sum / (size - 1))
    lines.append("Running time average: %g s" % _nsec_to_sec(ave))
    if std_dev != 0:
        percent = 100.0 * std_dev / ave if ave else math.inf
        lines.append("Std. dev: %g s (%2.3f%%)" % (_nsec_to_sec(std_dev), percent))
    return "".join(line + "\n" for line in lines)


def print_runtime(elapsed: Sequence[int]) -> None:
    print(format_runtime(elapsed, False), end="")


def print_runtime_summary(elapsed: Sequence[int]) -> None:
    print(format_runtime(elapsed, True), end="")