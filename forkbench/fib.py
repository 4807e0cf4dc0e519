"""Recursive Fibonacci benchmark."""

from __future__ import annotations

import re
import sys
from collections.abc import Sequence
from typing import Optional

from forkbench.ktiming import diff_nsec, getmark, print_runtime

TIMING_COUNT = 1

_INT_RE = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    match = _INT_RE.match(text)
    return int(match.group(1)) if match else 0


def fib(n: int) -> int:
    """The n-th Fibonacci number by the doubly recursive definition."""
    if n < 2:
        return n
    x = fib(n - 1)
    y = fib(n - 2)
    return x + y


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv if argv is None else argv)
    if len(args) != 2:
        print("Usage: fib [<cilk-options>] <n>", file=sys.stderr)
        return 1

    n = _atoi(args[1])
    running_time = []
    res = 0
    for _ in range(TIMING_COUNT):
        begin = getmark()
        res = fib(n)
        end = getmark()
        running_time.append(diff_nsec(begin, end))
    print(f"Result: {res}")
    print_runtime(running_time)
    return 0


if __name__ == "__main__":
    sys.exit(main())