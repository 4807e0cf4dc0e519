"""N-queens solution counting benchmark."""

from __future__ import annotations

import re
import sys
from collections.abc import Sequence
from itertools import combinations
from typing import Optional

_INT_RE = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    match = _INT_RE.match(text)
    return int(match.group(1)) if match else 0


def ok(positions: Sequence[int]) -> bool:
    """True if no two queens, one per row at these columns, attack each other."""
    return not any(
        q == p or abs(q - p) == j - i
        for (i, p), (j, q) in combinations(enumerate(positions), 2)
    )


def _count(n: int, placed: tuple[int, ...]) -> int:
    if len(placed) == n:
        return 1
    total = 0
    for column in range(n):
        board = placed + (column,)
        if ok(board):
            total += _count(n, board)
    return total


def nqueens(n: int) -> int:
    """Number of ways to place n non-attacking queens on an n-by-n board."""
    return _count(n, ())


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv if argv is None else argv)
    prog = args[0] if args else "nqueens"
    if len(args) < 2:
        print(f"Usage: {prog} <n>", file=sys.stderr)
        print("Use default board size, n = 13.", file=sys.stderr)
        return 0

    n = _atoi(args[1])
    print(f"Running {prog} with n = {n}.")
    res = nqueens(n)
    if res == 0:
        print("No solution found.")
    else:
        print(f"Total number of solutions : {res}")
    return 0


if __name__ == "__main__":
    sys.exit(main())