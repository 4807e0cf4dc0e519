"""Divide-and-conquer square matrix multiplication benchmark."""

from __future__ import annotations

import sys
from collections.abc import Iterator, MutableSequence, Sequence
from typing import Optional, Union

from forkbench.getoptions import OptType, get_options
from forkbench.ktiming import diff_nsec, getmark, print_runtime

TIMING_COUNT = 1
THRESHOLD = 16
DEFAULT_SIZE = 1024

_UINT32_MASK = 0xFFFFFFFF


def _rand_r(seed: int) -> Iterator[int]:
    """Reentrant pseudo-random numbers in [0, 2**31), three LCG steps each."""
    state = seed & _UINT32_MASK

    def step() -> int:
        nonlocal state
        state = (state * 1103515245 + 12345) & _UINT32_MASK
        return state // 65536

    while True:
        result = step() % 2048
        result = (result << 10) ^ (step() % 1024)
        result = (result << 10) ^ (step() % 1024)
        yield result


def _dac(
    c: MutableSequence[int],
    a: Sequence[int],
    b: Sequence[int],
    n: int,
    c_off: int,
    a_off: int,
    b_off: int,
    length: int,
) -> None:
    if length < THRESHOLD:
        for i in range(length):
            row_c = c_off + i * n
            row_a = a_off + i * n
            for j in range(length):
                c[row_c + j] += sum(
                    a[row_a + k] * b[b_off + k * n + j] for k in range(length)
                )
        return

    mid = length >> 1
    right = mid
    down = n * mid
    diag = n * mid + mid

    _dac(c, a, b, n, c_off, a_off, b_off, mid)
    _dac(c, a, b, n, c_off + right, a_off, b_off + right, mid)
    _dac(c, a, b, n, c_off + down, a_off + down, b_off, mid)
    _dac(c, a, b, n, c_off + diag, a_off + down, b_off + right, mid)

    _dac(c, a, b, n, c_off, a_off + right, b_off + down, mid)
    _dac(c, a, b, n, c_off + right, a_off + right, b_off + diag, mid)
    _dac(c, a, b, n, c_off + down, a_off + diag, b_off + down, mid)
    _dac(c, a, b, n, c_off + diag, a_off + diag, b_off + diag, mid)


def _check_shapes(c: Sequence[int], a: Sequence[int], b: Sequence[int], n: int) -> None:
    size = n * n
    if n < 0 or len(a) != size or len(b) != size or len(c) != size:
        raise ValueError(f"matrices must hold {n}x{n} elements")


def mm_dac(c: MutableSequence[int], a: Sequence[int], b: Sequence[int], n: int) -> None:
    """Add a times b into c; all are row-major n-by-n matrices, n a power of 2."""
    _check_shapes(c, a, b, n)
    _dac(c, a, b, n, 0, 0, 0, n)


def mm_serial(c: MutableSequence[int], a: Sequence[int], b: Sequence[int], n: int) -> None:
    """Reference multiplication used to check mm_dac: c += a times b."""
    _check_shapes(c, a, b, n)
    _dac(c, a, b, n, 0, 0, 0, n)


def rand_matrix(n: int, seed: Union[int, Iterator[int]] = 1) -> list[int]:
    """An n-by-n matrix of bytes; seed is an int or a shared random stream."""
    stream = _rand_r(seed) if isinstance(seed, int) else seed
    return [next(stream) & 0xFF for _ in range(n * n)]


def is_power_of_2(n: int) -> bool:
    """True iff n is a power of 2 (or 0)."""
    return (n & (n - 1)) == 0


def _test_mm(n: int, check: bool) -> None:
    stream = _rand_r(1)
    a = rand_matrix(n, stream)
    b = rand_matrix(n, stream)
    c: list[int] = []

    running_time = []
    for _ in range(TIMING_COUNT):
        c = [0] * (n * n)
        begin = getmark()
        mm_dac(c, a, b, n)
        end = getmark()
        running_time.append(diff_nsec(begin, end))
    print_runtime(running_time)

    if check:
        print("Checking result ...", file=sys.stderr)
        expected = [0] * (n * n)
        mm_serial(expected, a, b, n)
        if c != expected:
            print("MM_dac test FAILED.", file=sys.stderr)
        else:
            print("MM_dac test passed.", file=sys.stderr)


_SPECS = [("-n", OptType.LONG), ("-c", OptType.BOOL), ("-h", OptType.BOOL)]


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv if argv is None else argv)
    opts = get_options(args, _SPECS, {"-n": DEFAULT_SIZE})

    if opts["-h"]:
        print("Usage: mm_dac [cilk options] -n <size> [-c|-h]", file=sys.stderr)
        print("   when -c is set, check result against sequential MM (slow).", file=sys.stderr)
        print("   when -h is set, print this message and quit.", file=sys.stderr)
        return 0

    size = opts["-n"]
    if size < 0 or not is_power_of_2(size):
        print("Input size must be a power of 2 ", file=sys.stderr)
        return 1
    _test_mm(size, opts["-c"])
    return 0


if __name__ == "__main__":
    sys.exit(main())