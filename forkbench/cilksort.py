"""Merge-sort benchmark built on a parallel-style divide-and-conquer merge.

The array is split into four quarters that are sorted recursively, merged
pairwise into a scratch array and merged back. Each merge splits at the
median of the larger range, found by binary search in the smaller one.
"""

from __future__ import annotations

import sys
from bisect import bisect_right
from collections.abc import MutableSequence, Sequence
from typing import Optional

from forkbench.getoptions import OptType, get_options
from forkbench.ktiming import diff_nsec, getmark, print_runtime

TIMING_COUNT = 1

KILO = 1024
MERGESIZE = KILO  # must be >= 2
QUICKSIZE = KILO
INSERTIONSIZE = 20

DEFAULT_SIZE = 10_000_000

_UINT64_MASK = (1 << 64) - 1
_LCG_MULTIPLIER = 1103515245
_LCG_INCREMENT = 12345


class LcgRandom:
    """Linear congruential generator over unsigned 64-bit integers."""

    def __init__(self, seed: int = 0) -> None:
        self.state = seed & _UINT64_MASK

    def next(self) -> int:
        self.state = (self.state * _LCG_MULTIPLIER + _LCG_INCREMENT) & _UINT64_MASK
        return self.state


def med3(a, b, c):
    """Median of three values."""
    if a < b:
        if b < c:
            return b
        return c if a < c else a
    if b > c:
        return b
    return c if a > c else a


def _seqpart(arr: MutableSequence, low: int, high: int) -> int:
    """Partition arr[low..high] around a median-of-three pivot."""
    pivot = med3(arr[low], arr[high], arr[low + (high - low) // 2])
    curr_low, curr_high = low, high
    while True:
        while arr[curr_high] > pivot:
            curr_high -= 1
        h = arr[curr_high]
        while arr[curr_low] < pivot:
            curr_low += 1
        l = arr[curr_low]
        if curr_low >= curr_high:
            break
        arr[curr_high] = l
        curr_high -= 1
        arr[curr_low] = h
        curr_low += 1
    # A trivial partition leaves the largest element at arr[high].
    return curr_high if curr_high < high else curr_high - 1


def insertion_sort(arr: MutableSequence, low: int, high: int) -> None:
    """Sort arr[low..high] (inclusive) in place."""
    for q in range(low + 1, high + 1):
        value = arr[q]
        pos = bisect_right(arr, value, low, q)
        arr[pos + 1:q + 1] = arr[pos:q]
        arr[pos] = value


def seqquick(arr: MutableSequence, low: int, high: int) -> None:
    """Quicksort arr[low..high] (inclusive), finishing small ranges by insertion."""
    while high - low >= INSERTIONSIZE:
        p = _seqpart(arr, low, high)
        seqquick(arr, low, p)
        low = p + 1
    insertion_sort(arr, low, high)


def seqmerge(
    src: Sequence,
    low1: int,
    high1: int,
    low2: int,
    high2: int,
    dest: MutableSequence,
    lowdest: int,
) -> None:
    """Merge src[low1..high1] and src[low2..high2] into dest from lowdest."""
    i, j, k = low1, low2, lowdest
    while i <= high1 and j <= high2:
        if src[i] < src[j]:
            dest[k] = src[i]
            i += 1
        else:
            dest[k] = src[j]
            j += 1
        k += 1
    if i > high1:
        dest[k:k + high2 - j + 1] = src[j:high2 + 1]
    else:
        dest[k:k + high1 - i + 1] = src[i:high1 + 1]


def binsplit(val, arr: Sequence, low: int, high: int) -> int:
    """Index of the greatest element <= val in sorted arr[low..high], or low - 1."""
    if high < low:
        raise ValueError("binsplit needs a non-empty range")
    while low != high:
        mid = low + ((high - low + 1) >> 1)
        if val <= arr[mid]:
            high = mid - 1
        else:
            low = mid
    return low - 1 if arr[low] > val else low


def cilkmerge(
    src: Sequence,
    low1: int,
    high1: int,
    low2: int,
    high2: int,
    dest: MutableSequence,
    lowdest: int,
) -> None:
    """Merge sorted src[low1..high1] and src[low2..high2] into dest from lowdest."""
    if high2 - low2 > high1 - low1:
        low1, low2 = low2, low1
        high1, high2 = high2, high1

    if high1 < low1:
        dest[lowdest:lowdest + high2 - low2 + 1] = src[low2:high2 + 1]
        return

    if high2 - low2 < MERGESIZE:
        seqmerge(src, low1, high1, low2, high2, dest, lowdest)
        return

    split1 = (high1 - low1 + 1) // 2 + low1
    split2 = binsplit(src[split1], src, low2, high2)
    lowsize = split1 - low1 + split2 - low2

    dest[lowdest + lowsize + 1] = src[split1]
    cilkmerge(src, low1, split1 - 1, low2, split2, dest, lowdest)
    cilkmerge(src, split1 + 1, high1, split2 + 1, high2, dest, lowdest + lowsize + 2)


def _cilksort(arr: MutableSequence, tmp: MutableSequence, low: int, size: int) -> None:
    if size < QUICKSIZE:
        seqquick(arr, low, low + size - 1)
        return

    quarter = size // 4
    a = low
    b = a + quarter
    c = b + quarter
    d = c + quarter

    _cilksort(arr, tmp, a, quarter)
    _cilksort(arr, tmp, b, quarter)
    _cilksort(arr, tmp, c, quarter)
    _cilksort(arr, tmp, d, size - 3 * quarter)

    cilkmerge(arr, a, a + quarter - 1, b, b + quarter - 1, tmp, a)
    cilkmerge(arr, c, c + quarter - 1, d, low + size - 1, tmp, c)

    cilkmerge(tmp, a, c - 1, c, a + size - 1, arr, a)


def cilksort(arr: MutableSequence) -> None:
    """Sort arr in place."""
    tmp = [None] * len(arr)
    _cilksort(arr, tmp, 0, len(arr))


def scramble_array(arr: MutableSequence, rng: LcgRandom) -> None:
    """Shuffle arr in place by swapping each element with a random one."""
    size = len(arr)
    for i in range(size):
        j = rng.next() % size
        arr[i], arr[j] = arr[j], arr[i]


def fill_array(size: int) -> list[int]:
    """The integers 0..size-1 in a fixed scrambled order."""
    arr = list(range(size))
    scramble_array(arr, LcgRandom(1))
    return arr


_SPECS = [("-n", OptType.LONG), ("-c", OptType.BOOL), ("-h", OptType.BOOL)]


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv if argv is None else argv)
    opts = get_options(args, _SPECS, {"-n": DEFAULT_SIZE})
    if opts["-h"]:
        print("\nUsage: cilksort [-n size] [-c] [-h]\n", file=sys.stderr)
        return -1

    size = max(opts["-n"], 0)
    array: list[int] = []
    elapsed = []
    for _ in range(TIMING_COUNT):
        array = fill_array(size)
        begin = getmark()
        cilksort(array)
        end = getmark()
        elapsed.append(diff_nsec(begin, end))
    print_runtime(elapsed)

    if opts["-c"]:
        print("Now check result ... ")
        success = array == list(range(size))
        print("Sorting successful." if success else "SORTING FAILURE!", end="")

    print("\nCilk Example: cilksort")
    print(f"options: number of elements = {size}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())