# forkbench

`forkbench` models the bookkeeping of a work-stealing fork-join runtime
(stack frames, reducer maps, fiber pools, worker sleep/wake coordination)
and ships four divide-and-conquer benchmarks.

The package has no runtime dependencies and needs Python 3.10 or later.

## Installation

```
pip install forkbench
```

To run the test suite, install the `test` extra and run `pytest`:

```
pip install "forkbench[test]"
pytest
```

## Benchmarks from the command line

Four commands are installed:

```
forkbench-fib 30
forkbench-nqueens 8
forkbench-cilksort -n 100000 -c
forkbench-mm-dac -n 64 -c
```

- `forkbench-fib <n>` computes the n-th Fibonacci number by the doubly
  recursive definition and prints `Result: <value>` and the running time.
  Any other number of arguments prints a usage line and exits with status 1.
- `forkbench-nqueens <n>` counts the solutions of the n-queens problem
  (8 gives 92, 10 gives 724). Without an argument it prints a usage message
  and exits.
- `forkbench-cilksort [-n size] [-c] [-h]` fills an array with a fixed
  scrambled permutation of `0 .. size-1` (10,000,000 by default), sorts it
  with a quarter-split mergesort whose merges split at a median found by
  binary search, and with `-c` checks that the result is in order.
- `forkbench-mm-dac [-n size] [-c] [-h]` multiplies two pseudo-random
  `size x size` byte matrices (1024 by default) with a recursive
  divide-and-conquer algorithm. The size must be a power of two. With `-c`
  the result is checked against a reference multiply.

Options are scanned by `forkbench.getoptions.get_options`; arguments it
does not recognise are reported as `Invalid option: ...` on standard output.
Each command makes one timed run and prints its running time.

## Using the library

### Benchmarks as functions

```python
from forkbench.fib import fib
from forkbench.nqueens import nqueens, ok
from forkbench.cilksort import cilksort, fill_array

fib(10)         # 55
nqueens(8)      # 92
ok([1, 3, 0])   # True: no two queens attack each other

data = fill_array(10_000)   # a scrambled permutation of 0..9999
cilksort(data)              # sorts in place
```

`forkbench.cilksort` also exposes its building blocks: `med3`,
`insertion_sort`, `seqquick`, `seqmerge`, `binsplit`, `cilkmerge`,
`scramble_array` and the `LcgRandom` generator.

`forkbench.mm_dac` provides `mm_dac` and `mm_serial` (both add `a × b` into
`c` for flat row-major `n x n` lists), `rand_matrix` and `is_power_of_2`.

### Runtime pieces

- `forkbench.frame`: `StackFrame` and `FrameFlag` describe a spawning
  function's frame (stolen, unsynced, detached and similar states);
  `compute_frame_magic` folds an ABI version and field offsets into the
  32-bit value that `StackFrame.check_magic` compares against. The module
  also holds the runtime's default configuration constants.
- `forkbench.frame_protocol`: `Worker` performs the enter, detach and leave
  steps of a frame on its own deque of detached parents.
  `Worker.leave_frame` returns a `LeaveAction` saying whether the region
  ended or a stolen frame returned; `Worker.leave_frame_helper` returns
  True when a thief has claimed the parent. `cilk_for_grainsize` computes a
  parallel-loop grain size from the iteration count, worker count and
  integer width.
- `forkbench.redmap`: `ReducerMap` holds one `ViewInfo` slot per
  `Hyperobject` id, with `insert`, `lookup`, and `merge`, which folds
  another map in using `MergeKind.INTO_LEFT` or `MergeKind.INTO_RIGHT`
  order and then destroys it.
- `forkbench.fiber_pool`: `FiberPool` is a bounded pool of `Fiber` records
  that refills from, and spills to, a parent pool in half-capacity batches;
  `make_global_pool` and `make_worker_pool` build the shared and per-worker
  pools, and `PoolStats` tracks in-use and free counts.
- `forkbench.worker_coord`: `WorkerCoordinator` uses thread conditions to
  put worker threads to sleep and wake them as a parallel region starts and
  ends, and limits re-engaged thieves to half the workers.
- `forkbench.callbacks`: `CallbackRegistry` runs init callbacks in
  registration order and exit callbacks in reverse order, refusing new
  registrations with `RuntimeError` when full or after start-up.
- `forkbench.debug`: `AlertLog` batches diagnostic messages by category
  (`AlertFlag`, `DebugFlag`); `cilk_assert` and `cilkrts_bug` raise
  `CilkBug`, and `die` raises `CilkFatalError`.
- `forkbench.ktiming`: `getmark`, `diff_nsec`, `diff_sec`,
  `format_runtime`, `print_runtime` and `print_runtime_summary` time
  and report runs.
- `forkbench.getoptions`: `get_options` reads `-flag value` style options
  with types from `OptType`.

## What the package does not do

There is no scheduler. The runtime pieces keep the records and state
transitions of frames, deques, reducer maps and pools, but nothing steals
work or runs tasks on several threads; `Fiber` objects are records, not real
stacks. The benchmarks run serially in a single thread, so their timings
measure sequential Python execution.