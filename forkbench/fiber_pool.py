"""Two-level pools of execution fibers: per-worker pools backed by a shared global pool."""

from __future__ import annotations

import contextlib
import itertools
import threading
from dataclasses import dataclass, field
from typing import ContextManager, Optional

from forkbench.debug import cilk_assert
from forkbench.frame import DEFAULT_FIBER_POOL_CAP, DEFAULT_STACK_SIZE

# When a pool becomes full (empty), free (allocate) this fraction of it
# back to (from) the parent pool or the system.
BATCH_FRACTION = 2
# The global pool is this much larger than a per-worker pool.
GLOBAL_POOL_RATIO = 10

_fiber_ids = itertools.count()


@dataclass(eq=False)
class Fiber:
    """An execution stack handed out by a pool."""

    stack_size: int
    fiber_id: int = field(default_factory=lambda: next(_fiber_ids))
    live: bool = True

    def release(self) -> None:
        """Return the fiber's stack to the system."""
        self.live = False


@dataclass
class PoolStats:
    """Usage counters of a fiber pool."""

    in_use: int = 0
    max_in_use: int = 0
    max_free: int = 0


class FiberPool:
    """A bounded stack of free fibers, optionally refilled from a parent pool.

    Shared pools are guarded by a lock; private pools belong to one worker.
    """

    def __init__(
        self,
        stack_size: int,
        capacity: int,
        parent: Optional["FiberPool"] = None,
        shared: bool = False,
    ) -> None:
        if capacity < 0:
            raise ValueError("pool capacity must not be negative")
        self.stack_size = stack_size
        self.capacity = capacity
        self.parent = parent
        self.shared = shared
        self.fibers: list[Fiber] = []
        self.stats = PoolStats()
        self._lock = threading.Lock() if shared else None

    def __repr__(self) -> str:
        return (
            f"FiberPool(size={self.size}, capacity={self.capacity}, "
            f"shared={self.shared})"
        )

    @property
    def size(self) -> int:
        """Number of free fibers held."""
        return len(self.fibers)

    def _locked(self) -> ContextManager[object]:
        return self._lock if self._lock is not None else contextlib.nullcontext()

    def _update_max_free(self) -> None:
        self.stats.max_free = max(self.stats.max_free, self.size)

    def _increase_capacity(self, new_size: int) -> None:
        self.capacity = max(self.capacity, new_size)

    def _allocate_batch(self, batch_size: int) -> None:
        """Add batch_size fibers, taking from the parent first, then the system."""
        self._increase_capacity(batch_size + self.size)
        from_parent = 0
        parent = self.parent
        if parent is not None:
            with parent._locked():
                from_parent = min(parent.size, batch_size)
                for _ in range(from_parent):
                    self.fibers.append(parent.fibers.pop())
                parent.stats.in_use += from_parent
                parent.stats.max_in_use = max(parent.stats.max_in_use, parent.stats.in_use)
        for _ in range(batch_size - from_parent):
            self.fibers.append(Fiber(self.stack_size))
        self._update_max_free()

    def _free_batch(self, batch_size: int) -> None:
        """Remove batch_size fibers, giving to the parent what it can hold."""
        cilk_assert(batch_size <= self.size, "batch_size <= pool->size")
        to_parent = 0
        parent = self.parent
        if parent is not None:
            with parent._locked():
                to_parent = min(batch_size, parent.capacity - parent.size)
                for _ in range(to_parent):
                    parent.fibers.append(self.fibers.pop())
                cilk_assert(parent.size <= parent.capacity, "parent->size <= parent->capacity")
                parent.stats.in_use -= to_parent
                parent._update_max_free()
        for _ in range(batch_size - to_parent):
            self.fibers.pop().release()

    def allocate(self) -> Fiber:
        """Take a fiber, refilling a batch from the parent or system when empty."""
        with self._locked():
            if not self.fibers:
                self._allocate_batch(self.capacity // BATCH_FRACTION)
            cilk_assert(self.fibers, "ret")
            fiber = self.fibers.pop()
            self.stats.in_use += 1
            self.stats.max_in_use = max(self.stats.max_in_use, self.stats.in_use)
            return fiber

    def deallocate(self, fiber: Optional[Fiber]) -> None:
        """Return a fiber, first freeing a batch to the parent or system when full."""
        with self._locked():
            if self.size == self.capacity:
                self._free_batch(self.capacity // BATCH_FRACTION)
                cilk_assert(
                    self.capacity - self.size >= self.capacity // BATCH_FRACTION,
                    "(pool->capacity - pool->size) >= (pool->capacity / BATCH_FRACTION)",
                )
            if fiber is not None:
                self.fibers.append(fiber)
                self.stats.in_use -= 1
                self._update_max_free()

    def terminate(self) -> None:
        """Release every free fiber to the system."""
        with self._locked():
            while self.fibers:
                self.fibers.pop().release()

    def destroy(self) -> None:
        """Detach the pool from its parent; it must hold no fibers."""
        cilk_assert(self.size == 0, "pool->size == 0")
        self.parent = None
        self.fibers = []

    def format_stats(self, label: str) -> str:
        """One line of pool statistics under the given label."""
        return (
            f"[{label}] size {self.size:3d}, {self.stats.in_use:4d} used "
            f"{self.stats.max_in_use:4d} max used {self.stats.max_free:4d} max free"
        )


def make_global_pool(
    stack_size: int = DEFAULT_STACK_SIZE,
    fiber_pool_cap: int = DEFAULT_FIBER_POOL_CAP,
) -> FiberPool:
    """The shared pool, larger than a worker pool and initially empty."""
    return FiberPool(stack_size, GLOBAL_POOL_RATIO * fiber_pool_cap, None, shared=True)


def make_worker_pool(
    global_pool: FiberPool,
    fiber_pool_cap: int = DEFAULT_FIBER_POOL_CAP,
) -> FiberPool:
    """A private worker pool backed by the global pool, preloaded to half capacity."""
    pool = FiberPool(global_pool.stack_size, fiber_pool_cap, global_pool, shared=False)
    cilk_assert(
        global_pool.stack_size == pool.stack_size,
        "w->g->fiber_pool.stack_size == pool->stack_size",
    )
    pool._allocate_batch(fiber_pool_cap // BATCH_FRACTION)
    return pool