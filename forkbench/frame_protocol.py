"""Frame entry, detach and return protocol on a worker's frame deque."""

from __future__ import annotations

import enum
from typing import Any, Optional

from forkbench.debug import cilk_assert
from forkbench.frame import DEFAULT_DEQ_DEPTH, FRAME_MAGIC, FrameFlag, StackFrame

LARGE_LOOP_GRAINSIZE = 2048
_GRAINSIZE_BITS = (8, 16, 32, 64)


class LeaveAction(enum.IntFlag):
    """What the scheduler must do after a spawning function returns."""

    NONE = 0
    END_REGION = 1  # the oldest frame returned: the parallel region is over
    SET_RETURN = 2  # a stolen frame returned: its call parent's closure resumes


class Worker:
    """A worker's view of the cactus stack and its deque of detached parents.

    The deque holds the parents of detached frames between ``head`` and
    ``tail``; a thief raises ``exc`` to claim the oldest of them.
    """

    def __init__(self, worker_id: int, deque_depth: int = DEFAULT_DEQ_DEPTH) -> None:
        if deque_depth < 2:
            raise ValueError("deque depth must be at least 2")
        self.worker_id = worker_id
        self.deque_depth = deque_depth
        self.deque: list[Optional[StackFrame]] = [None] * deque_depth
        self.head = 0
        self.exc = 0
        self.tail = 0
        self.current_stack_frame: Optional[StackFrame] = None
        self.extension: Any = None

    def __repr__(self) -> str:
        return f"Worker(worker_id={self.worker_id}, tail={self.tail})"

    @property
    def pending_parents(self) -> list[StackFrame]:
        """Parents of currently detached frames, oldest first."""
        return [sf for sf in self.deque[self.head:self.tail] if sf is not None]

    def _check(self, condition: object, message: str) -> None:
        cilk_assert(condition, message, self.worker_id)

    def _push_frame(self, sf: StackFrame) -> None:
        sf.flags = FrameFlag.NONE
        sf.magic = FRAME_MAGIC
        sf.call_parent = self.current_stack_frame
        sf.worker = self
        self.current_stack_frame = sf

    def _pop_frame(self, sf: StackFrame) -> Optional[StackFrame]:
        parent = sf.call_parent
        self.current_stack_frame = parent
        sf.call_parent = None
        return parent

    def enter_frame(self, sf: StackFrame) -> None:
        """Initialize the frame of a spawning function and make it current."""
        self._push_frame(sf)

    def enter_frame_helper(self, sf: StackFrame) -> None:
        """Initialize the frame of a spawn helper and make it current."""
        self._push_frame(sf)

    def detach(self, sf: StackFrame) -> None:
        """Mark a spawn helper detached, making its parent available to thieves."""
        self._check(sf.check_magic(), "CHECK_CILK_FRAME_MAGIC(w->g, sf)")
        self._check(sf.worker is self, "sf->worker == __cilkrts_get_tls_worker()")
        self._check(self.current_stack_frame is sf, "w->current_stack_frame == sf")

        parent = sf.call_parent
        sf.flags |= FrameFlag.DETACHED
        self._check(self.tail + 1 < self.deque_depth, "(tail + 1) < w->ltq_limit")
        self.deque[self.tail] = parent
        self.tail += 1

    def leave_frame(self, sf: StackFrame) -> LeaveAction:
        """Return from a spawning function that is not a spawn helper."""
        self._check(sf.check_magic(), "CHECK_CILK_FRAME_MAGIC(w->g, sf)")
        self._check(sf.worker is self, "sf->worker == __cilkrts_get_tls_worker()")

        self._pop_frame(sf)
        flags = sf.flags
        action = LeaveAction.NONE
        if flags & FrameFlag.LAST:
            action |= LeaveAction.END_REGION
        if flags == FrameFlag.NONE:
            return action

        self._check(not flags & FrameFlag.DETACHED, "!(flags & CILK_FRAME_DETACHED)")
        if flags & FrameFlag.STOLEN:
            action |= LeaveAction.SET_RETURN
        return action

    def leave_frame_helper(self, sf: StackFrame) -> bool:
        """Return from a spawn helper, undoing its detach.

        Returns True when a thief has claimed the parent, in which case the
        return must go through the runtime's exception handler.
        """
        self._check(sf.check_magic(), "CHECK_CILK_FRAME_MAGIC(w->g, sf)")
        self._check(sf.worker is self, "sf->worker == __cilkrts_get_tls_worker()")

        self._pop_frame(sf)
        self._check(sf.flags & FrameFlag.DETACHED, "sf->flags & CILK_FRAME_DETACHED")

        self.tail -= 1
        self.deque[self.tail] = None
        exc = self.exc
        sf.flags &= ~FrameFlag.DETACHED
        return exc > self.tail


def cilk_for_grainsize(n: int, nworkers: int, bits: int = 64) -> int:
    """Grainsize for a parallel loop of n iterations over an unsigned type of ``bits`` bits.

    The grainsize is n // (8 * nworkers), at least 1 and, except for the
    8-bit type, at most 2048.
    """
    if bits not in _GRAINSIZE_BITS:
        raise ValueError(f"unsupported integer width: {bits}")
    if nworkers <= 0:
        raise ValueError("number of workers must be positive")
    if not 0 <= n < (1 << bits):
        raise ValueError(f"{n} does not fit in an unsigned {bits}-bit integer")
    small = n // (8 * nworkers)
    if small <= 1:
        return 1
    if bits == 8:
        return small
    return min(LARGE_LOOP_GRAINSIZE, small)