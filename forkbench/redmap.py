"""Sparse-accumulator map from reducer hyperobjects to their views."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from forkbench.debug import cilk_assert, cilkrts_bug


class MergeKind(enum.Enum):
    """Which side of a merge the map being merged in stands on."""

    UNORDERED = 0
    INTO_LEFT = 1
    INTO_RIGHT = 2


@dataclass(eq=False)
class Hyperobject:
    """A reducer identity: its slot in the map and how two views combine.

    ``reduce_fn(left, right)`` returns the combined view; a return value of
    None means the left view was updated in place.
    """

    id_num: int
    reduce_fn: Callable[[Any, Any], Any]
    valid: bool = True
    view_size: int = 0


@dataclass
class ViewInfo:
    """One slot of the map: a view and the hyperobject it belongs to."""

    view: Any = None
    hyper: Optional[Hyperobject] = None

    def is_empty(self) -> bool:
        return self.hyper is None and self.view is None

    def clear(self) -> None:
        self.view = None
        self.hyper = None


@dataclass
class ReducerMap:
    """Views of reducers for one strand, indexed by hyperobject id."""

    capacity: int
    num_of_vinfo: int = field(default=0, init=False)
    num_of_logs: int = field(default=0, init=False)
    merging: bool = field(default=False, init=False)
    log: list[int] = field(init=False, repr=False)
    vinfo: list[ViewInfo] = field(init=False, repr=False)

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("reducer map capacity must be positive")
        self.capacity = capacity
        self.num_of_vinfo = 0
        self.num_of_logs = 0
        self.merging = False
        self.vinfo = [ViewInfo() for _ in range(capacity)]
        self.log = [0] * (capacity // 2)

    @property
    def _log_limit(self) -> int:
        return self.capacity // 2

    @property
    def log_valid(self) -> bool:
        """True while the log still lists every occupied slot."""
        return self.num_of_logs <= self._log_limit

    def log_id(self, hyper_id: int) -> None:
        """Account for a newly occupied slot, recording it in the log."""
        cilk_assert(self.num_of_logs <= self._log_limit + 1, "log overflow")
        cilk_assert(self.num_of_vinfo <= self.capacity, "view count overflow")
        if self.num_of_vinfo == self.capacity:
            cilkrts_bug(
                None,
                f"SPA resize not supported yet! (vinfo = spa_cap = {self.capacity})",
            )
        if self.num_of_logs < self._log_limit:
            self.log[self.num_of_logs] = hyper_id
            self.num_of_logs += 1
        elif self.num_of_logs == self._log_limit:
            self.num_of_logs += 1  # the log no longer covers every slot
        self.num_of_vinfo += 1

    def unlog_id(self, hyper_id: int) -> None:
        """Empty a slot; once no views remain the log is reset."""
        cilk_assert(self.num_of_logs <= self._log_limit + 1, "log overflow")
        cilk_assert(self.num_of_vinfo <= self.capacity, "view count overflow")
        cilk_assert(hyper_id < self.capacity, "hyperobject id out of range")
        self.vinfo[hyper_id].clear()
        self.num_of_vinfo -= 1
        if self.num_of_vinfo == 0:
            self.num_of_logs = 0

    def insert(self, hyper: Hyperobject, view: Any) -> ViewInfo:
        """Store a view for a hyperobject, returning its slot."""
        cilk_assert(0 <= hyper.id_num < self.capacity, "hyperobject id out of range")
        slot = self.vinfo[hyper.id_num]
        if slot.hyper is None:
            cilk_assert(slot.view is None, "empty slot holds a view")
            self.log_id(hyper.id_num)
            slot.hyper = hyper
        else:
            cilk_assert(slot.hyper is hyper, "slot belongs to another hyperobject")
        slot.view = view
        return slot

    def lookup(self, hyper: Hyperobject) -> Optional[ViewInfo]:
        """The slot holding the hyperobject's view, or None."""
        if not hyper.valid:
            return None
        if hyper.id_num >= self.capacity:
            return None
        slot = self.vinfo[hyper.id_num]
        if slot.is_empty():
            return None
        return slot

    def _merge_slot(self, other: "ReducerMap", index: int, kind: MergeKind) -> None:
        theirs = other.vinfo[index]
        hyper = theirs.hyper
        if hyper is None:
            return
        mine = self.vinfo[index]
        if mine.hyper is not None:
            cilk_assert(hyper is mine.hyper, "merging views of different hyperobjects")
            if kind is MergeKind.INTO_RIGHT:
                mine.view, theirs.view = theirs.view, mine.view
            result = hyper.reduce_fn(mine.view, theirs.view)
            if result is not None:
                mine.view = result
            theirs.clear()
        else:
            cilk_assert(mine.view is None, "empty slot holds a view")
            self.vinfo[index], other.vinfo[index] = theirs, mine
            self.log_id(index)

    def merge(self, other: "ReducerMap", kind: MergeKind) -> None:
        """Fold another map's views into this one and destroy the other map."""
        self.merging = True
        other.merging = True

        if other.num_of_vinfo == 0:
            other.destroy()
            self.merging = False
            return

        if other.log_valid:
            indices = other.log[: other.num_of_logs]
        else:
            indices = range(other.capacity)
        for index in indices:
            self._merge_slot(other, index, kind)

        other.num_of_vinfo = 0
        other.num_of_logs = 0
        self.merging = False
        other.merging = False
        other.destroy()

    def is_empty(self) -> bool:
        return self.num_of_vinfo == 0

    def num_views(self) -> int:
        return self.num_of_vinfo

    def is_leftmost(self) -> bool:
        return False

    def destroy(self) -> None:
        """Release every slot and the log."""
        for slot in self.vinfo:
            slot.clear()
        self.vinfo = []
        self.log = []
        self.num_of_vinfo = 0
        self.num_of_logs = 0