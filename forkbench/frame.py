"""Stack-frame records, frame flags and runtime configuration constants."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

CILKRTS_VERSION = 0x0
ABI_VERSION = 4
CILK_DEBUG = True
CILK_STATS = False
BOSS_THIEF = 1
CACHE_LINE = 64
PROC_SPEED_IN_GHZ = 2.2
BUSY_LOOP_SPIN = 4096
ENABLE_THIEF_SLEEP = True
ENABLE_EXTENSION = True
ENABLE_WORKER_PINNING = False
MIN_NUM_PAGES_PER_STACK = 4
MAX_NUM_PAGES_PER_STACK = 2000
MAX_STACK_ALIGN = 64
DEFAULT_NPROC = 0  # 0 means "number of cores available"
DEFAULT_DEQ_DEPTH = 1024
DEFAULT_STACK_SIZE = 0x100000
DEFAULT_FIBER_POOL_CAP = 8
DEFAULT_REDUCER_LIMIT = 1024
DEFAULT_FORCE_REDUCE = False
MAX_CALLBACKS = 32

_UINT32_MASK = 0xFFFFFFFF

# Order in which field offsets are folded into the frame magic number.
MAGIC_FIELD_ORDER = ("worker", "ctx", "magic", "flags", "call_parent", "extension")

# Layout of the 64-bit frame record, with a five-word jump buffer.
FRAME_FIELD_OFFSETS: dict[str, int] = {
    "flags": 0,
    "magic": 4,
    "call_parent": 8,
    "worker": 16,
    "ctx": 24,
    "extension": 64,
}


class FrameFlag(enum.IntFlag):
    """Bits of a stack frame's flags field."""

    NONE = 0x000
    STOLEN = 0x001
    UNSYNCHED = 0x002
    DETACHED = 0x004
    EXCEPTION_PENDING = 0x008
    EXCEPTING = 0x010
    LAST = 0x080
    SYNC_READY = 0x200


def compute_frame_magic(offsets: Mapping[str, int], abi_version: int = ABI_VERSION) -> int:
    """Hash the ABI version and the frame field offsets into a 32-bit magic number."""
    missing = [name for name in MAGIC_FIELD_ORDER if name not in offsets]
    if missing:
        raise ValueError(f"missing frame field offsets: {', '.join(missing)}")
    magic = abi_version
    for name in MAGIC_FIELD_ORDER:
        magic = magic * 13 + offsets[name]
    return magic & _UINT32_MASK


FRAME_MAGIC = compute_frame_magic(FRAME_FIELD_OFFSETS)


@dataclass
class StackFrame:
    """Frame descriptor of a spawning function."""

    flags: FrameFlag = FrameFlag.NONE
    magic: int = FRAME_MAGIC
    call_parent: Optional["StackFrame"] = None
    worker: Any = None
    extension: Any = None
    ctx: Any = field(default=None, repr=False)

    def set_stolen(self) -> None:
        self.flags |= FrameFlag.STOLEN

    def set_unsynced(self) -> None:
        self.flags |= FrameFlag.UNSYNCHED

    def set_synced(self) -> None:
        self.flags &= ~FrameFlag.UNSYNCHED

    def stolen(self) -> bool:
        return bool(self.flags & FrameFlag.STOLEN)

    def synced(self) -> bool:
        return not self.flags & FrameFlag.UNSYNCHED

    def not_stolen(self) -> bool:
        return not self.flags & FrameFlag.STOLEN

    def check_magic(self) -> bool:
        """True if this frame carries the expected magic number."""
        return self.magic == FRAME_MAGIC