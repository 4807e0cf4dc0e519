"""Runtime alerts, debug levels, assertions and fatal errors."""

from __future__ import annotations

import enum
import sys
import threading
from typing import Optional, TextIO

DEFAULT_ALERT_LVL = 0x3D03
DEFAULT_DEBUG_LVL = 0xFF
DEFAULT_LOG_SIZE = 5000
UNBUFFERED_ALERTS = 0x80000000
_BODY_LIMIT = 199


class AlertFlag(enum.IntFlag):
    """Categories of runtime alert messages."""

    NONE = 0x0
    FIBER = 0x001
    FIBER_SUMMARY = 0x002
    MEMORY = 0x004
    SYNC = 0x010
    SCHED = 0x020
    STEAL = 0x040
    RETURN = 0x080
    EXCEPT = 0x100
    CFRAME = 0x200
    REDUCE = 0x400
    REDUCE_ID = 0x800
    BOOT = 0x1000
    START = 0x2000
    CLOSURE = 0x4000


class DebugFlag(enum.IntFlag):
    """Categories of runtime debug checks."""

    MEMORY = 0x01
    MEMORY_SLOW = 0x02
    FIBER = 0x04
    REDUCER = 0x08


class CilkBug(Exception):
    """An internal runtime invariant was violated."""


class CilkFatalError(Exception):
    """A fatal runtime error; the program should exit with status 1."""

    exit_code = 1


def _worker_prefix(worker_id: Optional[int]) -> str:
    return "" if worker_id is None else f"[W{worker_id:02d}]: "


def cilkrts_bug(worker_id: Optional[int], message: str) -> None:
    """Raise CilkBug, tagged with the worker id when one is given."""
    raise CilkBug(_worker_prefix(worker_id) + message)


def die(message: str) -> None:
    """Raise a fatal error with the runtime's message format."""
    raise CilkFatalError(f"Fatal error: {message}")


def cilk_assert(condition: object, message: str, worker_id: Optional[int] = None) -> None:
    """Raise CilkBug if the condition does not hold."""
    if not condition:
        cilkrts_bug(worker_id, f"cilk assertion failed: {message}")


class AlertLog:
    """Alert and debug levels, with alert messages batched before writing."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        compiled_level: int = DEFAULT_ALERT_LVL,
        log_size: int = DEFAULT_LOG_SIZE,
    ) -> None:
        self._stream = stream
        self.compiled_level = compiled_level
        self.log_size = log_size
        self.alert_level = 0
        self.debug_level = 0
        self._buffer: Optional[list[str]] = None
        self._offset = 0
        self._lock = threading.Lock()

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    @property
    def buffered(self) -> bool:
        return self._buffer is not None

    def set_alert_level(self, level: int) -> None:
        """Set the alert level; 0 flushes, the high bit disables batching."""
        self.alert_level = level
        if level == 0:
            self.flush()
            return
        if level & UNBUFFERED_ALERTS:
            return
        if self._buffer is None:
            self._buffer = []
            self._offset = 0

    def set_debug_level(self, level: int) -> None:
        self.debug_level = level

    def alert_enabled(self, flag: int) -> bool:
        return bool(self.alert_level & self.compiled_level & flag)

    def debug_enabled(self, flag: int) -> bool:
        return bool(self.debug_level & DEFAULT_DEBUG_LVL & flag)

    def alert(self, flag: int, worker_id: Optional[int], message: str) -> None:
        """Record an alert message if its category is enabled."""
        if self.compiled_level == 0 or not self.alert_enabled(flag):
            return
        prefix = _worker_prefix(worker_id)
        body = message[:_BODY_LIMIT]
        line = f"{prefix}{body}\n"
        with self._lock:
            if self._buffer is None:
                self.stream.write(line)
                return
            if self._offset + len(line) >= self.log_size:
                self.stream.write("".join(self._buffer))
                self._buffer.clear()
                self._offset = 0
            self._buffer.append(line)
            self._offset += len(line)

    def flush(self) -> None:
        """Write pending messages and stop batching."""
        if self.compiled_level == 0 or self._buffer is None:
            return
        if self._offset > 0:
            sys.stdout.flush()
            self.stream.write("".join(self._buffer))
        self._buffer = None
        self._offset = 0