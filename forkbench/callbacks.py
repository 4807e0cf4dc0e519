"""Registration of callbacks run at runtime start-up and exit."""

from __future__ import annotations

from typing import Callable

from forkbench.frame import MAX_CALLBACKS

Callback = Callable[[], None]


class CallbackRegistry:
    """Init callbacks run in registration order, exit callbacks in reverse."""

    def __init__(self, max_callbacks: int = MAX_CALLBACKS) -> None:
        self.max_callbacks = max_callbacks
        self.init: list[Callback] = []
        self.exit: list[Callback] = []
        self.after_init = False

    def atinit(self, callback: Callback) -> None:
        """Register a start-up callback; refused once start-up has run or when full."""
        if len(self.init) >= self.max_callbacks:
            raise RuntimeError("too many init callbacks")
        if self.after_init:
            raise RuntimeError("runtime already initialized")
        self.init.append(callback)

    def atexit(self, callback: Callback) -> None:
        """Register an exit callback; refused when full."""
        if len(self.exit) >= self.max_callbacks:
            raise RuntimeError("too many exit callbacks")
        self.exit.append(callback)

    def run_init(self) -> None:
        for callback in self.init:
            callback()
        self.after_init = True

    def run_exit(self) -> None:
        for callback in reversed(self.exit):
            callback()