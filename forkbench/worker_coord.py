"""Coordination of worker threads entering and leaving parallel regions.

Workers sleep on flags until a parallel region starts. The root worker waits
for a start signal. The thread that began a region waits for it to end.
Idle thieves disengage until more parallelism is requested.
"""

from __future__ import annotations

import threading

from forkbench.debug import cilk_assert
from forkbench.frame import BUSY_LOOP_SPIN

INT_MAX = 2**31 - 1


class WorkerCoordinator:
    """Shared flags and wait queues used to put workers to sleep and wake them."""

    def __init__(self, nworkers: int) -> None:
        if nworkers < 1:
            raise ValueError("number of workers must be positive")
        self.nworkers = nworkers

        self._start_cond = threading.Condition()
        self.start = False

        self._root_cond = threading.Condition()
        self.start_root_worker = 0

        self._cilkified_cond = threading.Condition()
        self.cilkified = False

        self._disengaged_cond = threading.Condition()
        self.disengaged_thieves = 0

    def __repr__(self) -> str:
        return (
            f"WorkerCoordinator(nworkers={self.nworkers}, start={self.start}, "
            f"cilkified={self.cilkified}, disengaged_thieves={self.disengaged_thieves})"
        )

    # Start flag shared by all workers.

    def worker_wait(self) -> None:
        """Block until the start flag is set."""
        with self._start_cond:
            self._start_cond.wait_for(lambda: self.start)

    def start_broadcast(self) -> None:
        """Set the start flag and wake every waiting worker."""
        with self._start_cond:
            self.start = True
            self._start_cond.notify_all()

    def clear_start(self) -> None:
        """Reset the start flag so that workers wait on it again."""
        with self._start_cond:
            self.start = False

    # Root worker.

    def root_worker_wait(self, worker_id: int) -> None:
        """Block while the root-worker value still equals worker_id."""
        with self._root_cond:
            self._root_cond.wait_for(lambda: self.start_root_worker != worker_id)

    def wake_root_worker(self, value: int) -> None:
        """Store a new root-worker value and wake the root worker."""
        with self._root_cond:
            self.start_root_worker = value
            self._root_cond.notify()

    def try_wake_root_worker(self, old_value: int, new_value: int) -> bool:
        """Wake the root worker only if its value is still old_value.

        Returns False when another worker has already changed the value.
        """
        with self._root_cond:
            if self.start_root_worker != old_value:
                return False
            self.start_root_worker = new_value
            self._root_cond.notify()
            return True

    # Parallel-region state.

    def set_cilkified(self) -> None:
        """Mark execution as inside a parallel region."""
        with self._cilkified_cond:
            self.cilkified = True

    def signal_uncilkified(self) -> None:
        """Mark the region finished and wake the thread that started it."""
        with self._cilkified_cond:
            self.cilkified = False
            self._cilkified_cond.notify()

    def wait_while_cilkified(self) -> None:
        """Spin briefly, then block, until the parallel region has ended."""
        for _ in range(BUSY_LOOP_SPIN):
            if not self.cilkified:
                return
        with self._cilkified_cond:
            self._cilkified_cond.wait_for(lambda: not self.cilkified)

    # Disengaging and reengaging thieves.

    def reset_disengaged(self) -> None:
        """Reset the count of thieves allowed to resume stealing."""
        with self._disengaged_cond:
            self.disengaged_thieves = 0

    def request_more_thieves(self, count: int) -> int:
        """Reengage up to count thieves, keeping the total at most half the workers.

        Returns how many thieves were woken.
        """
        cilk_assert(count > 0, "count > 0")
        max_requests = self.nworkers // 2
        with self._disengaged_cond:
            max_to_wake = max_requests - self.disengaged_thieves
            if max_to_wake <= 0:
                return 0
            to_wake = min(max_to_wake, count)
            self.disengaged_thieves += to_wake
            self._disengaged_cond.notify(to_wake)
            return to_wake

    def thief_disengage(self) -> int:
        """Block until a thief may resume, claim that permission, and return
        the count as it stood before the claim."""
        with self._disengaged_cond:
            self._disengaged_cond.wait_for(lambda: self.disengaged_thieves > 0)
            value = self.disengaged_thieves
            self.disengaged_thieves = value - 1
            return value

    def wake_all_disengaged(self) -> None:
        """Let every disengaged thief resume stealing."""
        with self._disengaged_cond:
            self.disengaged_thieves = INT_MAX
            self._disengaged_cond.notify_all()

    def sleep_thieves(self) -> None:
        """Make thieves wait for the next signal to start stealing."""
        self.reset_disengaged()

    def thief_wait(self) -> int:
        """Block a thief until it is signalled to start stealing."""
        return self.thief_disengage()

    def thief_should_wait(self) -> bool:
        """Claim a pending start signal if one exists; True if the thief must wait."""
        with self._disengaged_cond:
            if self.disengaged_thieves > 0:
                self.disengaged_thieves -= 1
                return False
            return True

    def wake_thieves(self) -> None:
        """Signal every thief, all workers but the root, to start stealing."""
        with self._disengaged_cond:
            self.disengaged_thieves = self.nworkers - 1
            self._disengaged_cond.notify_all()