"""Deterministic timer scheduling on a virtual clock."""
from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, List


@dataclass(order=True, slots=True)
class ScheduledTask:
    """A callback due at a point on the scheduler clock."""

    due: float
    sequence: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)
    fired: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call more than once."""
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)


class Scheduler:
    """Single-threaded timer queue.

    Nothing runs on its own: the owner moves time forward with ``advance`` and
    due callbacks fire in (due time, insertion order) order. Callbacks may
    schedule further tasks; those fire within the same ``advance`` call if
    they fall inside the window.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._queue: List[ScheduledTask] = []
        self._counter = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        """Schedule ``callback`` to run ``delay`` seconds from now."""
        task = ScheduledTask(due=self._now + max(0.0, delay), sequence=next(self._counter), callback=callback)
        heapq.heappush(self._queue, task)
        return task

    def pending(self) -> int:
        """Return the number of live (not cancelled) tasks."""
        return sum(1 for task in self._queue if task.active)

    def next_due(self) -> float | None:
        """Return the due time of the earliest live task, if any."""
        self._drop_cancelled()
        return self._queue[0].due if self._queue else None

    def advance(self, seconds: float) -> int:
        """Move the clock forward and fire every task that falls due. Returns the count fired."""
        if seconds < 0:
            raise ValueError("Cannot move the scheduler clock backwards.")
        deadline = self._now + seconds
        fired = 0
        while True:
            self._drop_cancelled()
            if not self._queue or self._queue[0].due > deadline:
                break
            task = heapq.heappop(self._queue)
            self._now = max(self._now, task.due)
            task.fired = True
            task.callback()
            fired += 1
        self._now = deadline
        return fired

    def run_until_idle(self, limit: int = 10_000) -> int:
        """Fire tasks in order until none remain."""
        fired = 0
        while fired < limit:
            due = self.next_due()
            if due is None:
                break
            fired += self.advance(due - self._now)
        return fired

    def _drop_cancelled(self) -> None:
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)
