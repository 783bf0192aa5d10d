"""Schedulers that pace the CPU turn procedure.

The engine never sleeps. It hands each CPU step to a scheduler together with
the delay the host should leave before running it.
"""

import heapq
import itertools
import logging
import time
from collections import deque
from typing import Callable, Deque, List, Protocol, Tuple

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class Scheduler(Protocol):
    """Anything that can run a callback later."""

    def call_later(self, delay: float, callback: Callback) -> None:
        ...


class ImmediateScheduler:
    """Runs callbacks right away in FIFO order, ignoring delays.

    Callbacks scheduled while another one runs are queued behind it, so a
    whole CPU-only game unwinds in a loop rather than through recursion.
    """

    def __init__(self) -> None:
        self._queue: Deque[Callback] = deque()
        self._draining = False

    def call_later(self, delay: float, callback: Callback) -> None:
        self._queue.append(callback)
        if self._draining:
            return
        self._draining = True
        try:
            while self._queue:
                self._queue.popleft()()
        finally:
            self._draining = False

    @property
    def pending(self) -> int:
        return len(self._queue)


class VirtualClock:
    """Time-ordered queue advanced explicitly by the host or a test."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self._queue: List[Tuple[float, int, Callback]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callback) -> None:
        heapq.heappush(self._queue, (self.now + max(delay, 0.0), next(self._seq), callback))

    @property
    def pending(self) -> int:
        return len(self._queue)

    def next_due(self) -> float:
        return self._queue[0][0] if self._queue else self.now

    def _run_next(self) -> None:
        due, _, callback = heapq.heappop(self._queue)
        self.now = max(self.now, due)
        callback()

    def advance(self, seconds: float) -> int:
        """Move time forward, running everything that falls due. Returns the count run."""
        target = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            self._run_next()
            ran += 1
        self.now = target
        return ran

    def run_until_idle(self, max_steps: int = 100_000) -> int:
        """Run queued callbacks, including ones they schedule, until none remain."""
        ran = 0
        while self._queue:
            if ran >= max_steps:
                logger.warning("Scheduler stopped after %d steps with %d pending", ran, len(self._queue))
                break
            self._run_next()
            ran += 1
        return ran


class PacedScheduler(VirtualClock):
    """VirtualClock whose host waits in real time before each due callback."""

    def __init__(self, speed: float = 1.0) -> None:
        super().__init__()
        self.speed = speed

    def _run_next(self) -> None:
        wait = self.next_due() - self.now
        if wait > 0 and self.speed > 0:
            time.sleep(wait / self.speed)
        super()._run_next()
