"""
Deferred callbacks for the opponent's thinking delay.

AsyncioScheduler runs callbacks on the event loop; ManualScheduler keeps a
virtual clock that tests advance by hand.
"""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Callable, Optional


class ScheduledCall(ABC):
    """Handle to a pending callback."""

    @abstractmethod
    def cancel(self):
        pass

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        pass


class Scheduler(ABC):

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        """Run callback after delay seconds; returns a cancellable handle."""
        pass


class _AsyncioCall(ScheduledCall):
    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self):
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """Schedules on an asyncio event loop (the running loop by default)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        return _AsyncioCall(self.loop.call_later(delay, callback))


class _ManualCall(ScheduledCall):
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """Virtual-time scheduler; nothing runs until advance() is called."""

    def __init__(self):
        self.now = 0.0
        self._queue: list[tuple[float, int, _ManualCall]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        call = _ManualCall(self.now + delay, callback)
        heapq.heappush(self._queue, (call.due, next(self._counter), call))
        return call

    @property
    def pending(self) -> int:
        return sum(1 for _, _, call in self._queue if not call.cancelled)

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, running every callback that falls due.

        Callbacks scheduled while advancing run too if they fall inside the
        window. Returns the number of callbacks run.
        """
        target = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, call = heapq.heappop(self._queue)
            self.now = due
            if call.cancelled:
                continue
            call.callback()
            ran += 1
        self.now = target
        return ran
