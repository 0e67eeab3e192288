"""
Scheduler - "Call this later, unless cancelled."

The session needs exactly one primitive from its host: run a callback
after a delay, with a handle that can cancel it. Two hosts exist:

- AsyncioScheduler: the running event loop (API server)
- ManualScheduler: a virtual clock moved by hand (tests, terminal play)

Both run callbacks on the caller's thread; nothing here is thread-safe.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable
import asyncio
import heapq
import itertools


class TimerHandle(ABC):
    """A scheduled callback that can be cancelled."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call twice."""

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        ...


class Scheduler(ABC):
    """Host primitive for delayed callbacks."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle:
        """Run callback once after `delay` seconds."""


class _AsyncioHandle(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """
    Schedules on an asyncio event loop.

    If no loop is given, the loop running at call time is used,
    so call_later must be invoked from inside a coroutine or callback.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return _AsyncioHandle(loop.call_later(delay, callback))


@dataclass
class ManualHandle(TimerHandle):
    """Handle for a ManualScheduler entry."""
    deadline: float
    callback: Callable[[], Any]
    _cancelled: bool = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass
class ManualScheduler(Scheduler):
    """
    Virtual clock for deterministic timing.

    Usage:
        scheduler = ManualScheduler()
        session = Session(..., scheduler=scheduler)

        # ... answer every card ...
        scheduler.advance(2.0)  # reveal timer fires here
    """
    now: float = 0.0
    _queue: list[tuple[float, int, ManualHandle]] = field(default_factory=list)
    _counter: Any = field(default_factory=itertools.count)

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle:
        handle = ManualHandle(deadline=self.now + delay, callback=callback)
        heapq.heappush(self._queue, (handle.deadline, next(self._counter), handle))
        return handle

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward and run every callback that came due.

        Cancelled entries are dropped without running.
        Returns the number of callbacks run.
        """
        target = self.now + seconds
        ran = 0

        while self._queue and self._queue[0][0] <= target:
            deadline, _, handle = heapq.heappop(self._queue)
            self.now = deadline
            if handle.cancelled:
                continue
            handle.callback()
            ran += 1

        self.now = target
        return ran

    @property
    def pending(self) -> int:
        """Number of scheduled, uncancelled callbacks."""
        return sum(1 for _, _, h in self._queue if not h.cancelled)
