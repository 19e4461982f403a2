"""Timer services used by running machines for timed transitions."""

import asyncio
import heapq
import itertools
import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class TimerHandle:
    """Handle for a scheduled single-shot callback."""

    delay_ms: float
    callback: Callable[[], None]
    cancelled: bool = False
    fired: bool = False
    native: Any = field(default=None, repr=False)

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)


class TimerService(ABC):
    """Abstract single-shot timer service."""

    @abstractmethod
    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay_ms`` milliseconds."""
        ...

    @abstractmethod
    def cancel(self, handle: TimerHandle) -> None:
        """Cancel a pending callback. Cancelling twice is harmless."""
        ...


class ThreadingTimerService(TimerService):
    """Timer service backed by :class:`threading.Timer`.

    Callbacks run on the timer thread; running instances serialize
    them with their own dispatch lock.
    """

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(delay_ms, callback)

        def fire() -> None:
            if handle.cancelled:
                return
            handle.fired = True
            callback()

        timer = threading.Timer(max(delay_ms, 0) / 1000.0, fire)
        timer.daemon = True
        handle.native = timer
        timer.start()
        return handle

    def cancel(self, handle: TimerHandle) -> None:
        if not handle.pending:
            return
        handle.cancelled = True
        if handle.native is not None:
            handle.native.cancel()


class AsyncioTimerService(TimerService):
    """Timer service scheduling callbacks on an asyncio event loop.

    Args:
        loop: Event loop to use; defaults to the running loop at the time
            of each ``schedule`` call
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self.loop = loop

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self.loop or asyncio.get_running_loop()
        handle = TimerHandle(delay_ms, callback)

        def fire() -> None:
            handle.fired = True
            callback()

        handle.native = loop.call_later(max(delay_ms, 0) / 1000.0, fire)
        return handle

    def cancel(self, handle: TimerHandle) -> None:
        if not handle.pending:
            return
        handle.cancelled = True
        if handle.native is not None:
            handle.native.cancel()


class ManualTimerService(TimerService):
    """Timer service driven by a virtual clock.

    Nothing fires until :meth:`advance` moves the clock forward, which
    makes timed behavior deterministic in tests and simulations.
    """

    def __init__(self, now_ms: float = 0.0):
        self.now_ms = now_ms
        self._queue: list[tuple[float, int, TimerHandle]] = []
        self._sequence = itertools.count()

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(delay_ms, callback)
        due = self.now_ms + max(delay_ms, 0)
        heapq.heappush(self._queue, (due, next(self._sequence), handle))
        return handle

    def cancel(self, handle: TimerHandle) -> None:
        if handle.pending:
            handle.cancelled = True

    @property
    def pending(self) -> int:
        """Number of scheduled callbacks that have not fired or been cancelled."""
        return sum(1 for _, _, handle in self._queue if handle.pending)

    def next_due(self) -> float | None:
        """Virtual time of the next pending callback, if any."""
        for due, _, handle in sorted(self._queue):
            if handle.pending:
                return due
        return None

    def advance(self, delta_ms: float) -> int:
        """Move the clock forward, firing callbacks that become due.

        Callbacks scheduled while advancing fire too if they fall due
        before the new time.

        Returns:
            The number of callbacks fired
        """
        if delta_ms < 0:
            raise ValueError("Cannot move the clock backwards")
        deadline = self.now_ms + delta_ms
        fired = 0
        while self._queue and self._queue[0][0] <= deadline:
            due, _, handle = heapq.heappop(self._queue)
            if not handle.pending:
                continue
            self.now_ms = max(self.now_ms, due)
            handle.fired = True
            handle.callback()
            fired += 1
        self.now_ms = deadline
        logger.debug("Clock advanced to %gms, %d timer(s) fired", self.now_ms, fired)
        return fired
