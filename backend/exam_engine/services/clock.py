"""Tick sources that drive countdown timers.

A ``Clock`` hands out ``TickSource`` objects. Each source calls its callback
once per interval while running. ``SimulatedClock`` is advanced by hand, which
keeps timer tests free of real sleeps. ``AsyncioClock`` schedules real ticks on
the running event loop.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class TickSource(ABC):
    """One periodic tick emitter."""

    def __init__(self) -> None:
        self._callback: TickCallback | None = None

    @property
    @abstractmethod
    def running(self) -> bool:
        ...

    def start(self, on_tick: TickCallback) -> None:
        """Begin (or continue) emitting ticks to ``on_tick``."""
        self.stop()
        self._callback = on_tick
        self._arm()

    def stop(self) -> None:
        """Stop emitting. ``start`` may be called again later."""
        if self.running:
            self._disarm()

    def cancel(self) -> None:
        """Stop emitting and forget the callback."""
        self.stop()
        self._callback = None

    def _emit(self) -> None:
        if self._callback is not None:
            self._callback()

    @abstractmethod
    def _arm(self) -> None:
        ...

    @abstractmethod
    def _disarm(self) -> None:
        ...


class Clock(ABC):
    @abstractmethod
    def create_source(self) -> TickSource:
        ...


class SimulatedTickSource(TickSource):
    def __init__(self) -> None:
        super().__init__()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def _arm(self) -> None:
        self._running = True

    def _disarm(self) -> None:
        self._running = False

    def fire(self) -> None:
        if self._running:
            self._emit()


class SimulatedClock(Clock):
    """Manually advanced clock.

    Sources tick in creation order within a single simulated second, and every
    callback runs to completion before the next source is ticked.
    """

    def __init__(self) -> None:
        self._sources: list[SimulatedTickSource] = []
        self.elapsed = 0

    def create_source(self) -> SimulatedTickSource:
        source = SimulatedTickSource()
        self._sources.append(source)
        return source

    def advance(self, ticks: int = 1) -> None:
        for _ in range(ticks):
            self.elapsed += 1
            for source in list(self._sources):
                source.fire()


class AsyncioTickSource(TickSource):
    """Ticks on an event loop.

    Stopping keeps whatever was left of the current interval, so a pause and
    resume does not restart the second. ``cancel`` forgets it.
    """

    def __init__(self, interval: float, loop: asyncio.AbstractEventLoop | None = None) -> None:
        super().__init__()
        self._interval = interval
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._deadline = 0.0
        self._leftover: float | None = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        super().cancel()
        self._leftover = None

    def _arm(self) -> None:
        loop = self._loop or asyncio.get_running_loop()
        self._loop = loop
        delay = self._interval if self._leftover is None else self._leftover
        self._leftover = None
        self._deadline = loop.time() + delay
        self._handle = loop.call_at(self._deadline, self._fire)

    def _disarm(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            self._leftover = max(0.0, self._deadline - self._loop.time())

    def _fire(self) -> None:
        # Schedule against the previous deadline so ticks do not drift.
        self._deadline += self._interval
        self._handle = self._loop.call_at(self._deadline, self._fire)
        self._emit()


class AsyncioClock(Clock):
    """Real-time clock backed by ``loop.call_at``."""

    def __init__(self, interval: float = 1.0, loop: asyncio.AbstractEventLoop | None = None) -> None:
        if interval <= 0:
            raise ValueError("Tick interval must be positive")
        self.interval = interval
        self._loop = loop

    def create_source(self) -> AsyncioTickSource:
        return AsyncioTickSource(self.interval, self._loop)
