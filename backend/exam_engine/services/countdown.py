"""Countdown timer driven by a tick source."""

import logging
from enum import Enum
from typing import Callable

from .clock import Clock

logger = logging.getLogger(__name__)


class CountdownState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class CountdownTimer:
    """Counts a duration down to zero, one tick per second.

    Listeners receive the remaining seconds after every tick and exactly one
    completion event once the remaining time reaches zero. Each ``start`` bumps
    a generation counter; ticks armed for an older generation are dropped, so
    a restarted timer never reports ticks from the countdown it replaced.
    """

    def __init__(self, clock: Clock, name: str = "countdown"):
        self.name = name
        self._source = clock.create_source()
        self._generation = 0
        self._remaining = 0
        self._state = CountdownState.IDLE
        self._tick_listeners: list[Callable[[int], None]] = []
        self._complete_listeners: list[Callable[[], None]] = []

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def state(self) -> CountdownState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def subscribe(
        self,
        on_tick: Callable[[int], None] | None = None,
        on_complete: Callable[[], None] | None = None,
    ) -> Callable[[], None]:
        """Register listeners. Returns a callable that removes them again."""
        if on_tick:
            self._tick_listeners.append(on_tick)
        if on_complete:
            self._complete_listeners.append(on_complete)

        def unsubscribe() -> None:
            if on_tick in self._tick_listeners:
                self._tick_listeners.remove(on_tick)
            if on_complete in self._complete_listeners:
                self._complete_listeners.remove(on_complete)

        return unsubscribe

    def start(self, duration: int) -> None:
        """(Re)start the countdown from ``duration`` seconds."""
        if duration < 0:
            raise ValueError(f"Countdown duration must not be negative: {duration}")
        self.cancel()
        self._remaining = duration
        if duration == 0:
            self._complete()
            return
        self._state = CountdownState.RUNNING
        self._arm()

    def pause(self) -> None:
        if self._state != CountdownState.RUNNING:
            return
        self._source.stop()
        self._state = CountdownState.PAUSED

    def resume(self) -> None:
        if self._state != CountdownState.PAUSED:
            return
        if self._remaining <= 0:
            self._complete()
            return
        self._state = CountdownState.RUNNING
        self._arm()

    def cancel(self) -> None:
        """Stop without a completion event. Pending ticks are discarded."""
        self._generation += 1
        self._source.cancel()
        if self._state != CountdownState.COMPLETED:
            self._state = CountdownState.IDLE

    def _arm(self) -> None:
        generation = self._generation
        self._source.start(lambda: self._on_tick(generation))

    def _on_tick(self, generation: int) -> None:
        if generation != self._generation or self._state != CountdownState.RUNNING:
            logger.debug(f"{self.name}: dropping stale tick (generation {generation})")
            return

        self._remaining -= 1
        for listener in list(self._tick_listeners):
            listener(self._remaining)

        # A tick listener may have cancelled or restarted this timer. Pausing on
        # the last tick still completes.
        if generation != self._generation:
            return
        if self._remaining <= 0:
            self._complete()

    def _complete(self) -> None:
        self._source.stop()
        self._state = CountdownState.COMPLETED
        self._remaining = 0
        for listener in list(self._complete_listeners):
            listener()
