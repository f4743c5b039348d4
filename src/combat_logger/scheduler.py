from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    """Recurring-callback primitive supplied by the host."""

    def schedule_repeating(self, interval: float, callback: Callable[[], None]) -> int:
        ...

    def cancel(self, handle: int) -> None:
        ...


@dataclass
class _Task:
    interval: float
    callback: Callable[[], None]
    elapsed: float = 0.0


class TickScheduler:
    """Scheduler driven by the host game loop.

    The host calls :meth:`advance` once per server tick with the elapsed time.
    Every repeating task fires once per full interval that has elapsed, on the
    thread that calls ``advance``. Re-entrant calls to ``advance`` (a callback
    advancing the scheduler again) are ignored so at most one callback is ever
    in flight.
    """

    def __init__(self) -> None:
        self._tasks: Dict[int, _Task] = {}
        self._next_handle: int = 1
        self._advancing: bool = False
        self._clock: float = 0.0

    @property
    def clock(self) -> float:
        return self._clock

    def schedule_repeating(self, interval: float, callback: Callable[[], None]) -> int:
        if interval <= 0:
            raise ValueError("interval must be positive")
        handle = self._next_handle
        self._next_handle += 1
        self._tasks[handle] = _Task(interval=float(interval), callback=callback)
        logger.debug("Scheduled repeating task #%d every %.2fs", handle, interval)
        return handle

    def cancel(self, handle: int) -> None:
        if self._tasks.pop(handle, None) is not None:
            logger.debug("Cancelled repeating task #%d", handle)

    def is_scheduled(self, handle: int) -> bool:
        return handle in self._tasks

    def advance(self, dt: float) -> int:
        """Advance the clock by ``dt`` seconds and run due callbacks.

        Returns the number of callbacks invoked.
        """
        if dt < 0:
            raise ValueError("dt must be non-negative")
        if self._advancing:
            logger.debug("advance() re-entered from a callback; ignored")
            return 0
        self._advancing = True
        fired = 0
        try:
            self._clock += dt
            for handle in list(self._tasks):
                task = self._tasks.get(handle)
                if task is None:
                    continue
                task.elapsed += dt
                while task.elapsed >= task.interval:
                    task.elapsed -= task.interval
                    task.callback()
                    fired += 1
                    # The callback may have cancelled its own task.
                    if handle not in self._tasks:
                        break
        finally:
            self._advancing = False
        return fired


class TimerState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class RecurringTimer:
    """Two-state (stopped/running) wrapper around a scheduler handle.

    ``start`` and ``stop`` are idempotent and the timer can be restarted after
    it was stopped.
    """

    def __init__(self, scheduler: Scheduler, callback: Callable[[], None], interval: float = 1.0) -> None:
        self._scheduler = scheduler
        self._callback = callback
        self._interval = interval
        self._handle: Optional[int] = None
        self._state = TimerState.STOPPED

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is TimerState.RUNNING

    def start(self) -> None:
        if self._state is TimerState.RUNNING:
            return
        self._handle = self._scheduler.schedule_repeating(self._interval, self._callback)
        self._state = TimerState.RUNNING
        logger.debug("Timer started (interval=%ss)", self._interval)

    def stop(self) -> None:
        if self._state is TimerState.STOPPED:
            return
        if self._handle is not None:
            self._scheduler.cancel(self._handle)
        self._handle = None
        self._state = TimerState.STOPPED
        logger.debug("Timer stopped")


__all__ = ["Scheduler", "TickScheduler", "TimerState", "RecurringTimer"]
