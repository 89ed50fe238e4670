"""Trailing-edge debouncing over a pluggable delayed-task primitive."""

from __future__ import annotations

import heapq
import itertools
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

import structlog

_LOGGER = structlog.get_logger(__name__)

Callback = Callable[[], None]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class DelayedTaskScheduler(Protocol):
    def call_later(self, delay: float, callback: Callback) -> TimerHandle: ...


class ThreadingScheduler:
    """Run each callback on its own daemon ``threading.Timer``."""

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


@dataclass(order=True)
class _ManualTask:
    deadline: float
    sequence: int
    callback: Callback = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic scheduler driven by an explicit clock.

    Nothing runs until :meth:`advance` moves ``now`` past a task's deadline,
    which makes debounce timing testable without sleeping.
    """

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self._queue: list[_ManualTask] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        task = _ManualTask(self.now + max(delay, 0.0), next(self._counter), callback)
        heapq.heappush(self._queue, task)
        return task

    @property
    def pending(self) -> int:
        return sum(1 for task in self._queue if not task.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running due tasks in deadline order."""

        target = self.now + seconds
        ran = 0
        while self._queue and self._queue[0].deadline <= target:
            task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            self.now = task.deadline
            task.callback()
            ran += 1
        self.now = target
        return ran

    def run_all(self) -> int:
        ran = 0
        while self._queue:
            task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            self.now = max(self.now, task.deadline)
            task.callback()
            ran += 1
        return ran


class Debouncer:
    """Delay a callback until ``delay`` seconds pass without a new schedule.

    Re-scheduling cancels the pending timer before arming a new one, under a
    lock, so at most one callback is pending. A timer that already fired but
    lost the race with a newer schedule is recognised by its generation
    number and does nothing. Callback executions are serialised.
    """

    def __init__(
        self,
        scheduler: DelayedTaskScheduler,
        delay: float,
        *,
        name: str = "debounce",
    ) -> None:
        self._scheduler = scheduler
        self._delay = delay
        self._name = name
        self._lock = threading.Lock()
        self._run_lock = threading.Lock()
        self._generation = 0
        self._pending: Callback | None = None
        self._handle: TimerHandle | None = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def schedule(self, callback: Callback, delay: float | None = None) -> None:
        wait = self._delay if delay is None else delay
        with self._lock:
            self._cancel_locked()
            self._generation += 1
            generation = self._generation
            self._pending = callback
            self._handle = self._scheduler.call_later(
                wait, lambda: self._fire(generation)
            )

    def cancel_pending(self) -> bool:
        with self._lock:
            had_pending = self._pending is not None
            self._cancel_locked()
            return had_pending

    def flush(self) -> bool:
        """Run the pending callback now instead of waiting for the timer."""

        with self._lock:
            callback = self._pending
            self._cancel_locked()
        if callback is None:
            return False
        self._run(callback)
        return True

    def _cancel_locked(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._pending = None
        self._generation += 1

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._pending is None:
                return
            callback = self._pending
            self._pending = None
            self._handle = None
        self._run(callback)

    def _run(self, callback: Callback) -> None:
        with self._run_lock:
            try:
                callback()
            except Exception:
                _LOGGER.exception("debounce.callback_failed", debouncer=self._name)


__all__ = [
    "Debouncer",
    "DelayedTaskScheduler",
    "ManualScheduler",
    "ThreadingScheduler",
    "TimerHandle",
]
