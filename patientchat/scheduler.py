from __future__ import annotations

import asyncio
import random
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol


Callback = Callable[[], object]


class ScheduledTask:
    """Handle for one delayed callback. Runs the callback at most once."""

    def __init__(self, callback: Callback, due: float = 0.0) -> None:
        self._callback = callback
        self.due = due
        self.cancelled = False
        self.done = False
        self._cancel_hook: Optional[Callable[[], None]] = None

    def cancel(self) -> None:
        if self.done or self.cancelled:
            return
        self.cancelled = True
        if self._cancel_hook is not None:
            self._cancel_hook()

    def run(self) -> None:
        if self.done or self.cancelled:
            return
        self.done = True
        self._callback()


class Scheduler(Protocol):
    def schedule(self, delay: float, callback: Callback) -> ScheduledTask:
        ...


class ThreadScheduler:
    def schedule(self, delay: float, callback: Callback) -> ScheduledTask:
        task = ScheduledTask(callback, due=time.monotonic() + delay)
        timer = threading.Timer(max(0.0, delay), task.run)
        timer.daemon = True
        task._cancel_hook = timer.cancel
        timer.start()
        return task


class AsyncioScheduler:
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def schedule(self, delay: float, callback: Callback) -> ScheduledTask:
        loop = self._loop or asyncio.get_running_loop()
        task = ScheduledTask(callback, due=loop.time() + delay)
        handle = loop.call_later(max(0.0, delay), task.run)
        task._cancel_hook = handle.cancel
        return task


class ManualScheduler:
    """Scheduler whose tasks only fire when the caller drives it.

    `clock` defaults to time.monotonic; tests usually keep the internal
    clock and move it forward with `advance`.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock
        self._now = 0.0
        self._tasks: List[ScheduledTask] = []

    def now(self) -> float:
        return self._clock() if self._clock is not None else self._now

    def schedule(self, delay: float, callback: Callback) -> ScheduledTask:
        task = ScheduledTask(callback, due=self.now() + max(0.0, delay))
        self._tasks.append(task)
        return task

    @property
    def pending(self) -> List[ScheduledTask]:
        self._tasks = [t for t in self._tasks if not (t.done or t.cancelled)]
        return list(self._tasks)

    def next_due_in(self) -> Optional[float]:
        pending = self.pending
        if not pending:
            return None
        return max(0.0, min(t.due for t in pending) - self.now())

    def run_due(self) -> int:
        now = self.now()
        due = sorted((t for t in self.pending if t.due <= now), key=lambda t: t.due)
        for task in due:
            task.run()
        return len(due)

    def run_all(self) -> int:
        ran = 0
        while self.pending:
            for task in sorted(self.pending, key=lambda t: t.due):
                task.run()
                ran += 1
        return ran

    def advance(self, seconds: float) -> int:
        if self._clock is not None:
            raise RuntimeError("advance() requires the internal clock")
        self._now += seconds
        return self.run_due()


@dataclass(frozen=True)
class ReplyDelay:
    base: float = 1.2
    jitter: float = 0.8

    def sample(self, rng: Optional[random.Random] = None) -> float:
        r = (rng or random).random()
        return self.base + r * max(0.0, self.jitter)

    @classmethod
    def none(cls) -> "ReplyDelay":
        return cls(base=0.0, jitter=0.0)

