"""Timer scheduling used by level sessions.

The engine only needs two things from its host: run a callback once after a
delay (the win confirmation) and run a callback repeatedly (the countdown).
The desktop shell backs this with Qt timers; ``ManualScheduler`` is a
virtual clock that is advanced explicitly.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol


class TimerHandle(Protocol):
    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle: ...


def to_millis(seconds: float) -> int:
    return int(round(float(seconds) * 1000))


@dataclass(eq=False)
class _ManualTimer:
    due_ms: int
    interval_ms: Optional[int]
    callback: Callable[[], None]
    seq: int
    done: bool = field(default=False)

    @property
    def active(self) -> bool:
        return not self.done

    def cancel(self) -> None:
        self.done = True


class ManualScheduler:
    """Deterministic scheduler driven by :meth:`advance`.

    Time is kept in whole milliseconds so repeated 100 ms ticks add up
    exactly. Callbacks fire in due order; timers due at the same instant
    fire in the order they were scheduled.
    """

    def __init__(self) -> None:
        self._now_ms = 0
        self._timers: List[_ManualTimer] = []
        self._seq = itertools.count()

    @property
    def now(self) -> float:
        """Seconds since the scheduler was created."""
        return self._now_ms / 1000.0

    @property
    def pending(self) -> int:
        """Number of timers that have not fired or been cancelled."""
        return sum(1 for t in self._timers if t.active)

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualTimer:
        delay_ms = to_millis(delay)
        if delay_ms < 0:
            raise ValueError(f"delay must not be negative, got {delay}")
        return self._add(self._now_ms + delay_ms, None, callback)

    def call_every(self, interval: float, callback: Callable[[], None]) -> _ManualTimer:
        interval_ms = to_millis(interval)
        if interval_ms <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        return self._add(self._now_ms + interval_ms, interval_ms, callback)

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing every timer that comes due."""
        step_ms = to_millis(seconds)
        if step_ms < 0:
            raise ValueError(f"cannot move the clock backwards ({seconds})")
        target = self._now_ms + step_ms
        while True:
            due = [t for t in self._timers if t.active and t.due_ms <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due_ms, t.seq))
            self._now_ms = timer.due_ms
            if timer.interval_ms is None:
                timer.done = True
            else:
                timer.due_ms += timer.interval_ms
            timer.callback()
        self._now_ms = target
        self._timers = [t for t in self._timers if t.active]

    def _add(self, due_ms: int, interval_ms: Optional[int], callback: Callable[[], None]) -> _ManualTimer:
        timer = _ManualTimer(due_ms=due_ms, interval_ms=interval_ms, callback=callback, seq=next(self._seq))
        self._timers.append(timer)
        return timer
