from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from xorpuzzle.core.scheduler import Scheduler, TimerHandle, to_millis

logger = logging.getLogger(__name__)

TICK_INTERVAL = 0.1


@dataclass(frozen=True)
class ResourceLimits:
    """Exhaustible budgets for a level. Either may be left unset."""

    max_toggles: Optional[int] = None
    time_limit_seconds: Optional[float] = None

    def __post_init__(self) -> None:
        if self.max_toggles is not None and int(self.max_toggles) <= 0:
            raise ValueError(f"max_toggles must be positive, got {self.max_toggles}")
        if self.time_limit_seconds is not None and to_millis(self.time_limit_seconds) <= 0:
            raise ValueError(
                f"time_limit_seconds must be at least 1 ms, got {self.time_limit_seconds}"
            )

    @property
    def is_empty(self) -> bool:
        return self.max_toggles is None and self.time_limit_seconds is None


class ResourceGovernor:
    """Tracks a step budget and/or a countdown and reports exhaustion.

    The step budget allows exactly ``max_toggles`` moves: the toggle *after*
    the budget is spent is the one that fails. The countdown ticks every
    ``tick_interval`` seconds; elapsed time is kept in milliseconds so the
    limit is reached on an exact tick. Exhaustion is reported through
    *on_exhausted* with the reason (``"steps"`` or ``"time"``).
    """

    def __init__(
        self,
        limits: Optional[ResourceLimits],
        scheduler: Scheduler,
        on_exhausted: Callable[[str], None],
        on_tick: Optional[Callable[[], None]] = None,
        tick_interval: float = TICK_INTERVAL,
    ) -> None:
        self._limits = limits or ResourceLimits()
        self._scheduler = scheduler
        self._on_exhausted = on_exhausted
        self._on_tick = on_tick
        self._tick_ms = to_millis(tick_interval)
        self._limit_ms = (
            to_millis(self._limits.time_limit_seconds)
            if self._limits.time_limit_seconds is not None
            else None
        )
        self._handle: Optional[TimerHandle] = None
        self._toggles_used = 0
        self._elapsed_ms = 0
        self._exhausted = False
        self._stopped = False

    @property
    def limits(self) -> ResourceLimits:
        return self._limits

    @property
    def toggles_used(self) -> int:
        return self._toggles_used

    @property
    def steps_remaining(self) -> Optional[int]:
        if self._limits.max_toggles is None:
            return None
        return max(0, self._limits.max_toggles - self._toggles_used)

    @property
    def elapsed_seconds(self) -> float:
        return self._elapsed_ms / 1000.0

    @property
    def progress(self) -> Optional[float]:
        """Fraction of the time budget used (0.0 to 1.0), or None without one."""
        if self._limit_ms is None:
            return None
        return min(1.0, self._elapsed_ms / self._limit_ms)

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def running(self) -> bool:
        return self._handle is not None and self._handle.active

    def start(self) -> None:
        """Start the countdown, if this level has one."""
        if self._limit_ms is None or self._stopped or self._exhausted or self.running:
            return
        self._handle = self._scheduler.call_every(self._tick_ms / 1000.0, self._tick)

    def stop(self) -> None:
        """Stop ticking for good; only :meth:`reset` brings the countdown back."""
        self._stopped = True
        self._cancel()

    def reset(self) -> None:
        self._cancel()
        self._toggles_used = 0
        self._elapsed_ms = 0
        self._exhausted = False
        self._stopped = False

    def record_toggle(self) -> bool:
        """Count one toggle. Return True when the step budget is exceeded."""
        if self._exhausted:
            return True
        budget = self._limits.max_toggles
        over_budget = budget is not None and self._toggles_used >= budget
        self._toggles_used += 1
        if over_budget:
            logger.debug("Step budget of %d exceeded", budget)
            self._exhaust("steps")
        return over_budget

    def _tick(self) -> None:
        if self._stopped or self._exhausted or self._limit_ms is None:
            self._cancel()
            return
        self._elapsed_ms += self._tick_ms
        if self._on_tick is not None:
            self._on_tick()
        if self._elapsed_ms >= self._limit_ms:
            logger.debug("Time budget of %.1fs used up", self._limit_ms / 1000.0)
            self._exhaust("time")

    def _exhaust(self, reason: str) -> None:
        self._exhausted = True
        self._cancel()
        self._on_exhausted(reason)

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
