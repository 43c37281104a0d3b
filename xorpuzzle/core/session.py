from __future__ import annotations

import dataclasses
import logging
from enum import Enum
from typing import Callable, List, Optional, Protocol, Tuple

from xorpuzzle.core.governor import TICK_INTERVAL, ResourceGovernor
from xorpuzzle.core.levels import LevelDefinition
from xorpuzzle.core.scheduler import Scheduler, TimerHandle
from xorpuzzle.core.switches import SwitchInput

logger = logging.getLogger(__name__)

WIN_CONFIRM_DELAY = 1.5


class Phase(Enum):
    ACTIVE = "active"
    WIN_PENDING = "win_pending"
    WON = "won"
    LOST = "lost"


class CompletionRecorder(Protocol):
    def mark_level_as_completed(self, level_id: int) -> None: ...


SessionListener = Callable[["LevelSession"], None]


class LevelSession:
    """One attempt-at-a-time play of a single level.

    Phases move ``ACTIVE -> WIN_PENDING -> WON`` or ``ACTIVE -> LOST``;
    only :meth:`reset` goes back to ``ACTIVE``.

      * Switches are locked whenever the phase is not ``ACTIVE``.
      * ``bulb_output`` is recomputed on every toggle and always equals the
        level expression applied to the current switch values.
      * A solved puzzle waits ``win_delay`` seconds in ``WIN_PENDING`` before
        becoming ``WON`` and reporting the level to the completion recorder.
      * Running out of steps or time ends the attempt in ``LOST``. On the
        toggle that overruns the step budget, losing wins over solving.

    Deferred callbacks carry the attempt number they were scheduled for.
    :meth:`reset` and :meth:`close` bump it, so a timer that slips through
    cancellation finds a different attempt and does nothing.
    """

    def __init__(
        self,
        definition: LevelDefinition,
        scheduler: Scheduler,
        level_manager: Optional[CompletionRecorder] = None,
        *,
        win_delay: float = WIN_CONFIRM_DELAY,
        tick_interval: float = TICK_INTERVAL,
    ) -> None:
        self._definition = definition
        self._scheduler = scheduler
        self._level_manager = level_manager
        self._win_delay = win_delay
        self._tick_interval = tick_interval
        self._listeners: List[SessionListener] = []
        self._attempt = 0
        self._closed = False
        self._win_handle: Optional[TimerHandle] = None
        self._governor: Optional[ResourceGovernor] = None
        self._switches: List[SwitchInput] = []
        self._bulb_output = False
        self._toggle_count = 0
        self._phase = Phase.ACTIVE
        self._lost_reason: Optional[str] = None
        self._start_attempt()

    # ---- observable state ----

    @property
    def definition(self) -> LevelDefinition:
        return self._definition

    @property
    def level_id(self) -> int:
        return self._definition.level_id

    @property
    def switches(self) -> Tuple[SwitchInput, ...]:
        """Snapshot of the switch vector; mutate only through :meth:`toggle`."""
        return tuple(dataclasses.replace(s) for s in self._switches)

    @property
    def switch_values(self) -> Tuple[bool, ...]:
        return tuple(s.value for s in self._switches)

    @property
    def bulb_output(self) -> bool:
        return self._bulb_output

    @property
    def toggle_count(self) -> int:
        return self._toggle_count

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def lost_reason(self) -> Optional[str]:
        """``"steps"`` or ``"time"`` once the attempt is lost."""
        return self._lost_reason

    @property
    def elapsed_seconds(self) -> float:
        return self._governor.elapsed_seconds if self._governor is not None else 0.0

    @property
    def progress(self) -> Optional[float]:
        return self._governor.progress if self._governor is not None else None

    @property
    def steps_remaining(self) -> Optional[int]:
        return self._governor.steps_remaining if self._governor is not None else None

    @property
    def is_won(self) -> bool:
        return self._phase is Phase.WON

    @property
    def is_lost(self) -> bool:
        return self._phase is Phase.LOST

    @property
    def is_finished(self) -> bool:
        return self._phase in (Phase.WON, Phase.LOST)

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call *listener* after every observable change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ---- player actions ----

    def toggle(self, index: int) -> None:
        """Flip switch *index*. Silently ignored unless the attempt is active."""
        if not 0 <= index < len(self._switches):
            raise IndexError(f"Level {self.level_id} has no switch {index}")
        switch = self._switches[index]
        if self._closed or self._phase is not Phase.ACTIVE:
            logger.debug("Level %d: toggle %d ignored in phase %s", self.level_id, index, self._phase.value)
            return
        if not switch.toggle():
            return
        self._toggle_count += 1
        self._bulb_output = self._definition.expression.evaluate(self.switch_values)
        logger.debug(
            "Level %d: switch %d -> %s, bulb %s",
            self.level_id,
            index,
            switch.value,
            "on" if self._bulb_output else "off",
        )

        if self._governor is not None and self._governor.record_toggle():
            # The governor has already ended the attempt through _on_exhausted.
            return
        if self._definition.win_when.is_met(self._bulb_output):
            self._enter_win_pending()
        self._notify()

    def reset(self) -> None:
        """Start a fresh attempt from the level's initial switches."""
        if self._closed:
            logger.debug("Level %d: reset ignored on a closed session", self.level_id)
            return
        self._cancel_timers()
        self._attempt += 1
        self._start_attempt()
        logger.info("Level %d: reset (attempt %d)", self.level_id, self._attempt)
        self._notify()

    def close(self) -> None:
        """Leave the level: cancel timers and ignore everything that follows."""
        if self._closed:
            return
        self._closed = True
        self._attempt += 1
        self._cancel_timers()
        self._listeners.clear()

    # ---- internals ----

    def _start_attempt(self) -> None:
        self._switches = SwitchInput.bank(self._definition.initial_values)
        self._toggle_count = 0
        self._bulb_output = self._definition.expression.evaluate(self.switch_values)
        self._phase = Phase.ACTIVE
        self._lost_reason = None
        self._governor = None
        if self._definition.is_governed:
            attempt = self._attempt
            self._governor = ResourceGovernor(
                self._definition.limits,
                self._scheduler,
                on_exhausted=lambda reason: self._on_exhausted(attempt, reason),
                on_tick=lambda: self._on_tick(attempt),
                tick_interval=self._tick_interval,
            )
            self._governor.start()

    def _enter_win_pending(self) -> None:
        self._phase = Phase.WIN_PENDING
        self._lock_switches()
        if self._governor is not None:
            self._governor.stop()
        attempt = self._attempt
        self._win_handle = self._scheduler.call_later(self._win_delay, lambda: self._confirm_win(attempt))
        logger.info("Level %d: solved after %d toggle(s), confirming", self.level_id, self._toggle_count)

    def _confirm_win(self, attempt: int) -> None:
        if self._closed or attempt != self._attempt or self._phase is not Phase.WIN_PENDING:
            logger.debug("Level %d: stale win confirmation ignored", self.level_id)
            return
        self._win_handle = None
        self._phase = Phase.WON
        logger.info("Level %d: won", self.level_id)
        if self._level_manager is not None:
            self._level_manager.mark_level_as_completed(self.level_id)
        self._notify()

    def _on_exhausted(self, attempt: int, reason: str) -> None:
        if self._closed or attempt != self._attempt or self._phase is not Phase.ACTIVE:
            return
        self._phase = Phase.LOST
        self._lost_reason = reason
        self._lock_switches()
        if self._governor is not None:
            self._governor.stop()
        logger.info("Level %d: lost (%s budget exhausted)", self.level_id, reason)
        self._notify()

    def _on_tick(self, attempt: int) -> None:
        if self._closed or attempt != self._attempt:
            return
        self._notify()

    def _lock_switches(self) -> None:
        for switch in self._switches:
            switch.enabled = False

    def _cancel_timers(self) -> None:
        if self._win_handle is not None:
            self._win_handle.cancel()
            self._win_handle = None
        if self._governor is not None:
            self._governor.stop()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
