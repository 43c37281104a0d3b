"""Qt timer backend for level sessions."""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer

from xorpuzzle.core.scheduler import to_millis


class QtTimerHandle:
    """Owns one ``QTimer``; the timer is released on cancel or after a single shot."""

    def __init__(self, timer: QTimer, callback: Callable[[], None]) -> None:
        self._timer: Optional[QTimer] = timer
        self._callback = callback
        timer.timeout.connect(self._fire)

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._release()

    def _fire(self) -> None:
        if self._timer is None:
            return
        if self._timer.isSingleShot():
            self._release()
        self._callback()

    def _release(self) -> None:
        timer, self._timer = self._timer, None
        timer.timeout.disconnect(self._fire)
        timer.deleteLater()


class QtScheduler:
    """Runs session callbacks on the Qt event loop."""

    def __init__(self, parent: Optional[QObject] = None) -> None:
        self._parent = parent

    def call_later(self, delay: float, callback: Callable[[], None]) -> QtTimerHandle:
        if delay < 0:
            raise ValueError(f"delay must not be negative, got {delay}")
        return self._start(to_millis(delay), callback, single_shot=True)

    def call_every(self, interval: float, callback: Callable[[], None]) -> QtTimerHandle:
        interval_ms = to_millis(interval)
        if interval_ms <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        return self._start(interval_ms, callback, single_shot=False)

    def _start(self, msec: int, callback: Callable[[], None], single_shot: bool) -> QtTimerHandle:
        timer = QTimer(self._parent)
        timer.setSingleShot(single_shot)
        handle = QtTimerHandle(timer, callback)
        timer.start(msec)
        return handle
