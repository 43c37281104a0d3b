"""Tests for xorpuzzle.ui.qt_scheduler – QTimer lifetime on the event loop."""

from __future__ import annotations

import pytest

QtCore = pytest.importorskip("PySide6.QtCore")

from xorpuzzle.ui.qt_scheduler import QtScheduler  # noqa: E402


@pytest.fixture(scope="module")
def qt_app():
    return QtCore.QCoreApplication.instance() or QtCore.QCoreApplication([])


@pytest.fixture()
def parent(qt_app):
    obj = QtCore.QObject()
    yield obj
    obj.deleteLater()


def _run_loop(msec: int = 50) -> None:
    loop = QtCore.QEventLoop()
    QtCore.QTimer.singleShot(msec, loop.quit)
    loop.exec()
    QtCore.QCoreApplication.sendPostedEvents(None, int(QtCore.QEvent.Type.DeferredDelete))


def _timers(parent):
    return parent.findChildren(QtCore.QTimer)


# ===========================================================================
# call_later
# ===========================================================================

class TestCallLater:
    def test_fired_timers_are_released(self, parent):
        sched = QtScheduler(parent)
        calls = []
        handles = [sched.call_later(0, lambda i=i: calls.append(i)) for i in range(5)]
        assert len(_timers(parent)) == 5
        _run_loop()
        assert sorted(calls) == [0, 1, 2, 3, 4]
        assert not any(h.active for h in handles)
        assert _timers(parent) == []

    def test_cancelled_timer_never_fires(self, parent):
        sched = QtScheduler(parent)
        calls = []
        handle = sched.call_later(0, lambda: calls.append(1))
        handle.cancel()
        handle.cancel()
        _run_loop()
        assert calls == []
        assert _timers(parent) == []

    def test_rejects_negative_delay(self, parent):
        with pytest.raises(ValueError):
            QtScheduler(parent).call_later(-1, lambda: None)


# ===========================================================================
# call_every
# ===========================================================================

class TestCallEvery:
    def test_repeats_until_cancelled(self, parent):
        sched = QtScheduler(parent)
        calls = []
        handle = sched.call_every(0.005, lambda: calls.append(1))
        _run_loop()
        assert len(calls) >= 2
        assert handle.active
        handle.cancel()
        _run_loop()
        assert not handle.active
        assert _timers(parent) == []

    def test_rejects_zero_interval(self, parent):
        with pytest.raises(ValueError):
            QtScheduler(parent).call_every(0, lambda: None)
