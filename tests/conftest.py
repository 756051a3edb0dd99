"""Shared test fixtures."""

import tempfile
from pathlib import Path

import pytest

from hb_analytics.batching import TimerHandle, TimerScheduler


class ManualTimer(TimerHandle):
    """Timer driven by ManualScheduler.advance()."""

    def __init__(self, due: float, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler(TimerScheduler):
    """Deterministic scheduler with a virtual clock in seconds."""

    def __init__(self):
        self.now = 0.0
        self.timers = []

    def schedule(self, delay_seconds, callback):
        timer = ManualTimer(self.now + delay_seconds, callback)
        self.timers.append(timer)
        return timer

    @property
    def live_timers(self):
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, seconds: float):
        """Move the clock forward, firing due timers in order."""
        target = self.now + seconds
        while True:
            due = [t for t in self.live_timers if t.due <= target + 1e-9]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self.now = timer.due
            timer.fired = True
            timer.callback()
        self.now = target


@pytest.fixture
def scheduler():
    """Manual timer scheduler."""
    return ManualScheduler()


@pytest.fixture
def temp_data_dir():
    """Create temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
