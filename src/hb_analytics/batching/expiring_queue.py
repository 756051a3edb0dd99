"""Expiring event queue that flushes after a quiet period."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)


class TimerHandle(ABC):
    """A scheduled callback that can be cancelled before it runs."""

    @abstractmethod
    def cancel(self):
        pass


class TimerScheduler(ABC):
    """Schedules deferred callbacks."""

    @abstractmethod
    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        pass


class _ThreadingTimerHandle(TimerHandle):

    def __init__(self, timer: threading.Timer):
        self._timer = timer

    def cancel(self):
        self._timer.cancel()


class ThreadingTimerScheduler(TimerScheduler):
    """Runs callbacks on daemon ``threading.Timer`` threads."""

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay_seconds, callback)
        timer.daemon = True
        timer.start()
        return _ThreadingTimerHandle(timer)


class ExpiringQueue:
    """Event queue that fires a callback once no mutation happened for ``ttl`` ms.

    Every ``push``, ``init`` and ``pop_all`` cancels the pending timer and
    starts a new one. When a timer elapses the queue becomes idle and, if it
    holds any events, calls ``callback()``. It does not re-arm by itself.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        ttl: int,
        scheduler: Optional[TimerScheduler] = None
    ):
        self.callback = callback
        self.ttl = ttl
        self.scheduler = scheduler or ThreadingTimerScheduler()
        self._items: List[Any] = []
        self._timer: Optional[TimerHandle] = None
        self._timer_token: Optional[object] = None
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    @property
    def is_armed(self) -> bool:
        with self._lock:
            return self._timer_token is not None

    def push(self, event: Any):
        """Append an event, or every event of a list, and restart the timer."""
        with self._lock:
            if isinstance(event, list):
                self._items.extend(event)
            else:
                self._items.append(event)
            self._reset()

    def pop_all(self) -> List[Any]:
        """Take all queued events and restart the timer."""
        with self._lock:
            result = self._items
            self._items = []
            self._reset()
        return result

    def peek_all(self) -> List[Any]:
        """Copy of the queued events. For tests and debugging only."""
        with self._lock:
            return list(self._items)

    def init(self):
        """Start the timer without touching the queue."""
        with self._lock:
            self._reset()

    def cancel(self):
        """Stop the pending timer, if any. Queued events are kept."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._timer_token = None

    def _reset(self):
        # Caller holds the lock
        if self._timer is not None:
            self._timer.cancel()

        # Token exists before the timer can fire, so an early fire still matches
        token = object()
        self._timer_token = token
        self._timer = self.scheduler.schedule(self.ttl / 1000.0, lambda: self._expire(token))

    def _expire(self, token: object):
        with self._lock:
            if token is not self._timer_token:
                # Superseded by a later re-arm
                return
            self._timer = None
            self._timer_token = None
            pending = len(self._items)

        if pending:
            logger.debug(f"Queue expired with {pending} event(s), flushing")
            self.callback()
