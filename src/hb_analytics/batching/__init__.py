"""Event batching."""

from .expiring_queue import ExpiringQueue, TimerScheduler, TimerHandle, ThreadingTimerScheduler

__all__ = ["ExpiringQueue", "TimerScheduler", "TimerHandle", "ThreadingTimerScheduler"]
