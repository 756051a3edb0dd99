"""Tests for the expiring event queue."""

import threading

import pytest

from hb_analytics.batching import ExpiringQueue


class FlushRecorder:
    """Flush callback that records queue contents at fire time."""

    def __init__(self):
        self.queue = None
        self.flushes = []

    def __call__(self):
        self.flushes.append(self.queue.peek_all())


@pytest.fixture
def recorder():
    return FlushRecorder()


@pytest.fixture
def queue(recorder, scheduler):
    q = ExpiringQueue(recorder, 100, scheduler)
    recorder.queue = q
    return q


class TestQueueContents:
    """Tests for push, pop_all and peek_all."""

    def test_push_single_and_list_preserves_order(self, queue):
        """Single events and lists are appended in arrival order."""
        queue.push({'event': 'a'})
        queue.push([{'event': 'b'}, {'event': 'c'}])
        queue.push({'event': 'd'})

        assert [e['event'] for e in queue.peek_all()] == ['a', 'b', 'c', 'd']
        assert len(queue) == 4

    def test_push_empty_list(self, queue):
        """An empty list adds nothing but still arms the timer."""
        queue.push([])
        assert len(queue) == 0
        assert queue.is_armed

    def test_pop_all_returns_and_clears(self, queue):
        queue.push([1, 2, 3])
        assert queue.pop_all() == [1, 2, 3]
        assert queue.peek_all() == []
        assert queue.pop_all() == []

    def test_peek_all_is_a_snapshot(self, queue):
        """Mutating the peeked list leaves the queue alone."""
        queue.push(1)
        snapshot = queue.peek_all()
        snapshot.append(2)
        assert queue.peek_all() == [1]


class TestQueueTimer:
    """Tests for quiet-period flushing."""

    def test_starts_idle(self, queue):
        assert not queue.is_armed

    def test_flushes_after_quiet_period(self, queue, recorder, scheduler):
        """Each push restarts the countdown; one flush holds everything."""
        queue.push('e1')
        scheduler.advance(0.06)
        queue.push('e2')
        scheduler.advance(0.06)
        assert recorder.flushes == []

        scheduler.advance(0.06)
        assert recorder.flushes == [['e1', 'e2']]

    def test_does_not_fire_before_ttl(self, queue, recorder, scheduler):
        queue.push('e1')
        scheduler.advance(0.099)
        assert recorder.flushes == []
        assert queue.is_armed

    def test_empty_queue_never_flushes(self, queue, recorder, scheduler):
        """init() on an empty queue arms a timer that fires silently."""
        queue.init()
        assert queue.is_armed

        scheduler.advance(1.0)
        assert recorder.flushes == []
        assert not queue.is_armed

    def test_init_keeps_contents(self, queue, recorder, scheduler):
        queue.push('e1')
        scheduler.advance(0.09)
        queue.init()
        assert queue.peek_all() == ['e1']

        scheduler.advance(0.09)
        assert recorder.flushes == []
        scheduler.advance(0.02)
        assert recorder.flushes == [['e1']]

    def test_rapid_pushes_flush_once(self, queue, recorder, scheduler):
        """N pushes inside the window give one flush, not N."""
        for i in range(10):
            queue.push(i)
            scheduler.advance(0.01)
            assert len(scheduler.live_timers) == 1

        scheduler.advance(1.0)
        assert recorder.flushes == [list(range(10))]

    def test_no_rearm_after_fire(self, queue, recorder, scheduler):
        """After firing the queue goes idle until the next mutation."""
        queue.push('e1')
        scheduler.advance(0.1)
        assert len(recorder.flushes) == 1
        assert not queue.is_armed

        scheduler.advance(1.0)
        assert len(recorder.flushes) == 1

    def test_pop_all_rearms(self, queue, recorder, scheduler):
        """pop_all arms a timer, even from idle; it fires empty and stays quiet."""
        assert queue.pop_all() == []
        assert queue.is_armed

        scheduler.advance(0.1)
        assert recorder.flushes == []
        assert not queue.is_armed

    def test_superseded_timer_is_ignored(self, queue, recorder, scheduler):
        """A stale timer callback that slips through cancellation does nothing."""
        queue.push('e1')
        stale = scheduler.timers[0]
        queue.push('e2')

        stale.callback()
        assert recorder.flushes == []
        assert queue.is_armed

    def test_cancel_stops_pending_timer(self, queue, recorder, scheduler):
        queue.push('e1')
        queue.cancel()
        assert not queue.is_armed

        scheduler.advance(1.0)
        assert recorder.flushes == []
        assert queue.peek_all() == ['e1']

    def test_callback_can_pop_all(self, scheduler):
        """The flush callback may drain the queue it was called from."""
        drained = []
        queue = ExpiringQueue(lambda: drained.append(queue.pop_all()), 100, scheduler)

        queue.push(['a', 'b'])
        scheduler.advance(0.1)

        assert drained == [['a', 'b']]
        assert queue.peek_all() == []
        assert queue.is_armed


class TestThreadingTimer:
    """Tests against real threading timers."""

    def test_flushes_on_timer_thread(self):
        flushed = threading.Event()
        queue = ExpiringQueue(flushed.set, 20)

        queue.push({'event': 'auctionInit'})

        assert flushed.wait(timeout=2)
        assert not queue.is_armed

    def test_cancelled_queue_does_not_flush(self):
        flushed = threading.Event()
        queue = ExpiringQueue(flushed.set, 20)

        queue.push(1)
        queue.cancel()

        assert not flushed.wait(timeout=0.2)

    def test_zero_ttl_flushes(self):
        """A timer that fires before schedule() returns still flushes."""
        for _ in range(50):
            flushed = threading.Event()
            queue = ExpiringQueue(flushed.set, 0)

            queue.push({'event': 'auctionInit'})

            assert flushed.wait(timeout=2)
            assert not queue.is_armed
