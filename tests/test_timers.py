from __future__ import annotations

import pytest

from pentomino_puzzle.game import TimerScheduler


@pytest.fixture
def scheduler() -> TimerScheduler:
    return TimerScheduler()


def test_timer_fires_at_its_deadline_not_before(scheduler):
    fired = []
    scheduler.schedule("a", 2, lambda: fired.append(scheduler.now))
    scheduler.advance(1.5)
    assert fired == []
    assert scheduler.remaining("a") == pytest.approx(0.5)
    assert scheduler.advance(0.5) == 1
    assert fired == [2.0]
    assert not scheduler.is_scheduled("a")


def test_rescheduling_a_key_replaces_the_pending_timer(scheduler):
    fired = []
    scheduler.schedule("piece", 5, lambda: fired.append("short"))
    scheduler.advance(1)
    scheduler.schedule("piece", 20, lambda: fired.append("long"))
    scheduler.advance(10)
    assert fired == []
    scheduler.advance(11)
    assert fired == ["long"]


def test_cancel(scheduler):
    fired = []
    scheduler.schedule("a", 1, lambda: fired.append("a"))
    assert scheduler.cancel("a") is True
    assert scheduler.cancel("a") is False
    scheduler.advance(5)
    assert fired == []
    assert scheduler.remaining("a") is None


def test_cancel_all(scheduler):
    fired = []
    for key in range(3):
        scheduler.schedule(key, key + 1, lambda: fired.append(key))
    scheduler.cancel_all()
    assert len(scheduler) == 0
    scheduler.advance(10)
    assert fired == []


def test_fires_in_deadline_then_scheduling_order(scheduler):
    fired = []
    scheduler.schedule("late", 3, lambda: fired.append("late"))
    scheduler.schedule("first", 1, lambda: fired.append("first"))
    scheduler.schedule("tie-a", 2, lambda: fired.append("tie-a"))
    scheduler.schedule("tie-b", 2, lambda: fired.append("tie-b"))
    scheduler.advance(3)
    assert fired == ["first", "tie-a", "tie-b", "late"]


def test_callbacks_may_reschedule_within_the_same_advance(scheduler):
    ticks = []

    def tick():
        ticks.append(scheduler.now)
        scheduler.schedule("clock", 1, tick)

    scheduler.schedule("clock", 1, tick)
    assert scheduler.advance(3.5) == 3
    assert ticks == [1.0, 2.0, 3.0]
    assert scheduler.now == pytest.approx(3.5)
    assert scheduler.remaining("clock") == pytest.approx(0.5)


def test_callback_cancelling_another_timer_prevents_it(scheduler):
    fired = []
    scheduler.schedule("a", 1, lambda: scheduler.cancel("b"))
    scheduler.schedule("b", 1, lambda: fired.append("b"))
    scheduler.advance(2)
    assert fired == []


def test_negative_duration_is_rejected(scheduler):
    with pytest.raises(ValueError):
        scheduler.schedule("a", -1, lambda: None)
