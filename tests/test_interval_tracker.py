from __future__ import annotations

import pytest

from adslot.interval import IntervalTracker


def test_no_interval_always_shows() -> None:
    tracker = IntervalTracker()
    assert all(tracker.can_show(None) for _ in range(5))
    assert tracker.counter == 0


def test_shows_every_nth_request() -> None:
    tracker = IntervalTracker()
    results = [tracker.can_show(3) for _ in range(7)]
    assert results == [False, False, True, False, False, True, False]


def test_interval_of_one_always_shows() -> None:
    tracker = IntervalTracker()
    assert [tracker.can_show(1) for _ in range(3)] == [True, True, True]


def test_invalid_interval_raises() -> None:
    with pytest.raises(ValueError):
        IntervalTracker().can_show(0)
