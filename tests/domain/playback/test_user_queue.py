"""Tests for the user queue, play-next slot and history."""

import pytest

from cramp.domain.playback.history import History
from cramp.domain.playback.queue import PlayNextSlot, UserQueue


class TestUserQueue:
    """Tests for UserQueue FIFO behaviour."""

    def test_fifo_order(self) -> None:
        queue = UserQueue()
        for track_id in (3, 1, 2):
            queue.append(track_id)
        assert [queue.pop(), queue.pop(), queue.pop()] == [3, 1, 2]
        assert queue.pop() is None

    def test_refuses_current_track(self) -> None:
        queue = UserQueue()
        assert queue.append(5, current_id=5) is False
        assert len(queue) == 0

    def test_duplicates_allowed(self) -> None:
        queue = UserQueue()
        queue.append(1)
        queue.append(1)
        assert queue.snapshot() == (1, 1)

    def test_discard_removes_every_occurrence(self) -> None:
        queue = UserQueue([1, 2, 1, 3])
        assert queue.discard(1) == 2
        assert queue.snapshot() == (2, 3)

    def test_retain(self) -> None:
        queue = UserQueue([1, 2, 3])
        queue.retain({1, 3})
        assert list(queue) == [1, 3]


class TestPlayNextSlot:
    """Tests for the one-shot slot."""

    def test_set_replaces_and_reports(self) -> None:
        slot = PlayNextSlot()
        assert slot.set(1) is None
        assert slot.set(2) == 1
        assert slot.pending == 2

    def test_take_consumes(self) -> None:
        slot = PlayNextSlot()
        slot.set(4)
        assert slot.take() == 4
        assert slot.take() is None


class TestHistory:
    """Tests for the bounded history."""

    def test_pop_is_most_recent(self) -> None:
        history = History(capacity=4)
        history.push(1)
        history.push(2)
        assert history.pop() == 2
        assert history.pop() == 1
        assert history.pop() is None

    def test_capacity_evicts_oldest(self) -> None:
        history = History(capacity=3)
        for track_id in range(1, 6):
            history.push(track_id)
        assert history.snapshot() == (3, 4, 5)
        assert len(history) == 3

    def test_retain_keeps_capacity(self) -> None:
        history = History(capacity=2, track_ids=[1, 2])
        history.retain({2})
        history.push(3)
        history.push(4)
        assert history.snapshot() == (3, 4)
        assert history.capacity == 2

    def test_invalid_capacity(self) -> None:
        with pytest.raises(ValueError):
            History(capacity=0)
