"""Shared fixtures for cramp tests."""

import random

import pytest

from cramp.domain.library.models import Track
from cramp.domain.library.registry import TrackRegistry
from cramp.domain.playback.backend import NullBackend
from cramp.domain.playback.controller import PlaybackController


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_tracks(count: int, duration: float = 180.0) -> list[Track]:
    """Tracks 1..count at /music/01.mp3, /music/02.mp3, ..."""
    return [
        Track(id=i, path=f"/music/{i:02d}.mp3", title=f"Song {i}", duration=duration)
        for i in range(1, count + 1)
    ]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend() -> NullBackend:
    return NullBackend()


@pytest.fixture
def registry() -> TrackRegistry:
    """Five plain tracks, all shuffle-eligible."""
    return TrackRegistry(make_tracks(5), source="/music")


@pytest.fixture
def controller(backend: NullBackend, registry: TrackRegistry, clock: FakeClock) -> PlaybackController:
    """Controller over ``registry`` with a seeded deck and fake clock."""
    return PlaybackController(
        backend,
        registry,
        history_capacity=8,
        rng=random.Random(1234),
        clock=clock,
    )
