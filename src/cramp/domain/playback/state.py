"""
Published player state.

The controller publishes a fresh PlayerState after every command; readers
(the UI, the remote-control adapter) only ever see these snapshots.
"""

import time
from enum import Enum
from typing import Any, NamedTuple, Optional

from cramp.domain.library.models import Track


class PlaybackStatus(str, Enum):
    IDLE = "Idle"  # Nothing loaded
    PLAYING = "Playing"
    PAUSED = "Paused"
    STOPPED = "Stopped"  # Loaded, but nothing playing


class PlayerState(NamedTuple):
    """Immutable player snapshot."""

    status: PlaybackStatus = PlaybackStatus.IDLE
    current: Optional[Track] = None
    position: float = 0.0  # Seconds, as of position_updated_at
    position_updated_at: float = 0.0  # time.monotonic() timestamp
    duration: Optional[float] = None
    generation: int = 0
    play_next: Optional[Track] = None
    queue: tuple[Track, ...] = ()
    upcoming: tuple[Track, ...] = ()  # Preview of what resolution would pick
    history: tuple[Track, ...] = ()  # Oldest first
    deck_remaining: int = 0
    library_size: int = 0
    error: Optional[str] = None

    def __getattr__(self, name: str) -> Any:
        """Provide helpful error for missing attributes, especially with_* methods."""
        if name.startswith("with_"):
            raise AttributeError(
                f"PlayerState is a NamedTuple and does not have '{name}' method. "
                f"Use '._replace({name[5:]}=value)' instead."
            )
        raise AttributeError(f"PlayerState has no attribute '{name}'")

    @property
    def is_playing(self) -> bool:
        return self.status is PlaybackStatus.PLAYING

    def estimated_position(self, now: Optional[float] = None) -> float:
        """Position interpolated to ``now`` while playing, clamped to the duration."""
        position = self.position
        if self.status is PlaybackStatus.PLAYING:
            now = time.monotonic() if now is None else now
            position += max(0.0, now - self.position_updated_at)
        if self.duration is not None:
            position = min(position, self.duration)
        return max(0.0, position)
