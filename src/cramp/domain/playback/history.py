"""Playback history - bounded record of tracks left by forward moves."""

from collections import deque
from typing import Iterable, Optional

from cramp.core.config import DEFAULT_HISTORY_CAPACITY


class History:
    """Fixed-capacity ring buffer of track ids; oldest entries fall off."""

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY, track_ids: Iterable[int] = ()):
        if capacity < 1:
            raise ValueError(f"history capacity must be at least 1, got {capacity}")
        self._items: deque[int] = deque(track_ids, maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._items.maxlen

    def __len__(self) -> int:
        return len(self._items)

    def push(self, track_id: int) -> None:
        self._items.append(track_id)

    def pop(self) -> Optional[int]:
        """Take the most recent entry, or None when empty."""
        return self._items.pop() if self._items else None

    def retain(self, valid_ids) -> None:
        """Drop ids that are no longer loaded."""
        self._items = deque((i for i in self._items if i in valid_ids), maxlen=self.capacity)

    def snapshot(self) -> tuple[int, ...]:
        """Entries oldest first."""
        return tuple(self._items)
