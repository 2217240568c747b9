"""
User-driven ordering: the FIFO user queue and the one-shot play-next slot.
"""

from collections import deque
from typing import Iterable, Optional


class UserQueue:
    """FIFO of track ids the user asked to hear after the current one."""

    def __init__(self, track_ids: Iterable[int] = ()):
        self._items: deque[int] = deque(track_ids)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    def append(self, track_id: int, current_id: Optional[int] = None) -> bool:
        """Add to the tail. The current track is refused.

        Returns:
            True if the track was queued
        """
        if current_id is not None and track_id == current_id:
            return False
        self._items.append(track_id)
        return True

    def pop(self) -> Optional[int]:
        """Take the head, or None when empty."""
        return self._items.popleft() if self._items else None

    def discard(self, track_id: int) -> int:
        """Remove every occurrence of a track. Returns how many were removed."""
        before = len(self._items)
        self._items = deque(i for i in self._items if i != track_id)
        return before - len(self._items)

    def retain(self, valid_ids) -> None:
        """Drop ids that are no longer loaded."""
        self._items = deque(i for i in self._items if i in valid_ids)

    def snapshot(self) -> tuple[int, ...]:
        return tuple(self._items)


class PlayNextSlot:
    """Holds at most one track id to play after the current one."""

    def __init__(self) -> None:
        self._track_id: Optional[int] = None

    @property
    def pending(self) -> Optional[int]:
        return self._track_id

    def set(self, track_id: int) -> Optional[int]:
        """Set the slot, returning the id it replaced (if any)."""
        replaced, self._track_id = self._track_id, track_id
        return replaced

    def take(self) -> Optional[int]:
        """Consume the slot."""
        track_id, self._track_id = self._track_id, None
        return track_id

    def clear(self) -> None:
        self._track_id = None
