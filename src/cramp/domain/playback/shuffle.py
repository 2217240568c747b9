"""
Shuffle deck - randomized traversal over shuffle-eligible tracks.

The deck is a permutation of eligible track ids consumed front to back.
When it runs out it is reshuffled, never starting with the track that is
playing (or was drawn last) unless that is the only eligible track.
"""

import random
from collections import deque
from typing import Iterable, Optional

from loguru import logger


class ShuffleEngine:
    """Deck of track ids drawn in random order."""

    def __init__(
        self,
        eligible_ids: Iterable[int] = (),
        rng: Optional[random.Random] = None,
    ):
        self._rng = rng or random.Random()
        self._eligible: list[int] = list(eligible_ids)
        self._deck: deque[int] = deque()
        self._last_drawn: Optional[int] = None
        self.reshuffle()

    @property
    def size(self) -> int:
        """Number of eligible tracks."""
        return len(self._eligible)

    @property
    def remaining(self) -> int:
        """Tracks left before the next reshuffle."""
        return len(self._deck)

    def rebuild(self, eligible_ids: Iterable[int], avoid_first: Optional[int] = None) -> None:
        """Replace the eligible set (after a reload) and deal a fresh deck."""
        self._eligible = list(eligible_ids)
        if avoid_first is not None:
            self._last_drawn = avoid_first
        self.reshuffle(avoid_first=self._last_drawn)

    def reshuffle(self, avoid_first: Optional[int] = None) -> None:
        """Deal a fresh permutation of the whole eligible set."""
        order = list(self._eligible)
        self._rng.shuffle(order)

        if avoid_first is not None and len(order) > 1 and order[0] == avoid_first:
            swap = self._rng.randrange(1, len(order))
            order[0], order[swap] = order[swap], order[0]

        self._deck = deque(order)
        logger.debug(f"Dealt shuffle deck of {len(order)} tracks")

    def next(self, avoid_first: Optional[int] = None) -> Optional[int]:
        """Draw the next track id, reshuffling when the deck is exhausted.

        ``avoid_first`` is the track playing right now; a fresh deck never
        starts with it. Without it the last drawn id is avoided instead.
        Returns None only when no track is eligible at all.
        """
        if not self._deck:
            if not self._eligible:
                return None
            self.reshuffle(
                avoid_first=avoid_first if avoid_first is not None else self._last_drawn
            )

        track_id = self._deck.popleft()
        self._last_drawn = track_id
        return track_id

    def peek(self, count: int) -> list[int]:
        """Upcoming ids without drawing them (stops at the end of this deck)."""
        return list(self._deck)[:count]
