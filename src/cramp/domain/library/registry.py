"""
Track registry - the canonical set of loaded tracks.

A registry is immutable once built. Reloading builds a new registry
(reusing ids by path) which the playback controller swaps in as a whole.
"""

import os
from typing import Iterable, Iterator, Optional

from loguru import logger

from cramp.core.exceptions import LoadError

from .models import PlaylistEntry, Track


class TrackRegistry:
    """Ordered, path-unique collection of tracks with id and path lookup."""

    def __init__(self, tracks: Iterable[Track], source: str = "", next_id: int = 1):
        self.source = source
        self._tracks: tuple[Track, ...] = tuple(tracks)
        self._by_id: dict[int, Track] = {t.id: t for t in self._tracks}
        self._by_path: dict[str, Track] = {t.path: t for t in self._tracks}

        if len(self._by_id) != len(self._tracks):
            raise ValueError("track ids must be unique")
        if len(self._by_path) != len(self._tracks):
            raise ValueError("track paths must be unique")

        self.next_id = max([next_id] + [t.id + 1 for t in self._tracks])
        self._eligible_ids = self._compute_shuffle_eligible()

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[PlaylistEntry],
        source: str = "",
        previous: Optional["TrackRegistry"] = None,
    ) -> "TrackRegistry":
        """Build a registry from parsed entries.

        Duplicate paths keep the first occurrence. Paths already known to
        ``previous`` keep their id.

        Raises:
            LoadError: If no entries resolve to a track
        """
        next_id = previous.next_id if previous else 1
        tracks: list[Track] = []
        seen: set[str] = set()
        duplicates = 0

        for entry in entries:
            path = os.path.normpath(entry.path)
            if path in seen:
                duplicates += 1
                continue
            seen.add(path)

            known = previous.by_path(path) if previous else None
            if known is not None:
                track_id = known.id
            else:
                track_id = next_id
                next_id += 1

            tags = entry.tags
            forced_next = tags.get("next")
            tracks.append(
                Track(
                    id=track_id,
                    path=path,
                    title=tags.get("title"),
                    duration=tags.get("duration"),
                    no_shuffle=bool(tags.get("no_shuffle", False)),
                    forced_next=os.path.normpath(forced_next) if forced_next else None,
                )
            )

        if not tracks:
            raise LoadError(source or "<entries>", "no tracks found")

        if duplicates:
            logger.debug(f"Skipped {duplicates} duplicate paths from {source}")
        logger.info(f"Loaded {len(tracks)} tracks from {source}")

        return cls(tracks, source=source, next_id=next_id)

    def __len__(self) -> int:
        return len(self._tracks)

    def __iter__(self) -> Iterator[Track]:
        return iter(self._tracks)

    def __contains__(self, track_id: object) -> bool:
        return track_id in self._by_id

    @property
    def tracks(self) -> tuple[Track, ...]:
        return self._tracks

    def get(self, track_id: Optional[int]) -> Optional[Track]:
        """Look up a track by id."""
        if track_id is None:
            return None
        return self._by_id.get(track_id)

    def by_path(self, path: str) -> Optional[Track]:
        """Look up a track by (normalized) path."""
        return self._by_path.get(os.path.normpath(path))

    def forced_target(self, track: Track) -> Optional[Track]:
        """Track that must follow ``track``, if it names one that is loaded."""
        if not track.forced_next:
            return None
        return self.by_path(track.forced_next)

    def shuffle_eligible_ids(self) -> list[int]:
        """Ids the shuffle deck may draw, in display order."""
        return list(self._eligible_ids)

    def _compute_shuffle_eligible(self) -> list[int]:
        """Exclude no-shuffle tracks and tracks reached through a chain.

        A chain target is excluded because its chain head brings it in.
        Chains that form a closed loop have no head; the first loop member
        in display order stays eligible so the loop is still reachable.
        """
        targets: set[int] = set()
        for track in self._tracks:
            target = self.forced_target(track)
            if target is not None and target.id != track.id:
                targets.add(target.id)

        heads = [t.id for t in self._tracks if t.id not in targets]
        reachable = self._follow_chains(heads)

        for track in self._tracks:
            if track.id in targets and track.id not in reachable:
                targets.discard(track.id)
                reachable |= self._follow_chains([track.id])

        return [
            t.id for t in self._tracks if not t.no_shuffle and t.id not in targets
        ]

    def _follow_chains(self, start_ids: Iterable[int]) -> set[int]:
        reached: set[int] = set()
        for start_id in start_ids:
            track = self._by_id[start_id]
            while track.id not in reached:
                reached.add(track.id)
                target = self.forced_target(track)
                if target is None:
                    break
                track = target
        return reached
