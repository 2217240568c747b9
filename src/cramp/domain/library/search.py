"""Track search - live path filtering for the search view."""

from typing import Optional

from .models import Track
from .registry import TrackRegistry


def filter_tracks(query: str, tracks: tuple[Track, ...]) -> list[Track]:
    """
    Filter tracks by case-insensitive substring match on the path.

    Returns all tracks (in display order) if the query is empty.
    """
    if not query:
        return list(tracks)

    query_lower = query.lower()
    return [track for track in tracks if query_lower in track.path.lower()]


class SearchFilter:
    """Filtered view over a registry.

    The view maps a row index to a track id, so actions taken on a row
    always hit the track that was shown on it, even after the query or the
    registry changes.
    """

    def __init__(self, registry: Optional[TrackRegistry] = None, query: str = ""):
        self._registry = registry
        self._query = query
        self._ids: list[int] = []
        self._refresh()

    @property
    def query(self) -> str:
        return self._query

    @property
    def track_ids(self) -> list[int]:
        return list(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def set_query(self, query: str) -> None:
        """Replace the query and recompute the view."""
        self._query = query
        self._refresh()

    def append_char(self, char: str) -> None:
        self.set_query(self._query + char)

    def backspace(self) -> None:
        self.set_query(self._query[:-1])

    def set_registry(self, registry: Optional[TrackRegistry]) -> None:
        """Point the view at a reloaded registry, keeping the query."""
        self._registry = registry
        self._refresh()

    def track_id_at(self, index: int) -> Optional[int]:
        """Track id shown at a view row, or None when out of range."""
        if 0 <= index < len(self._ids):
            return self._ids[index]
        return None

    def tracks(self) -> list[Track]:
        """Tracks currently in the view, in display order."""
        if self._registry is None:
            return []
        return [self._registry.get(track_id) for track_id in self._ids]

    def _refresh(self) -> None:
        if self._registry is None:
            self._ids = []
            return
        self._ids = [t.id for t in filter_tracks(self._query, self._registry.tracks)]
