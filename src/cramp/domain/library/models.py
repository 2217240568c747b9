"""
Music library domain models.

Contains data structures for representing loaded tracks and raw
playlist entries.
"""

from pathlib import Path
from typing import Any, NamedTuple, Optional


class Track(NamedTuple):
    """A loaded track.

    ``id`` is stable for the whole session: reloading a library keeps the
    id of every path that was already known.
    """

    id: int
    path: str  # Normalized absolute path, unique within a registry
    title: Optional[str] = None
    duration: Optional[float] = None  # in seconds
    no_shuffle: bool = False  # Never drawn by the shuffle deck
    forced_next: Optional[str] = None  # Path that must play right after this one

    @property
    def display_name(self) -> str:
        """Title if known, otherwise the file name without extension."""
        return self.title or Path(self.path).stem


class PlaylistEntry(NamedTuple):
    """One entry produced by a source parser before registry resolution.

    Recognized tags: ``title`` (str), ``duration`` (float seconds),
    ``no_shuffle`` (bool), ``next`` (str path).
    """

    path: str
    tags: dict[str, Any]
