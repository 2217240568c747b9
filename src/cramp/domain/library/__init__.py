"""Library domain - tracks, sources and search."""

from .models import PlaylistEntry, Track
from .registry import TrackRegistry
from .scanner import load_entries, load_library_paths, load_source
from .search import SearchFilter, filter_tracks

__all__ = [
    "PlaylistEntry",
    "Track",
    "TrackRegistry",
    "load_entries",
    "load_library_paths",
    "load_source",
    "SearchFilter",
    "filter_tracks",
]
