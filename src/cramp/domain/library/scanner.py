"""
Library source loading: folder scans and playlist files.
"""

import os
from pathlib import Path
from typing import Optional

from loguru import logger

from cramp.core.config import Config
from cramp.core.exceptions import LoadError

from .m3u import is_playlist_file, read_m3u
from .metadata import read_audio_tags
from .models import PlaylistEntry
from .registry import TrackRegistry


def is_supported_format(path: Path, supported_formats: list[str]) -> bool:
    """Check if file format is supported."""
    return path.suffix.lower() in supported_formats


def scan_directory(directory: Path, config: Config) -> list[PlaylistEntry]:
    """Scan a directory for audio files.

    Args:
        directory: Directory to scan
        config: Configuration object

    Returns:
        Entries sorted by path, with tags from mutagen when enabled

    Raises:
        LoadError: If the directory cannot be listed
    """
    if not directory.is_dir():
        raise LoadError(str(directory), "not a directory")
    if not os.access(directory, os.R_OK | os.X_OK):
        raise LoadError(str(directory), "permission denied")

    pattern_glob = directory.rglob if config.music.scan_recursive else directory.glob
    files: list[Path] = []
    try:
        for ext in config.music.supported_formats:
            files.extend(pattern_glob(f"*{ext}"))
            # Extensions are matched case-insensitively
            if ext != ext.upper():
                files.extend(pattern_glob(f"*{ext.upper()}"))
    except OSError as e:
        raise LoadError(str(directory), str(e)) from e

    entries = []
    for path in sorted(set(files)):
        if not path.is_file():
            continue
        tags = read_audio_tags(str(path)) if config.music.read_tags else {}
        entries.append(PlaylistEntry(os.path.normpath(str(path.absolute())), tags))

    logger.info(f"Scanned {len(entries)} audio files in {directory}")
    return entries


def load_entries(source: Path, config: Config) -> list[PlaylistEntry]:
    """Read entries from a folder or an M3U playlist.

    Raises:
        LoadError: If the source does not exist or is not a folder/playlist
    """
    source = source.expanduser()
    if not source.exists():
        raise LoadError(str(source), "no such file or directory")
    if source.is_dir():
        return scan_directory(source, config)
    if is_playlist_file(source):
        return read_m3u(source)
    raise LoadError(str(source), "expected a folder or an .m3u/.m3u8 playlist")


def load_source(
    source: Path, config: Config, previous: Optional[TrackRegistry] = None
) -> TrackRegistry:
    """Build a registry from a folder or playlist.

    Args:
        source: Folder or playlist path
        config: Configuration object
        previous: Registry being replaced; its ids are reused by path

    Raises:
        LoadError: If the source is unreadable or resolves to zero tracks
    """
    entries = load_entries(source, config)
    return TrackRegistry.from_entries(entries, source=str(source), previous=previous)


def load_library_paths(
    config: Config, previous: Optional[TrackRegistry] = None
) -> TrackRegistry:
    """Build a registry from every configured library path.

    Unreadable paths are skipped with a warning as long as at least one
    track is found somewhere.
    """
    entries: list[PlaylistEntry] = []
    for library_path in config.music.library_paths:
        try:
            entries.extend(load_entries(Path(library_path), config))
        except LoadError as e:
            logger.warning(str(e))

    source = ", ".join(config.music.library_paths) or "<no library paths>"
    return TrackRegistry.from_entries(entries, source=source, previous=previous)
