"""
M3U/M3U8 playlist parsing.

Supported directives:

- ``#EXTINF:<duration>,<name>`` - duration and title of the following entry
- ``#EXTNOSHUFFLE`` - the preceding entry is never drawn by shuffle
- ``#EXTNEXT:<path>`` - the preceding entry is always followed by <path>

Unknown or malformed directives are skipped; they never fail a load.
"""

import os
import urllib.parse
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from cramp.core.exceptions import LoadError

from .models import PlaylistEntry

PLAYLIST_SUFFIXES = (".m3u", ".m3u8")


def is_playlist_file(path: Path) -> bool:
    """Check if a path looks like an M3U playlist."""
    return path.suffix.lower() in PLAYLIST_SUFFIXES


def normalize_path(raw_path: str, base_dir: Optional[Path] = None) -> str:
    """
    Resolve a playlist path to a normalized absolute path string.

    Handles:
    - file:// URIs (URL-decoded)
    - ``~/`` home-relative paths
    - paths relative to the playlist directory (or the cwd without one)

    Args:
        raw_path: Path as written in the playlist
        base_dir: Directory relative paths are resolved against

    Returns:
        Absolute, normalized path string (the file need not exist)
    """
    path_str = raw_path.strip()

    if path_str.startswith("file://"):
        path_str = urllib.parse.unquote(urllib.parse.urlparse(path_str).path)

    path = Path(path_str).expanduser()
    if not path.is_absolute():
        path = (base_dir or Path.cwd()) / path

    return os.path.normpath(str(path))


def _parse_extinf(value: str) -> dict[str, Any]:
    """Parse the payload of an #EXTINF line into tags."""
    tags: dict[str, Any] = {}
    duration_str, _, name = value.partition(",")

    try:
        duration = float(duration_str.strip())
        if duration >= 0:
            tags["duration"] = duration
    except ValueError:
        pass

    name = name.strip()
    if name:
        tags["title"] = name

    return tags


def parse_m3u(text: str, base_dir: Optional[Path] = None) -> list[PlaylistEntry]:
    """
    Parse M3U playlist text into entries.

    Args:
        text: Playlist contents
        base_dir: Directory relative entry paths are resolved against

    Returns:
        Entries in playlist order (duplicates are kept; the registry dedupes)
    """
    entries: list[PlaylistEntry] = []
    pending_info: dict[str, Any] = {}

    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip().lstrip("\ufeff")
        if not line:
            continue

        if not line.startswith("#"):
            tags = dict(pending_info)
            pending_info = {}
            entries.append(PlaylistEntry(normalize_path(line, base_dir), tags))
            continue

        directive = line[1:].strip()

        if directive.startswith("EXTINF:"):
            pending_info = _parse_extinf(directive[len("EXTINF:"):])
        elif directive == "EXTNOSHUFFLE":
            if entries:
                entries[-1].tags["no_shuffle"] = True
            else:
                logger.debug(f"Line {line_number}: #EXTNOSHUFFLE before any entry")
        elif directive.startswith("EXTNEXT:"):
            target = directive[len("EXTNEXT:"):].strip()
            if entries and target:
                entries[-1].tags["next"] = normalize_path(target, base_dir)
            else:
                logger.debug(f"Line {line_number}: ignoring #EXTNEXT {target!r}")
        # #EXTM3U, comments and unknown directives carry no meaning here

    return entries


def read_m3u(playlist_path: Path) -> list[PlaylistEntry]:
    """
    Read and parse an M3U playlist file.

    Raises:
        LoadError: If the file cannot be read or decoded
    """
    try:
        text = playlist_path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        # Plain .m3u files are frequently latin-1
        try:
            text = playlist_path.read_text(encoding="latin-1")
        except OSError as e:
            raise LoadError(str(playlist_path), str(e)) from e
    except OSError as e:
        raise LoadError(str(playlist_path), str(e)) from e

    entries = parse_m3u(text, playlist_path.parent)
    logger.info(f"Parsed {len(entries)} entries from {playlist_path}")
    return entries
