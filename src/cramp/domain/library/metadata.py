"""
Audio tag reading with mutagen.

Only what the player shows is read: title and duration.
"""

from typing import Any, Optional

from loguru import logger
from mutagen import File as MutagenFile
from mutagen import MutagenError

TITLE_TAGS = ["TIT2", "\xa9nam", "TITLE", "title"]


def get_tag_value(audio_file: Any, tag_names: list[str]) -> Optional[str]:
    """Get tag value, trying multiple possible tag names."""
    for tag_name in tag_names:
        try:
            value = audio_file.get(tag_name)
        except (KeyError, ValueError):
            # Vorbis comments raise ValueError for some keys
            continue
        if value:
            if isinstance(value, list):
                return str(value[0])
            return str(value)
    return None


def read_audio_tags(path: str) -> dict[str, Any]:
    """
    Read title and duration tags from an audio file.

    Args:
        path: Audio file path

    Returns:
        Tags dict with ``title`` and/or ``duration`` when available; empty
        when the file is not a recognized audio file.
    """
    try:
        audio_file = MutagenFile(path)
    except (MutagenError, OSError) as e:
        logger.warning(f"Could not read tags from {path}: {e}")
        return {}

    if audio_file is None:
        return {}

    tags: dict[str, Any] = {}

    title = get_tag_value(audio_file, TITLE_TAGS)
    if title:
        tags["title"] = title.strip()

    info = getattr(audio_file, "info", None)
    duration = getattr(info, "length", None)
    if duration and duration > 0:
        tags["duration"] = float(duration)

    return tags


def format_time(seconds: Optional[float]) -> str:
    """Format time in seconds to MM:SS format."""
    if seconds is None or seconds < 0:
        return "--:--"

    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes:02d}:{secs:02d}"
