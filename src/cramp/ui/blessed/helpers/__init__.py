"""Helper functions for the blessed UI."""

from .scrolling import calculate_scroll_offset, clamp_selection, move_selection
from .terminal import truncate, write_at

__all__ = [
    "calculate_scroll_offset",
    "clamp_selection",
    "move_selection",
    "truncate",
    "write_at",
]
