"""Terminal output utilities."""

import sys

from blessed import Terminal


def write_at(
    term: Terminal, x: int, y: int, content: str, *, clear: bool = True
) -> None:
    """Write content at position, clearing the rest of the line by default.

    Args:
        term: Blessed terminal instance
        x: Column position (0-indexed)
        y: Row position (0-indexed)
        content: Text to write (can include terminal formatting)
        clear: Whether to clear to end of line first
    """
    if clear:
        sys.stdout.write(term.move_xy(x, y) + term.clear_eol + content)
    else:
        sys.stdout.write(term.move_xy(x, y) + content)


def truncate(term: Terminal, text: str, width: int) -> str:
    """Cut formatted text to a visible width, adding an ellipsis when cut."""
    if width <= 0:
        return ""
    if term.length(text) <= width:
        return text
    return term.truncate(text, max(0, width - 1)) + "…"
