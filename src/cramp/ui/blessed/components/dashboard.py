"""Dashboard rendering: now playing, progress and what comes next."""

from typing import Optional

from blessed import Terminal

from cramp.domain.library.metadata import format_time
from cramp.domain.playback.state import PlaybackStatus, PlayerState

from ..helpers import truncate, write_at

ICONS = {
    "music": "♪",
    "note": "♫",
    "next": "»",
}

STATUS_LABELS = {
    PlaybackStatus.IDLE: "idle",
    PlaybackStatus.PLAYING: "▶ playing",
    PlaybackStatus.PAUSED: "⏸ paused",
    PlaybackStatus.STOPPED: "■ stopped",
}


def render_progress_bar(term: Terminal, position: float, duration: Optional[float], width: int) -> str:
    """Progress bar with elapsed/total times, fitted to ``width``."""
    elapsed = format_time(position)
    total = format_time(duration)
    bar_width = max(width - len(elapsed) - len(total) - 4, 0)

    if duration and duration > 0:
        filled = int(bar_width * min(position / duration, 1.0))
    else:
        filled = 0

    bar = term.cyan("━" * filled) + term.bright_black("─" * (bar_width - filled))
    return f"{elapsed} [{bar}] {total}"


def dashboard_lines(term: Terminal, state: PlayerState, now: Optional[float] = None, up_next_length: int = 5) -> list[str]:
    """Build the dashboard as formatted lines."""
    width = term.width
    lines = []

    status = STATUS_LABELS[state.status]
    header = (
        term.bold_magenta(ICONS["music"]) + " " + term.bold_cyan("CRAMP") + " "
        + term.bold_magenta(ICONS["music"]) + "  " + term.bold_white(status)
    )
    counts = f"{state.library_size} tracks · {state.deck_remaining} left in shuffle"
    spacer = max(width - term.length(header) - len(counts) - 1, 2)
    lines.append(header + " " * spacer + term.bright_black(counts))
    lines.append(term.blue("━" * max(width - 1, 0)))

    track = state.current
    if track is not None:
        lines.append(term.bold_white(f"{ICONS['note']} {track.display_name}"))
        lines.append(term.bright_black(f"  {track.path}"))
        lines.append(render_progress_bar(term, state.estimated_position(now), state.duration, width - 1))
    else:
        lines.append(term.white(f"{ICONS['note']} Nothing playing"))
        lines.append(term.bright_black("  press → to start, / to search"))
        lines.append("")

    if state.error:
        lines.append(term.red(f"⚠ {state.error}"))
    else:
        lines.append("")

    upcoming = state.upcoming[:up_next_length]
    lines.append(term.bold("Up next") + term.bright_black(f"  (queue {len(state.queue)})"))
    for index, upcoming_track in enumerate(upcoming):
        marker = ICONS["next"]
        if index == 0 and state.play_next is not None and upcoming_track.id == state.play_next.id:
            marker = term.yellow(marker)
        lines.append(f" {marker} {upcoming_track.display_name}")
    for _ in range(up_next_length - len(upcoming)):
        lines.append("")

    return [truncate(term, line, width - 1) for line in lines]


def render_dashboard(term: Terminal, state: PlayerState, y_start: int, up_next_length: int = 5) -> int:
    """
    Render dashboard section.

    Returns:
        Number of lines used
    """
    lines = dashboard_lines(term, state, up_next_length=up_next_length)
    for offset, line in enumerate(lines):
        write_at(term, 0, y_start + offset, line)
    return len(lines)
