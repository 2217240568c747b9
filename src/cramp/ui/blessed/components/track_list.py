"""Track list rendering (library view and search results)."""

from blessed import Terminal

from cramp.domain.library.search import SearchFilter
from cramp.domain.playback.state import PlayerState

from ..helpers import truncate, write_at
from ..state import UIState


def list_header(term: Terminal, ui_state: UIState, view: SearchFilter) -> str:
    if ui_state.mode == "search":
        return (
            term.bold_yellow("Search: ")
            + view.query
            + term.reverse(" ")
            + term.bright_black(f"  {len(view)} matches")
        )
    return term.bold("Library") + term.bright_black(f"  {len(view)} tracks")


def row_marker(term: Terminal, track_id: int, state: PlayerState) -> str:
    """One-character marker: playing, play-next or queued."""
    if state.current is not None and track_id == state.current.id:
        return term.green("▶")
    if state.play_next is not None and track_id == state.play_next.id:
        return term.yellow("»")
    if any(queued.id == track_id for queued in state.queue):
        return term.cyan("+")
    return " "


def render_track_list(
    term: Terminal,
    ui_state: UIState,
    view: SearchFilter,
    state: PlayerState,
    y_start: int,
    height: int,
) -> None:
    """Render the header plus ``height - 1`` rows of the current view."""
    width = term.width - 1
    write_at(term, 0, y_start, truncate(term, list_header(term, ui_state, view), width))

    tracks = view.tracks()
    visible = max(height - 1, 0)
    window = tracks[ui_state.scroll_offset : ui_state.scroll_offset + visible]

    for row in range(visible):
        y = y_start + 1 + row
        if row >= len(window):
            write_at(term, 0, y, "")
            continue

        track = window[row]
        index = ui_state.scroll_offset + row
        text = f"{row_marker(term, track.id, state)} {track.display_name}"
        if ui_state.mode == "search":
            text += term.bright_black(f"  {track.path}")
        text = truncate(term, text, width)

        if index == ui_state.selected:
            text = term.reverse(text)
        write_at(term, 0, y, text)
