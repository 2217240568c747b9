"""Keyboard handling: keystroke parsing and the key map."""

from typing import Optional

from blessed.keyboard import Keystroke

from cramp.domain.library.search import SearchFilter

from ..state import (
    InternalCommand,
    UIState,
    enter_search,
    exit_search,
    move,
    request_quit,
    select,
)

# Normal-mode single-key commands ("reload_library" is handled by the app)
NORMAL_KEYS = {
    " ": "toggle",
    "p": "pause",
    "s": "reshuffle",
    "x": "stop",
    "r": "reload_library",
}

# Keys that act on the selected track: normal mode, search mode
SELECTION_KEYS = {
    "n": "set_play_next",
    "a": "enqueue",
}
SEARCH_SELECTION_KEYS = {
    "ctrl_n": "set_play_next",
    "ctrl_a": "enqueue",
}


def parse_key(key: Keystroke) -> dict:
    """
    Parse keystroke into event dictionary.

    Args:
        key: blessed Keystroke

    Returns:
        Event dictionary describing the key press
    """
    event = {
        "type": "unknown",
        "key": key,
        "name": key.name if hasattr(key, "name") else None,
        "char": str(key) if key and key.isprintable() else None,
    }

    if key.name == "KEY_ENTER" or key in ("\n", "\r"):
        event["type"] = "enter"
    elif key.name == "KEY_ESCAPE" or key == "\x1b":
        event["type"] = "escape"
    elif key.name == "KEY_BACKSPACE" or key in ("\x7f", "\x08"):
        event["type"] = "backspace"
    elif key.name == "KEY_UP":
        event["type"] = "arrow_up"
    elif key.name == "KEY_DOWN":
        event["type"] = "arrow_down"
    elif key.name == "KEY_LEFT":
        event["type"] = "arrow_left"
    elif key.name == "KEY_RIGHT":
        event["type"] = "arrow_right"
    elif key.name == "KEY_SLEFT":  # Shift+Left
        event["type"] = "shift_arrow_left"
    elif key.name == "KEY_SRIGHT":  # Shift+Right
        event["type"] = "shift_arrow_right"
    elif key.name == "KEY_PGUP":
        event["type"] = "page_up"
    elif key.name == "KEY_PGDOWN":
        event["type"] = "page_down"
    elif key.name == "KEY_HOME":
        event["type"] = "home"
    elif key.name == "KEY_END":
        event["type"] = "end"
    elif key == "\x03":  # Ctrl+C
        event["type"] = "ctrl_c"
    elif key == "\x0e":  # Ctrl+N
        event["type"] = "ctrl_n"
    elif key == "\x01":  # Ctrl+A
        event["type"] = "ctrl_a"
    elif key and key.isprintable():
        event["type"] = "char"

    return event


def _navigate(
    state: UIState, event_type: str, total: int, visible: int
) -> Optional[UIState]:
    """Selection movement shared by both modes; None if not a movement key."""
    page = max(1, visible - 1)
    if event_type == "arrow_up":
        return move(state, -1, total, visible)
    if event_type == "arrow_down":
        return move(state, 1, total, visible)
    if event_type == "page_up":
        return move(state, -page, total, visible)
    if event_type == "page_down":
        return move(state, page, total, visible)
    if event_type == "home":
        return select(state, 0, total, visible)
    if event_type == "end":
        return select(state, total - 1, total, visible)
    return None


def _transport(event_type: str, seek_step: float) -> Optional[InternalCommand]:
    """Arrow-key transport shared by both modes."""
    if event_type == "arrow_right":
        return InternalCommand("skip_forward")
    if event_type == "arrow_left":
        return InternalCommand("skip_backward")
    if event_type == "shift_arrow_right":
        return InternalCommand("seek", {"delta": seek_step})
    if event_type == "shift_arrow_left":
        return InternalCommand("seek", {"delta": -seek_step})
    return None


def _on_selected(state: UIState, view: SearchFilter, action: str) -> Optional[InternalCommand]:
    track_id = view.track_id_at(state.selected)
    if track_id is None:
        return None
    return InternalCommand(action, {"track_id": track_id})


def handle_key(
    state: UIState,
    key: Keystroke,
    view: SearchFilter,
    visible_items: int,
    seek_step: float = 5.0,
) -> tuple[UIState, Optional[InternalCommand]]:
    """
    Apply one key press.

    The search query lives in ``view`` and is updated in place.

    Returns:
        (new UI state, command for the controller or None)
    """
    event = parse_key(key)
    event_type = event["type"]
    total = len(view)

    if event_type == "ctrl_c":
        return request_quit(state), None

    moved = _navigate(state, event_type, total, visible_items)
    if moved is not None:
        return moved, None

    command = _transport(event_type, seek_step)
    if command is not None:
        return state, command

    if state.mode == "search":
        return _handle_search_key(state, event, view)
    return _handle_normal_key(state, event, view)


def _handle_normal_key(
    state: UIState, event: dict, view: SearchFilter
) -> tuple[UIState, Optional[InternalCommand]]:
    event_type = event["type"]
    char = event["char"]

    if event_type == "enter":
        return state, _on_selected(state, view, "play_now")
    if char == "q":
        return request_quit(state), None
    if char == "/":
        view.set_query("")
        return enter_search(state), None
    if char in NORMAL_KEYS:
        return state, InternalCommand(NORMAL_KEYS[char])
    if char in SELECTION_KEYS:
        return state, _on_selected(state, view, SELECTION_KEYS[char])

    return state, None


def _handle_search_key(
    state: UIState, event: dict, view: SearchFilter
) -> tuple[UIState, Optional[InternalCommand]]:
    event_type = event["type"]

    if event_type == "escape":
        view.set_query("")
        return exit_search(state), None
    if event_type == "enter":
        command = _on_selected(state, view, "play_now")
        view.set_query("")
        return exit_search(state), command
    if event_type in SEARCH_SELECTION_KEYS:
        return state, _on_selected(state, view, SEARCH_SELECTION_KEYS[event_type])
    if event_type == "backspace":
        view.backspace()
        return select(state, 0, len(view), 1), None
    if event_type == "char":
        view.append_char(event["char"])
        return select(state, 0, len(view), 1), None

    return state, None
