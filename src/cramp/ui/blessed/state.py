"""UI state management - immutable state updates."""

from dataclasses import dataclass, field, replace
from typing import Any

from cramp.ui.blessed.helpers.scrolling import (
    calculate_scroll_offset,
    clamp_selection,
    move_selection,
)

MAX_MESSAGES = 50


@dataclass
class InternalCommand:
    """Request from the UI to the playback controller."""

    action: str  # Controller action name
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UIState:
    """UI-only state. Player state lives in the controller."""

    mode: str = "normal"  # 'normal' or 'search'
    selected: int = 0  # Row in the track list view
    scroll_offset: int = 0
    messages: tuple[tuple[str, str], ...] = ()  # (text, color), newest last
    should_quit: bool = False


def enter_search(state: UIState) -> UIState:
    return replace(state, mode="search", selected=0, scroll_offset=0)


def exit_search(state: UIState) -> UIState:
    return replace(state, mode="normal", selected=0, scroll_offset=0)


def select(state: UIState, index: int, total_items: int, visible_items: int) -> UIState:
    """Select a row and scroll it into view."""
    selected = clamp_selection(index, total_items)
    offset = calculate_scroll_offset(
        selected, state.scroll_offset, visible_items, total_items
    )
    return replace(state, selected=selected, scroll_offset=offset)


def move(state: UIState, delta: int, total_items: int, visible_items: int) -> UIState:
    return select(
        state, move_selection(state.selected, delta, total_items), total_items, visible_items
    )


def clamp(state: UIState, total_items: int, visible_items: int) -> UIState:
    """Re-validate selection after the list changed."""
    return select(state, state.selected, total_items, visible_items)


def add_message(state: UIState, text: str, color: str = "white") -> UIState:
    messages = (state.messages + ((text, color),))[-MAX_MESSAGES:]
    return replace(state, messages=messages)


def request_quit(state: UIState) -> UIState:
    return replace(state, should_quit=True)
