"""Tests for list scrolling and UI state helpers."""

from cramp.ui.blessed.helpers.scrolling import (
    calculate_scroll_offset,
    clamp_selection,
    move_selection,
)
from cramp.ui.blessed.state import MAX_MESSAGES, UIState, add_message, clamp


class TestScrollOffset:
    """Test scroll offset computation logic."""

    def test_no_scroll_when_fits(self):
        """When all rows fit, never scroll."""
        assert calculate_scroll_offset(4, 0, 10, 5) == 0

    def test_scroll_down_to_selection(self):
        """Selection below the viewport becomes its last row."""
        assert calculate_scroll_offset(15, 0, 10, 20) == 6

    def test_scroll_up_to_selection(self):
        """Selection above the viewport becomes its first row."""
        assert calculate_scroll_offset(2, 10, 10, 20) == 2

    def test_keeps_offset_when_visible(self):
        assert calculate_scroll_offset(12, 8, 10, 20) == 8

    def test_offset_never_past_end(self):
        """A shrunk list pulls the offset back."""
        assert calculate_scroll_offset(11, 10, 10, 12) == 2


class TestSelection:
    """Test selection movement and clamping."""

    def test_move_clamped(self):
        assert move_selection(0, -1, 5) == 0
        assert move_selection(3, 10, 5) == 4
        assert move_selection(0, 1, 0) == 0

    def test_clamp_after_shrink(self):
        assert clamp_selection(9, 3) == 2
        assert clamp_selection(-2, 3) == 0

    def test_state_clamp(self):
        state = clamp(UIState(selected=30, scroll_offset=25), 10, 5)
        assert state.selected == 9
        assert state.scroll_offset == 5


class TestMessages:
    """Test the status message buffer."""

    def test_newest_last_and_bounded(self):
        state = UIState()
        for i in range(MAX_MESSAGES + 5):
            state = add_message(state, f"msg {i}", "yellow")
        assert len(state.messages) == MAX_MESSAGES
        assert state.messages[-1] == (f"msg {MAX_MESSAGES + 4}", "yellow")
