"""Pure helpers for selection and scrolling in list views."""


def calculate_scroll_offset(
    selected: int,
    current_scroll: int,
    visible_items: int,
    total_items: int,
) -> int:
    """Scroll offset that keeps ``selected`` inside the viewport.

    Examples:
        >>> calculate_scroll_offset(15, 0, 10, 20)
        6
        >>> calculate_scroll_offset(2, 10, 10, 20)
        2
    """
    if visible_items <= 0 or total_items <= visible_items:
        return 0

    if selected >= current_scroll + visible_items:
        offset = selected - visible_items + 1
    elif selected < current_scroll:
        offset = selected
    else:
        offset = current_scroll

    return max(0, min(offset, total_items - visible_items))


def move_selection(current: int, delta: int, total_items: int) -> int:
    """Move selection by ``delta``, clamped to the list bounds."""
    if total_items == 0:
        return 0
    return max(0, min(current + delta, total_items - 1))


def clamp_selection(selection: int, total_items: int) -> int:
    """Clamp a selection after the list changed size."""
    if total_items == 0:
        return 0
    return max(0, min(selection, total_items - 1))
