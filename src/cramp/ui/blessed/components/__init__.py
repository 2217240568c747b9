"""UI rendering components."""

from .dashboard import dashboard_lines, render_dashboard, render_progress_bar
from .track_list import render_track_list, row_marker

__all__ = [
    "dashboard_lines",
    "render_dashboard",
    "render_progress_bar",
    "render_track_list",
    "row_marker",
]
