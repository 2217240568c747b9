"""
Unified output using Loguru.

Everything is written to the log file; user-facing messages are either
printed (CLI) or queued for the terminal UI's status area.
"""

import threading
from pathlib import Path

from loguru import logger

from .console import safe_print

# Set while the blessed UI owns the terminal
_ui_mode_active = False
_ui_mode_lock = threading.Lock()

# Messages waiting to be shown by the UI loop
_pending_messages: list[tuple[str, str]] = []
_pending_messages_lock = threading.Lock()

LEVEL_COLORS = {
    "debug": "cyan",
    "info": "white",
    "success": "green",
    "warning": "yellow",
    "error": "red",
}


def setup_loguru(log_file: Path, level: str = "INFO") -> None:
    """
    Configure loguru for file-only logging (the terminal UI owns the console).

    Args:
        log_file: Path to log file
        level: Minimum level for file logging (DEBUG, INFO, WARNING, ERROR)
    """
    logger.remove()

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        rotation="10 MB",
        retention=5,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}",
        enqueue=False,
    )

    logger.info(f"Loguru initialized: {log_file} (level={level})")


def set_ui_mode(active: bool) -> None:
    """Route log() output to the UI message queue instead of stdout."""
    global _ui_mode_active
    with _ui_mode_lock:
        _ui_mode_active = active
    logger.debug(f"UI output mode {'enabled' if active else 'disabled'}")


def drain_pending_messages() -> list[tuple[str, str]]:
    """
    Get and clear all queued UI messages.

    Returns:
        List of (message, color) tuples
    """
    global _pending_messages
    with _pending_messages_lock:
        messages = _pending_messages[:]
        _pending_messages = []
        return messages


def log(message: str, level: str = "info") -> None:
    """
    Log a user-facing message to file and to the active output.

    Args:
        message: User-facing message
        level: Log level (debug, info, success, warning, error)
    """
    getattr(logger, level)(message)

    with _ui_mode_lock:
        ui_mode = _ui_mode_active

    color = LEVEL_COLORS.get(level, "white")
    if ui_mode:
        with _pending_messages_lock:
            _pending_messages.append((message, color))
    elif level != "debug":
        safe_print(message, style=None if color == "white" else color)
