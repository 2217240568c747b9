"""
Player startup: config, logging, library, mpv, then the UI or headless loop.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from cramp.context import AppContext
from cramp.core import config
from cramp.core.console import get_console, safe_print
from cramp.core.exceptions import LoadError
from cramp.core.output import setup_loguru
from cramp.domain.library.registry import TrackRegistry
from cramp.domain.library.scanner import load_library_paths, load_source
from cramp.domain.playback.backend import MpvBackend, check_mpv_available

HEADLESS_POLL_INTERVAL = 0.2


def init_logging(current_config: config.Config) -> Path:
    log_file = (
        Path(current_config.logging.log_file)
        if current_config.logging.log_file
        else (config.get_data_dir() / "cramp.log")
    )
    setup_loguru(log_file, level=current_config.logging.level)
    return log_file


def load_registry(current_config: config.Config, source: Optional[str]) -> TrackRegistry:
    """Load the initial library from SOURCE or the configured library paths.

    Raises:
        LoadError: If nothing playable was found
    """
    if source:
        return load_source(Path(source), current_config)
    return load_library_paths(current_config)


def run_headless(ctx: AppContext) -> None:
    """Apply commands from the backend and the remote socket until Ctrl+C."""
    from cramp.ui.blessed.app import start_ipc_server

    ipc_server = start_ipc_server(ctx)
    if ipc_server is None:
        safe_print(
            "Remote control is disabled; nothing can drive a headless player",
            style="yellow",
        )

    safe_print("Playing in the background. Ctrl+C to quit.", style="green")
    try:
        while True:
            ctx.controller.process_pending(timeout=HEADLESS_POLL_INTERVAL)
    finally:
        if ipc_server:
            ipc_server.stop()


def run_player(
    source: Optional[str] = None,
    no_ui: bool = False,
    history: Optional[int] = None,
    log_level: Optional[str] = None,
) -> int:
    """Start the player.

    Args:
        source: Folder or M3U playlist (None: configured library paths)
        no_ui: Run without the terminal UI, controlled over the socket only
        history: History capacity override
        log_level: Log level override

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    current_config = config.load_config()
    if history is not None:
        current_config.playback.history_capacity = history
    if log_level:
        current_config.logging.level = log_level.upper()

    try:
        current_config.playback.validate()
    except ValueError as e:
        safe_print(f"Invalid configuration: {e}", style="red", stderr=True)
        return 1

    config.ensure_directories()
    log_file = init_logging(current_config)

    try:
        registry = load_registry(current_config, source)
    except LoadError as e:
        logger.error(str(e))
        safe_print(f"Cannot load library: {e}", style="red", stderr=True)
        return 1

    if not check_mpv_available(current_config.player.mpv_binary):
        safe_print(
            f"{current_config.player.mpv_binary} not found. "
            "Install mpv to play audio.",
            style="red",
            stderr=True,
        )
        return 1

    backend = MpvBackend(current_config.player)
    if not backend.start():
        safe_print(f"Failed to start mpv (see {log_file})", style="red", stderr=True)
        return 1

    ctx = AppContext.create(
        current_config,
        backend,
        registry=registry,
        source=source,
        console=get_console() if no_ui else None,
    )
    # Start playing straight away from the shuffle deck
    ctx.controller.submit("skip_forward")

    try:
        if no_ui:
            run_headless(ctx)
        else:
            from cramp.ui.blessed import run_interactive_ui

            run_interactive_ui(ctx)
    except KeyboardInterrupt:
        safe_print("\nInterrupted by user. Cleaning up...", style="yellow")
    finally:
        ctx.controller.submit("stop")
        ctx.controller.process_pending()
        backend.close()
        logger.info("cramp exited")

    return 0
