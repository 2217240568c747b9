"""Main event loop and entry point for the blessed UI."""

import queue
import sys
import threading
from pathlib import Path

from blessed import Terminal
from loguru import logger

from cramp.context import AppContext
from cramp.core.exceptions import LoadError
from cramp.core.output import drain_pending_messages, log, set_ui_mode
from cramp.domain.library.search import SearchFilter
from cramp.domain.playback.commands import CommandResult
from cramp.ipc.remote import RemoteControl
from cramp.ipc.server import IPCServer

from .components import render_dashboard, render_track_list
from .events import handle_key
from .helpers import truncate, write_at
from .state import UIState, add_message, clamp

FOOTER_HEIGHT = 2
HELP_TEXT = (
    "space play/pause  ←/→ prev/next  shift+←/→ seek  enter play  "
    "n next  a queue  s shuffle  x stop  r reload  / search  q quit"
)
SEARCH_HELP_TEXT = (
    "type to filter  enter play  ctrl+n next  ctrl+a queue  ←/→ prev/next  esc back"
)


def start_ipc_server(ctx: AppContext) -> IPCServer | None:
    """Start the remote-control server if enabled; failures are non-fatal."""
    if not ctx.config.ipc.enabled:
        return None
    remote = RemoteControl(
        ctx.controller,
        timeout=ctx.config.ipc.response_timeout,
        loader=ctx.build_registry,
    )
    socket_path = None
    if ctx.config.ipc.socket_path:
        socket_path = Path(ctx.config.ipc.socket_path)
    try:
        server = IPCServer(remote.handle, socket_path)
        server.start()
        return server
    except OSError as e:
        logger.warning(f"IPC server failed to start: {e}")
        return None


def up_next_rows(ctx: AppContext) -> int:
    return ctx.config.ui.up_next_length if ctx.config.ui.show_up_next else 0


def dashboard_height(ctx: AppContext) -> int:
    # header, separator, title, path, progress, error line, "Up next" + rows
    return 7 + up_next_rows(ctx)


def reload_in_background(ctx: AppContext) -> threading.Thread:
    """Rescan the library off the UI thread and hand the result to the controller."""

    def worker() -> None:
        try:
            registry = ctx.build_registry()
        except LoadError as e:
            log(f"Reload failed: {e}", "warning")
            return
        ctx.controller.submit("reload", registry=registry)
        log(f"Reloaded {len(registry)} tracks", "success")

    thread = threading.Thread(target=worker, daemon=True, name="LibraryReload")
    thread.start()
    return thread


def run_interactive_ui(ctx: AppContext) -> None:
    """
    Run the interactive UI until the user quits.

    Args:
        ctx: Application context with config, controller and backend
    """
    # force_styling=None turns colors off even on a tty
    term = Terminal() if ctx.config.ui.use_colors else Terminal(force_styling=None)

    with term.fullscreen(), term.cbreak(), term.hidden_cursor():
        try:
            main_loop(term, ctx)
        except KeyboardInterrupt:
            logger.info("Ctrl+C detected - leaving UI")


def render_footer(term: Terminal, ui_state: UIState, y: int) -> None:
    width = term.width - 1
    if ui_state.messages:
        text, color = ui_state.messages[-1]
        write_at(term, 0, y, truncate(term, getattr(term, color)(text), width))
    else:
        write_at(term, 0, y, "")
    help_text = SEARCH_HELP_TEXT if ui_state.mode == "search" else HELP_TEXT
    write_at(term, 0, y + 1, truncate(term, term.bright_black(help_text), width))


def main_loop(term: Terminal, ctx: AppContext) -> None:
    """
    Main event loop.

    Each frame: apply queued controller commands, collect messages, redraw
    if anything visible changed, then wait up to 100ms for a key.
    """
    controller = ctx.controller
    ui_state = UIState()
    view = SearchFilter(controller.registry)
    view_registry = controller.registry
    pending_replies: list[queue.Queue] = []

    set_ui_mode(True)
    ipc_server = start_ipc_server(ctx)

    last_render_key = None
    last_size = None

    try:
        while not ui_state.should_quit:
            controller.process_pending()

            if controller.registry is not view_registry:
                view_registry = controller.registry
                view.set_registry(view_registry)

            for reply in list(pending_replies):
                try:
                    result: CommandResult = reply.get_nowait()
                except queue.Empty:
                    continue
                pending_replies.remove(reply)
                if not result.success:
                    ui_state = add_message(ui_state, result.message, "yellow")

            for text, color in drain_pending_messages():
                ui_state = add_message(ui_state, text, color)

            state = controller.state
            dash_height = dashboard_height(ctx)
            list_height = max(term.height - dash_height - FOOTER_HEIGHT, 2)
            visible_rows = list_height - 1
            ui_state = clamp(ui_state, len(view), visible_rows)

            size = (term.width, term.height)
            render_key = (
                state,
                ui_state,
                view.query,
                len(view),
                size,
                int(state.estimated_position()),
            )
            if render_key != last_render_key:
                if size != last_size:
                    sys.stdout.write(term.home + term.clear)
                    last_size = size
                render_dashboard(term, state, 0, up_next_rows(ctx))
                render_track_list(term, ui_state, view, state, dash_height, list_height)
                render_footer(term, ui_state, dash_height + list_height)
                sys.stdout.flush()
                last_render_key = render_key

            key = term.inkey(timeout=0.1)
            if not key:
                continue

            ui_state, command = handle_key(
                ui_state, key, view, visible_rows, ctx.config.playback.seek_step
            )
            if command is not None and command.action == "reload_library":
                log("Reloading library...")
                reload_in_background(ctx)
            elif command is not None:
                reply_queue: queue.Queue = queue.Queue(maxsize=1)
                pending_replies.append(reply_queue)
                controller.submit(command.action, reply=reply_queue, **command.data)
    finally:
        if ipc_server:
            ipc_server.stop()
        set_ui_mode(False)
