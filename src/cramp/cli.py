"""
cramp CLI - entry point

``cramp [SOURCE]`` starts the player; ``cramp ctl COMMAND`` talks to a
running instance over the control socket.
"""

import argparse
import sys
from typing import Optional

from cramp import __version__, ipc
from cramp.core.console import get_console, safe_print

# Friendly ctl names -> remote method names
CTL_ALIASES = {
    "play-pause": "PlayPause",
    "toggle": "PlayPause",
    "play": "Play",
    "pause": "Pause",
    "stop": "Stop",
    "next": "Next",
    "previous": "Previous",
    "prev": "Previous",
    "seek": "Seek",
    "position": "SetPosition",
    "open": "OpenUri",
    "play-next": "PlayNext",
    "enqueue": "Enqueue",
    "reshuffle": "Reshuffle",
    "reload": "Reload",
    "status": "GetAll",
    "get": "Get",
}


def _seconds_to_microseconds(value: str) -> int:
    return int(round(float(value) * 1_000_000))


def build_ctl_request(command: str, args: list[str]) -> tuple[str, list]:
    """Translate a ctl invocation into (remote method, args).

    ``seek`` and ``position`` take seconds on the command line and are
    sent as microseconds.

    Raises:
        ValueError: If a numeric argument cannot be parsed
    """
    method = CTL_ALIASES.get(command, command)
    if method == "Seek" and args:
        return method, [_seconds_to_microseconds(args[0])]
    if method == "SetPosition" and len(args) >= 2:
        return method, [args[0], _seconds_to_microseconds(args[1])]
    return method, list(args)


def print_status(data: dict) -> None:
    console = get_console()
    metadata = data.get("Metadata", {})
    console.print(f"[bold]{data.get('PlaybackStatus', 'Unknown')}[/bold]")
    if "xesam:title" in metadata:
        position = data.get("Position", 0) / 1_000_000
        length = metadata.get("mpris:length")
        total = f" / {length / 1_000_000:.0f}s" if length else ""
        console.print(f"  {metadata['xesam:title']}  [dim]{position:.0f}s{total}[/dim]")
        console.print(f"  [dim]{metadata.get('mpris:trackid', '')}[/dim]")


def send_ctl_command(command: str, args: list[str]) -> int:
    """
    Send a command to a running cramp instance.

    Args:
        command: ctl alias or remote method name
        args: Command arguments

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        method, request_args = build_ctl_request(command, args)
    except ValueError as e:
        safe_print(f"Invalid argument: {e}", style="red", stderr=True)
        return 1

    success, message, data = ipc.send_command(method, request_args)

    if not success:
        safe_print(message, style="red", stderr=True)
        return 1

    if method == "GetAll":
        print_status(data)
    elif method == "Get":
        for name, value in data.items():
            safe_print(f"{name}: {value}")
    else:
        safe_print(message, style="green")
    return 0


def build_player_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cramp",
        description="cramp - shuffle-first music player",
        epilog="Use 'cramp ctl COMMAND' to control a running player.",
    )
    parser.add_argument(
        "source",
        nargs="?",
        help="Folder or .m3u/.m3u8 playlist (default: configured library paths)",
    )
    parser.add_argument(
        "--no-ui",
        action="store_true",
        help="Run without the terminal UI (remote control only)",
    )
    parser.add_argument(
        "--history",
        type=int,
        metavar="N",
        help="Number of played tracks remembered for 'previous'",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Log file verbosity",
    )
    parser.add_argument("--version", action="version", version=f"cramp {__version__}")
    return parser


def build_ctl_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cramp ctl",
        description="Control a running cramp instance",
    )
    parser.add_argument(
        "command",
        help=f"One of: {', '.join(CTL_ALIASES)} (or a remote method name)",
    )
    parser.add_argument("args", nargs="*", help="Command arguments")
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the cramp command."""
    argv = sys.argv[1:] if argv is None else argv

    if argv and argv[0] == "ctl":
        ctl_args = build_ctl_parser().parse_args(argv[1:])
        sys.exit(send_ctl_command(ctl_args.command, ctl_args.args))

    args = build_player_parser().parse_args(argv)
    if args.history is not None and args.history < 1:
        safe_print("--history must be at least 1", style="red", stderr=True)
        sys.exit(1)

    from .main import run_player

    sys.exit(
        run_player(
            source=args.source,
            no_ui=args.no_ui,
            history=args.history,
            log_level=args.log_level,
        )
    )


if __name__ == "__main__":
    main()
