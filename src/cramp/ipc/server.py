"""IPC server for remote-control requests from external processes."""

import json
import os
import socket
import threading
from pathlib import Path
from typing import Any, Callable, Optional

from loguru import logger

RequestHandler = Callable[[str, list], dict[str, Any]]


def get_socket_path(create_dir: bool = True) -> Path:
    """
    Get the path to the cramp control socket.

    Returns:
        Path to Unix socket
    """
    runtime_dir = os.environ.get("XDG_RUNTIME_DIR")
    if runtime_dir:
        socket_dir = Path(runtime_dir) / "cramp"
    else:
        socket_dir = Path.home() / ".local" / "share" / "cramp"

    if create_dir:
        socket_dir.mkdir(parents=True, exist_ok=True)
    return socket_dir / "control.sock"


def _encode(response: dict[str, Any]) -> bytes:
    return (json.dumps(response) + "\n").encode("utf-8")


class IPCServer:
    """Unix socket server for remote-control requests.

    Runs in a background thread. Each connection carries one JSON line
    ``{"command": ..., "args": [...]}`` and gets one JSON line back.
    """

    def __init__(self, handler: RequestHandler, socket_path: Optional[Path] = None):
        """
        Initialize IPC server.

        Args:
            handler: Called as handler(command, args) on the server thread;
                returns the response dict
            socket_path: Socket location (default: get_socket_path())
        """
        self.handler = handler
        self.socket_path = socket_path or get_socket_path()
        self.server_socket: Optional[socket.socket] = None
        self.running = False
        self.thread: Optional[threading.Thread] = None
        self._ready = threading.Event()

    def start(self) -> None:
        """Start the IPC server in a background thread."""
        if self.running:
            return

        if self.socket_path.exists():
            try:
                self.socket_path.unlink()
            except OSError as e:
                logger.warning(f"Could not remove stale socket {self.socket_path}: {e}")

        self.running = True
        self.thread = threading.Thread(target=self._run_server, daemon=True)
        self.thread.start()
        self._ready.wait(timeout=2.0)

    def stop(self) -> None:
        """Stop the IPC server and cleanup."""
        self.running = False

        if self.server_socket:
            try:
                self.server_socket.close()
            except OSError:
                pass

        if self.thread and self.thread.is_alive():
            self.thread.join(timeout=2.0)

        if self.socket_path.exists():
            try:
                self.socket_path.unlink()
            except OSError:
                pass

    def _run_server(self) -> None:
        """Run the Unix socket server loop."""
        try:
            self.server_socket = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            self.server_socket.bind(str(self.socket_path))
            self.server_socket.listen(5)
            self.server_socket.settimeout(1.0)
            logger.info(f"IPC server listening on {self.socket_path}")
        except OSError:
            logger.exception("IPC server failed to bind")
            self.running = False
            return
        finally:
            self._ready.set()

        try:
            while self.running:
                try:
                    client_socket, _ = self.server_socket.accept()
                except socket.timeout:
                    continue
                except OSError as e:
                    if self.running:
                        logger.error(f"Error accepting connection: {e}")
                    continue
                self._handle_client(client_socket)
        finally:
            self.server_socket.close()

    def _handle_client(self, client_socket: socket.socket) -> None:
        """
        Handle a client connection.

        Args:
            client_socket: Connected client socket
        """
        with client_socket:
            try:
                data = b""
                while b"\n" not in data:
                    chunk = client_socket.recv(4096)
                    if not chunk:
                        break
                    data += chunk

                if not data:
                    return

                payload = json.loads(data.decode("utf-8").strip())
                if not isinstance(payload, dict):
                    raise ValueError("request must be a JSON object")
                command = str(payload.get("command", ""))
                args = payload.get("args", []) or []
                if not isinstance(args, list):
                    args = [args]

                logger.debug(f"IPC request: {command} {args}")
                response = self.handler(command, args)

            except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as e:
                response = {"success": False, "message": f"Invalid request: {e}", "data": {}}
            except Exception as e:
                logger.exception("IPC handler error")
                response = {
                    "success": False,
                    "message": f"Error processing command: {e}",
                    "data": {},
                }

            try:
                client_socket.sendall(_encode(response))
            except OSError as e:
                logger.debug(f"IPC client went away before the response: {e}")
