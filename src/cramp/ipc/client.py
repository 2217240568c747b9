"""IPC client for sending commands to a running cramp instance."""

import json
import socket
from pathlib import Path
from typing import Any, List, Optional, Tuple

from .server import get_socket_path


def send_command(
    command: str,
    args: Optional[List[Any]] = None,
    socket_path: Optional[Path] = None,
    timeout: float = 20.0,
) -> Tuple[bool, str, dict]:
    """
    Send a command to the running cramp instance.

    Args:
        command: Command name (e.g., 'PlayPause', 'Next', 'Get')
        args: Command arguments (optional)
        socket_path: Socket to connect to (default: get_socket_path())
        timeout: Seconds to wait for the response

    Returns:
        (success, message, data) tuple
    """
    socket_path = socket_path or get_socket_path(create_dir=False)

    if not socket_path.exists():
        return False, "cramp is not running", {}

    payload = {"command": command, "args": args or []}

    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(timeout)
            sock.connect(str(socket_path))
            sock.sendall((json.dumps(payload) + "\n").encode("utf-8"))

            response_data = b""
            while b"\n" not in response_data:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                response_data += chunk

        if not response_data:
            return False, "No response from cramp", {}

        response = json.loads(response_data.decode("utf-8").strip())
        return (
            bool(response.get("success", False)),
            response.get("message", "No message"),
            response.get("data", {}) or {},
        )

    except socket.timeout:
        return False, "cramp not responding (timeout)", {}
    except (ConnectionRefusedError, FileNotFoundError):
        return False, "cramp is not running", {}
    except json.JSONDecodeError as e:
        return False, f"Invalid response from cramp: {e}", {}
    except OSError as e:
        return False, f"Failed to send command: {e}", {}
