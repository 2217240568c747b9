"""Remote control over a Unix socket."""

from .client import send_command
from .remote import RemoteControl
from .server import IPCServer, get_socket_path

__all__ = ["send_command", "RemoteControl", "IPCServer", "get_socket_path"]
