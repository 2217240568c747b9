"""Tests for the control socket server and client."""

import json
import socket
import tempfile
from pathlib import Path
from typing import Iterator

import pytest

from cramp.ipc.client import send_command
from cramp.ipc.server import IPCServer, get_socket_path


@pytest.fixture
def socket_path() -> Iterator[Path]:
    """Short socket path (AF_UNIX paths are limited to ~100 bytes)."""
    with tempfile.TemporaryDirectory(prefix="cramp") as tmp:
        yield Path(tmp) / "ctl.sock"


@pytest.fixture
def server(socket_path: Path) -> Iterator[IPCServer]:
    calls: list = []

    def handler(command: str, args: list) -> dict:
        calls.append((command, args))
        if command == "Boom":
            raise RuntimeError("handler crashed")
        return {"success": True, "message": f"did {command}", "data": {"args": args}}

    ipc_server = IPCServer(handler, socket_path)
    ipc_server.calls = calls
    ipc_server.start()
    yield ipc_server
    ipc_server.stop()


class TestGetSocketPath:
    """Tests for socket location."""

    def test_uses_runtime_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("XDG_RUNTIME_DIR", str(tmp_path))
        path = get_socket_path()
        assert path == tmp_path / "cramp" / "control.sock"
        assert path.parent.is_dir()


class TestServerClient:
    """Round trips over a real Unix socket."""

    def test_command_round_trip(self, server: IPCServer, socket_path: Path) -> None:
        success, message, data = send_command("Next", ["x", 1], socket_path=socket_path)
        assert success is True
        assert message == "did Next"
        assert data == {"args": ["x", 1]}
        assert server.calls == [("Next", ["x", 1])]

    def test_handler_exception_becomes_failure(
        self, server: IPCServer, socket_path: Path
    ) -> None:
        success, message, _ = send_command("Boom", socket_path=socket_path)
        assert success is False
        assert "handler crashed" in message

    def test_invalid_json(self, server: IPCServer, socket_path: Path) -> None:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(2.0)
            sock.connect(str(socket_path))
            sock.sendall(b"not json\n")
            response = json.loads(sock.recv(4096).decode("utf-8"))
        assert response["success"] is False
        assert server.calls == []

    def test_stop_removes_socket(self, socket_path: Path) -> None:
        ipc_server = IPCServer(lambda command, args: {}, socket_path)
        ipc_server.start()
        assert socket_path.exists()
        ipc_server.stop()
        assert not socket_path.exists()

    def test_client_without_server(self, socket_path: Path) -> None:
        success, message, data = send_command("Next", socket_path=socket_path)
        assert success is False
        assert "not running" in message
        assert data == {}
