"""
Audio backends.

The controller only needs ``play(track, generation)`` plus transport calls.
Completion and failure are reported back asynchronously by submitting
``track_finished`` / ``playback_failed`` / ``sync_position`` commands that
carry the generation they refer to.

MpvBackend drives an mpv process over its JSON IPC socket and watches it
from a background thread.
"""

import json
import os
import socket
import subprocess
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Callable, NamedTuple, Optional, Protocol

from loguru import logger

from cramp.core.config import PlayerConfig
from cramp.core.exceptions import BackendUnavailableError, PlaybackError
from cramp.domain.library.models import Track

# Seconds after a load before "idle" is read as a failed load
LOAD_GRACE_PERIOD = 1.0

# Seconds after a load before "eof-reached" is trusted
MIN_PLAYBACK_TIME = 0.5

WATCH_INTERVAL = 0.25


class AudioBackend(Protocol):
    def play(self, track: Track, generation: int) -> None: ...

    def pause(self) -> None: ...

    def resume(self) -> None: ...

    def stop(self) -> None: ...

    def seek(self, position: float) -> None: ...


Reporter = Callable[..., None]


class MpvProcess(NamedTuple):
    """Handle to a running mpv."""

    socket_path: str
    process: subprocess.Popen


def check_mpv_available(binary: str = "mpv") -> bool:
    """Check if MPV is available on the system."""
    try:
        result = subprocess.run(
            [binary, "--version"], capture_output=True, text=True, timeout=5
        )
        return result.returncode == 0
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return False


def start_mpv(config: PlayerConfig) -> Optional[MpvProcess]:
    """Start MPV with JSON IPC and wait for its socket."""
    if config.mpv_socket_path:
        socket_path = config.mpv_socket_path
    else:
        socket_path = str(Path(tempfile.gettempdir()) / f"cramp-mpv-{os.getpid()}.sock")

    logger.info(f"Starting MPV player with socket: {socket_path}")

    try:
        if os.path.exists(socket_path):
            logger.debug(f"Removing existing socket: {socket_path}")
            os.unlink(socket_path)

        cmd = [
            config.mpv_binary,
            "--idle=yes",
            "--no-video",
            "--no-terminal",
            f"--input-ipc-server={socket_path}",
            "--keep-open=yes",
            "--load-scripts=no",
        ]

        process = subprocess.Popen(
            cmd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            stdin=subprocess.DEVNULL,
        )

        timeout = 5.0
        start_time = time.time()
        while not os.path.exists(socket_path):
            if time.time() - start_time > timeout:
                logger.error(f"MPV socket creation timeout after {timeout}s")
                process.kill()
                return None
            time.sleep(0.1)

        if send_mpv_command(socket_path, {"command": ["get_property", "idle-active"]}):
            logger.info("MPV started successfully")
            return MpvProcess(socket_path=socket_path, process=process)

        logger.error("MPV socket connection test failed")
        process.kill()
        return None

    except (subprocess.SubprocessError, OSError) as e:
        logger.error(f"Failed to start MPV: {e}")
        return None


def stop_mpv(mpv: MpvProcess) -> None:
    """Stop MPV process and cleanup."""
    try:
        mpv.process.kill()
        mpv.process.wait(timeout=2.0)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug(f"MPV already gone: {e}")

    if os.path.exists(mpv.socket_path):
        try:
            os.unlink(mpv.socket_path)
        except OSError:
            logger.debug(f"Could not remove socket {mpv.socket_path}")


def _mpv_request(socket_path: Optional[str], command: dict[str, Any]) -> Optional[dict]:
    """Send one JSON IPC request and return the decoded reply."""
    if not socket_path or not os.path.exists(socket_path):
        return None

    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(2.0)
            sock.connect(socket_path)
            sock.sendall((json.dumps(command) + "\n").encode("utf-8"))
            response = sock.recv(4096).decode("utf-8")
    except OSError:
        return None

    # mpv may interleave events before the reply
    for line in response.splitlines():
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            continue
        if "error" in data and "event" not in data:
            return data
    return None


def send_mpv_command(socket_path: Optional[str], command: dict[str, Any]) -> bool:
    """Send JSON IPC command to MPV."""
    reply = _mpv_request(socket_path, command)
    return reply is not None and reply.get("error") == "success"


def get_mpv_property(socket_path: Optional[str], property_name: str) -> Any:
    """Get a property value from MPV."""
    reply = _mpv_request(socket_path, {"command": ["get_property", property_name]})
    if reply is not None and reply.get("error") == "success":
        return reply.get("data")
    return None


class MpvBackend:
    """AudioBackend on top of an mpv process."""

    def __init__(self, config: PlayerConfig, report: Optional[Reporter] = None):
        self.config = config
        self._report = report
        self._mpv: Optional[MpvProcess] = None

        self._lock = threading.Lock()
        self._generation: Optional[int] = None
        self._loaded_at = 0.0
        self._reported = True
        self._last_sync = 0.0

        self._running = False
        self._thread: Optional[threading.Thread] = None

    def attach(self, report: Reporter) -> None:
        """Set the callback signals are submitted through (controller.submit)."""
        self._report = report

    @property
    def socket_path(self) -> Optional[str]:
        return self._mpv.socket_path if self._mpv else None

    def is_running(self) -> bool:
        return self._mpv is not None and self._mpv.process.poll() is None

    def start(self) -> bool:
        """Start mpv and the watcher thread."""
        self._mpv = start_mpv(self.config)
        if self._mpv is None:
            return False
        self._running = True
        self._thread = threading.Thread(target=self._watch, daemon=True)
        self._thread.start()
        return True

    def close(self) -> None:
        self._running = False
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=2.0)
        if self._mpv:
            stop_mpv(self._mpv)
            self._mpv = None

    def play(self, track: Track, generation: int) -> None:
        if not self.is_running():
            raise BackendUnavailableError("mpv is not running", track.path)

        with self._lock:
            self._generation = generation
            self._loaded_at = time.monotonic()
            self._reported = False
            self._last_sync = 0.0

        if not send_mpv_command(
            self.socket_path, {"command": ["loadfile", track.path, "replace"]}
        ):
            raise PlaybackError(f"mpv refused to load {track.path}", track.path)

        send_mpv_command(self.socket_path, {"command": ["set_property", "pause", False]})

    def pause(self) -> None:
        self._send({"command": ["set_property", "pause", True]}, "pause")

    def resume(self) -> None:
        self._send({"command": ["set_property", "pause", False]}, "resume")

    def stop(self) -> None:
        with self._lock:
            self._reported = True
        self._send({"command": ["stop"]}, "stop")

    def seek(self, position: float) -> None:
        self._send({"command": ["seek", position, "absolute"]}, "seek")

    def _send(self, command: dict[str, Any], what: str) -> None:
        if not send_mpv_command(self.socket_path, command):
            logger.warning(f"mpv {what} command failed")

    def _watch(self) -> None:
        while self._running:
            try:
                self.poll()
            except Exception:
                logger.exception("mpv watcher error")
            time.sleep(WATCH_INTERVAL)

    def poll(self) -> None:
        """Check the loaded file once and report completion, failure or progress."""
        with self._lock:
            generation = self._generation
            if generation is None or self._reported:
                return
            elapsed = time.monotonic() - self._loaded_at

        if not self.is_running():
            self._emit("playback_failed", generation, error="mpv exited")
            return

        socket_path = self.socket_path
        if elapsed >= MIN_PLAYBACK_TIME:
            if get_mpv_property(socket_path, "eof-reached") is True:
                self._emit("track_finished", generation)
                return

        if elapsed >= LOAD_GRACE_PERIOD:
            if get_mpv_property(socket_path, "idle-active") is True:
                self._emit(
                    "playback_failed", generation, error="mpv could not play the file"
                )
                return

        now = time.monotonic()
        if now - self._last_sync >= self.config.position_poll_interval:
            position = get_mpv_property(socket_path, "time-pos")
            if position is not None:
                duration = get_mpv_property(socket_path, "duration")
                self._last_sync = now
                self._report_signal(
                    "sync_position",
                    generation=generation,
                    position=float(position),
                    duration=float(duration) if duration else None,
                )

    def _emit(self, action: str, generation: int, **data: Any) -> None:
        """Report a terminal signal once per generation."""
        with self._lock:
            if self._reported or generation != self._generation:
                return
            self._reported = True
        self._report_signal(action, generation=generation, **data)

    def _report_signal(self, action: str, **data: Any) -> None:
        if self._report is None:
            logger.debug(f"No reporter attached, dropping {action}")
            return
        self._report(action, **data)


class NullBackend:
    """Backend that plays nothing; used when mpv is unavailable (and in tests)."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def play(self, track: Track, generation: int) -> None:
        self.calls.append(("play", track.id, generation))

    def pause(self) -> None:
        self.calls.append(("pause",))

    def resume(self) -> None:
        self.calls.append(("resume",))

    def stop(self) -> None:
        self.calls.append(("stop",))

    def seek(self, position: float) -> None:
        self.calls.append(("seek", position))
