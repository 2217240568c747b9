"""
MPRIS-shaped remote control surface.

Methods and properties follow the org.mpris.MediaPlayer2.Player interface
(times in microseconds, track ids as object paths). Methods are submitted
to the controller and answered once applied; property reads come from the
latest published snapshot.
"""

import queue
from pathlib import Path
from typing import Any, Callable, Optional

from loguru import logger

from cramp.core.exceptions import LoadError, RemoteCommandError
from cramp.domain.library.m3u import normalize_path
from cramp.domain.library.registry import TrackRegistry
from cramp.domain.playback.commands import CommandResult
from cramp.domain.playback.controller import PlaybackController
from cramp.domain.playback.state import PlaybackStatus, PlayerState

IDENTITY = "CRAMP"
TRACK_ID_PREFIX = "/com/cramp/tracks/trackid"
NO_TRACK = "/org/mpris/MediaPlayer2/TrackList/NoTrack"
MICROSECONDS = 1_000_000

# Properties that exist in MPRIS but are fixed here
READ_ONLY_PROPERTIES = {"Volume", "Rate", "Shuffle", "LoopStatus"}


def track_object_path(track_id: int) -> str:
    return f"{TRACK_ID_PREFIX}{track_id}"


def parse_track_object_path(path: str) -> Optional[int]:
    """Track id from an object path, or None if it is not one of ours."""
    if not path.startswith(TRACK_ID_PREFIX):
        return None
    try:
        return int(path[len(TRACK_ID_PREFIX):])
    except ValueError:
        return None


def to_microseconds(seconds: Optional[float]) -> int:
    return int(round((seconds or 0.0) * MICROSECONDS))


def build_metadata(state: PlayerState) -> dict[str, Any]:
    """MPRIS Metadata map for the current track."""
    track = state.current
    if track is None:
        return {"mpris:trackid": NO_TRACK}

    metadata: dict[str, Any] = {
        "mpris:trackid": track_object_path(track.id),
        "xesam:title": track.display_name,
        "xesam:url": Path(track.path).as_uri(),
    }
    duration = state.duration if state.duration is not None else track.duration
    if duration is not None:
        metadata["mpris:length"] = to_microseconds(duration)
    return metadata


def mpris_status(status: PlaybackStatus) -> str:
    """MPRIS has no Idle; an empty player reports Stopped."""
    return "Stopped" if status is PlaybackStatus.IDLE else status.value


def build_properties(state: PlayerState) -> dict[str, Any]:
    loaded = state.library_size > 0
    return {
        "Identity": IDENTITY,
        "PlaybackStatus": mpris_status(state.status),
        "Metadata": build_metadata(state),
        "Position": to_microseconds(state.estimated_position()),
        "Shuffle": True,
        "LoopStatus": "Playlist",
        "Rate": 1.0,
        "CanGoNext": loaded,
        "CanGoPrevious": len(state.history) > 0,
        "CanPlay": loaded,
        "CanPause": state.current is not None,
        "CanSeek": state.current is not None,
        "CanControl": True,
    }


class RemoteControl:
    """Translates remote requests into controller commands."""

    def __init__(
        self,
        controller: PlaybackController,
        timeout: float = 15.0,
        loader: Optional[Callable[[], TrackRegistry]] = None,
    ):
        """
        Args:
            controller: Controller commands are submitted to
            timeout: Seconds to wait for a submitted command to be applied
            loader: Builds a fresh registry for "Reload" (None disables it)
        """
        self.controller = controller
        self.timeout = timeout
        self.loader = loader
        self._methods: dict[str, Callable[[list], tuple[str, dict]]] = {
            "Play": lambda args: ("resume", {}),
            "Pause": lambda args: ("pause", {}),
            "PlayPause": lambda args: ("toggle", {}),
            "Stop": lambda args: ("stop", {}),
            "Next": lambda args: ("skip_forward", {}),
            "Previous": lambda args: ("skip_backward", {}),
            "Seek": self._seek_args,
            "SetPosition": self._set_position_args,
            "OpenUri": self._open_uri_args,
            "PlayNext": lambda args: ("set_play_next", self._track_arg(args)),
            "Enqueue": lambda args: ("enqueue", self._track_arg(args)),
            "Reshuffle": lambda args: ("reshuffle", {}),
            "Reload": self._reload_args,
        }

    def handle(self, command: str, args: list) -> dict[str, Any]:
        """Handle one request.

        Returns:
            Response dict with ``success``, ``message`` and ``data``
        """
        try:
            if command == "Get":
                return self._get(args)
            if command == "GetAll":
                return self._response(True, "ok", build_properties(self.controller.state))
            if command == "Set":
                return self._set(args)
            if command not in self._methods:
                raise RemoteCommandError(f"Unknown command: {command}")

            action, data = self._methods[command](args)
            return self._submit(action, data)

        except (RemoteCommandError, LoadError, ValueError, IndexError) as e:
            logger.warning(f"Remote command {command} {args} rejected: {e}")
            return self._response(False, str(e))

    def _submit(self, action: str, data: dict[str, Any]) -> dict[str, Any]:
        reply: queue.Queue[CommandResult] = queue.Queue(maxsize=1)
        self.controller.submit(action, reply=reply, **data)
        try:
            result = reply.get(timeout=self.timeout)
        except queue.Empty:
            return self._response(False, "Command timed out")
        return self._response(
            result.success, result.message, build_properties(result.state)
        )

    def _get(self, args: list) -> dict[str, Any]:
        if not args:
            raise RemoteCommandError("Get requires a property name")
        properties = build_properties(self.controller.state)
        name = args[0]
        if name not in properties:
            raise RemoteCommandError(f"Unknown property: {name}")
        return self._response(True, "ok", {name: properties[name]})

    def _set(self, args: list) -> dict[str, Any]:
        name = args[0] if args else ""
        if name in READ_ONLY_PROPERTIES:
            raise RemoteCommandError(f"{name} cannot be changed (shuffle is always on)")
        raise RemoteCommandError(f"Unknown or read-only property: {name}")

    def _seek_args(self, args: list) -> tuple[str, dict]:
        offset_us = int(args[0])
        return "seek", {"delta": offset_us / MICROSECONDS}

    def _set_position_args(self, args: list) -> tuple[str, dict]:
        position_us = int(args[1])
        return "set_position", {
            **self._track_arg(args),
            "position": position_us / MICROSECONDS,
        }

    def _open_uri_args(self, args: list) -> tuple[str, dict]:
        uri = str(args[0])
        registry = self.controller.registry
        track = registry.by_path(normalize_path(uri)) if registry else None
        if track is None:
            raise RemoteCommandError(f"Not in the loaded library: {uri}")
        return "play_now", {"track_id": track.id}

    def _track_arg(self, args: list) -> dict[str, int]:
        """Accept either a track object path or a bare numeric id."""
        raw = str(args[0])
        track_id = parse_track_object_path(raw)
        return {"track_id": track_id if track_id is not None else int(raw)}

    def _reload_args(self, args: list) -> tuple[str, dict]:
        if self.loader is None:
            raise RemoteCommandError("Reload is not available")
        return "reload", {"registry": self.loader()}

    @staticmethod
    def _response(
        success: bool, message: str, data: Optional[dict] = None
    ) -> dict[str, Any]:
        return {"success": success, "message": message, "data": data or {}}
