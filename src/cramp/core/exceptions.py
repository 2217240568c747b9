"""Exceptions shared across cramp."""

from typing import Optional


class CrampError(Exception):
    """Base exception for cramp."""

    pass


class LoadError(CrampError):
    """Raised when a library source is unreadable or yields no tracks."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Could not load {source}: {reason}")


class UnknownTrackError(CrampError):
    """Raised when a command names a track id that is not loaded."""

    def __init__(self, track_id: object):
        self.track_id = track_id
        super().__init__(f"No loaded track with id {track_id!r}")


class UnknownCommandError(CrampError):
    """Raised when a command action is not recognized."""

    pass


class PlaybackError(CrampError):
    """Raised when the audio backend cannot play a track."""

    def __init__(self, message: str, track_path: Optional[str] = None):
        self.track_path = track_path
        super().__init__(message)


class BackendUnavailableError(PlaybackError):
    """Raised when the audio backend process is not running."""

    pass


class RemoteCommandError(CrampError):
    """Raised for remote-control requests that cannot be honoured."""

    pass
