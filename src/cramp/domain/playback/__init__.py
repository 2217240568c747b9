"""Playback domain - ordering structures and the playback state machine."""

from .backend import AudioBackend, MpvBackend, NullBackend
from .commands import Command, CommandResult
from .controller import PlaybackController
from .history import History
from .queue import PlayNextSlot, UserQueue
from .shuffle import ShuffleEngine
from .state import PlaybackStatus, PlayerState

__all__ = [
    "AudioBackend",
    "MpvBackend",
    "NullBackend",
    "Command",
    "CommandResult",
    "PlaybackController",
    "History",
    "PlayNextSlot",
    "UserQueue",
    "ShuffleEngine",
    "PlaybackStatus",
    "PlayerState",
]
