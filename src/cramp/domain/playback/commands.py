"""Commands accepted by the playback controller."""

import queue
from dataclasses import dataclass, field
from typing import Any, NamedTuple, Optional

from .state import PlayerState

# Action names and the keyword data each one takes
ACTIONS = {
    "reload": ("registry",),
    "play_now": ("track_id",),
    "set_play_next": ("track_id",),
    "enqueue": ("track_id",),
    "pause": (),
    "resume": (),
    "toggle": (),
    "stop": (),
    "skip_forward": (),
    "skip_backward": (),
    "seek": ("delta",),
    "set_position": ("track_id", "position"),
    "reshuffle": (),
    "track_finished": ("generation",),
    "playback_failed": ("generation", "error"),
    "sync_position": ("generation", "position", "duration"),
}


@dataclass(frozen=True)
class Command:
    """A single controller operation.

    ``reply``, when given, receives a CommandResult once the command has
    been applied.
    """

    action: str
    data: dict[str, Any] = field(default_factory=dict)
    reply: Optional[queue.Queue] = None


class CommandResult(NamedTuple):
    success: bool
    message: str
    state: PlayerState
