"""
Playback controller - the single writer of all playback state.

Every input (keys, remote-control requests, audio backend signals) becomes
a Command. Commands are queued by ``submit()`` from any thread and applied
one at a time by ``process_pending()`` on the thread that owns the
controller. After each command a new PlayerState snapshot is published.

Resolution order for "what plays next":

1. the forced-next target of the track that just played (back-to-back)
2. the one-shot play-next slot
3. the user queue (FIFO)
4. the shuffle deck
"""

import queue
import random
import time
from typing import Any, Callable, Optional

from loguru import logger

from cramp.core.config import DEFAULT_HISTORY_CAPACITY
from cramp.core.exceptions import (
    CrampError,
    PlaybackError,
    UnknownCommandError,
    UnknownTrackError,
)
from cramp.domain.library.models import Track
from cramp.domain.library.registry import TrackRegistry

from .backend import AudioBackend
from .commands import ACTIONS, Command, CommandResult
from .history import History
from .queue import PlayNextSlot, UserQueue
from .shuffle import ShuffleEngine
from .state import PlaybackStatus, PlayerState

StateListener = Callable[[PlayerState], None]


class PlaybackController:
    """Owns the library, ordering structures and player state machine."""

    def __init__(
        self,
        backend: AudioBackend,
        registry: Optional[TrackRegistry] = None,
        *,
        history_capacity: int = DEFAULT_HISTORY_CAPACITY,
        max_chain_length: int = 16,
        retry_failed_once: bool = True,
        preview_length: int = 5,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._backend = backend
        self._clock = clock
        self._max_chain_length = max_chain_length
        self._retry_failed_once = retry_failed_once
        self._preview_length = preview_length

        self._commands: queue.Queue[Command] = queue.Queue()
        self._listeners: list[StateListener] = []

        self._registry: Optional[TrackRegistry] = None
        self._shuffle = ShuffleEngine(rng=rng)
        self._queue = UserQueue()
        self._slot = PlayNextSlot()
        self._history = History(history_capacity)

        self._current: Optional[Track] = None
        self._status = PlaybackStatus.IDLE
        self._position = 0.0
        self._position_at = clock()
        self._duration: Optional[float] = None
        self._generation = 0
        self._error: Optional[str] = None

        # Back-to-back chain state
        self._forced_target: Optional[int] = None
        self._chain: list[int] = []

        # Failure policy state
        self._retried_track: Optional[int] = None
        self._failed_tracks = 0

        self._state = PlayerState()
        if registry is not None:
            self.reload(registry)
        else:
            self._publish()

    # -- Read side -----------------------------------------------------------

    @property
    def state(self) -> PlayerState:
        """Latest published snapshot (safe to read from any thread)."""
        return self._state

    @property
    def registry(self) -> Optional[TrackRegistry]:
        return self._registry

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with every published snapshot.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- Serialization point -------------------------------------------------

    def submit(
        self, action: str, reply: Optional[queue.Queue] = None, **data: Any
    ) -> None:
        """Queue a command from any thread."""
        self._commands.put(Command(action, data, reply))

    def process_pending(self, timeout: float = 0.0) -> int:
        """Apply queued commands in arrival order.

        Args:
            timeout: Seconds to wait for the first command when none is queued

        Returns:
            Number of commands applied
        """
        try:
            if timeout > 0:
                command = self._commands.get(timeout=timeout)
            else:
                command = self._commands.get_nowait()
        except queue.Empty:
            return 0

        processed = 0
        while True:
            self.dispatch(command)
            processed += 1
            try:
                command = self._commands.get_nowait()
            except queue.Empty:
                return processed

    def dispatch(self, command: Command) -> CommandResult:
        """Apply one command immediately and publish the resulting state."""
        try:
            if command.action not in ACTIONS:
                raise UnknownCommandError(f"Unknown command: {command.action}")
            handler = getattr(self, command.action)
            message = handler(**command.data) or command.action
            result_ok = True
        except CrampError as e:
            logger.warning(f"Command {command.action} rejected: {e}")
            message = str(e)
            result_ok = False
        except Exception as e:
            logger.exception(f"Command {command.action} failed")
            message = f"Error processing {command.action}: {e}"
            result_ok = False

        result = CommandResult(result_ok, message, self._state)
        if command.reply is not None:
            command.reply.put(result)
        return result

    # -- Library -------------------------------------------------------------

    def reload(self, registry: TrackRegistry) -> str:
        """Swap in a new registry, reconciling queue, slot and history by id."""
        self._registry = registry
        valid_ids = set(track.id for track in registry)

        self._queue.retain(valid_ids)
        self._history.retain(valid_ids)
        if self._slot.pending not in valid_ids:
            self._slot.clear()
        if self._forced_target not in valid_ids:
            self._forced_target = None
        self._chain = [track_id for track_id in self._chain if track_id in valid_ids]

        if self._current is not None:
            # Keep playing a track even if it was dropped from the library
            self._current = registry.get(self._current.id) or self._current
            if self._current.id in valid_ids:
                self._queue.discard(self._current.id)

        current_id = self._current.id if self._current else None
        self._shuffle.rebuild(registry.shuffle_eligible_ids(), avoid_first=current_id)

        if self._status is PlaybackStatus.IDLE:
            self._status = PlaybackStatus.STOPPED
        self._failed_tracks = 0
        self._error = None

        logger.info(
            f"Library loaded: {len(registry)} tracks, "
            f"{self._shuffle.size} in shuffle ({registry.source})"
        )
        self._publish()
        return f"Loaded {len(registry)} tracks"

    # -- User ordering -------------------------------------------------------

    def play_now(self, track_id: int) -> str:
        """Play a track immediately, bypassing every ordering structure."""
        track = self._require_track(track_id)
        self._failed_tracks = 0
        self._load(track)
        return f"Playing {track.display_name}"

    def set_play_next(self, track_id: int) -> str:
        """Make a track the one-shot next pick, replacing any pending one."""
        track = self._require_track(track_id)
        replaced = self._slot.set(track.id)
        if replaced is not None and replaced != track.id:
            logger.debug(f"Play-next slot replaced track {replaced} with {track.id}")
        self._publish()
        return f"Next: {track.display_name}"

    def enqueue(self, track_id: int) -> str:
        """Append a track to the user queue."""
        track = self._require_track(track_id)
        current_id = self._current.id if self._current else None
        if not self._queue.append(track.id, current_id):
            raise CrampError(f"{track.display_name} is already playing")
        self._publish()
        return f"Queued {track.display_name} ({len(self._queue)} in queue)"

    def reshuffle(self) -> str:
        """Deal a fresh shuffle deck; current, queue and history stay put."""
        if self._registry is None:
            return "Nothing loaded"
        self._shuffle.reshuffle(avoid_first=self._current.id if self._current else None)
        self._publish()
        return "Reshuffled"

    # -- Transport -----------------------------------------------------------

    def pause(self) -> str:
        if self._status is not PlaybackStatus.PLAYING:
            return "Not playing"
        self._backend.pause()
        self._position = self._state_position()
        self._position_at = self._clock()
        self._status = PlaybackStatus.PAUSED
        self._publish()
        return "Paused"

    def resume(self) -> str:
        if self._status is PlaybackStatus.PAUSED:
            self._backend.resume()
            self._position_at = self._clock()
            self._status = PlaybackStatus.PLAYING
            self._publish()
            return "Playing"
        if self._status is PlaybackStatus.STOPPED:
            return self.skip_forward()
        return "Not paused"

    def toggle(self) -> str:
        if self._status is PlaybackStatus.PLAYING:
            return self.pause()
        return self.resume()

    def stop(self) -> str:
        """Stop playback; the current track moves to history."""
        if self._registry is None:
            return "Nothing loaded"
        if self._current is not None:
            self._push_history(self._current)
        self._backend.stop()
        self._current = None
        self._status = PlaybackStatus.STOPPED
        self._generation += 1  # Late signals for the stopped track are stale
        self._position = 0.0
        self._position_at = self._clock()
        self._duration = None
        self._forced_target = None
        self._chain = []
        self._publish()
        return "Stopped"

    def skip_forward(self) -> str:
        """Advance to the next resolved track, or stop when none is left."""
        if self._registry is None:
            return "Nothing loaded"

        resolved = self._resolve_next()
        if resolved is None:
            logger.info("No track left to play")
            self.stop()
            return "Nothing left to play"

        track, via_chain = resolved
        self._load(track, continue_chain=via_chain)
        return f"Playing {track.display_name}"

    def skip_backward(self) -> str:
        """Return to the most recent history entry; no-op when history is empty."""
        if self._registry is None:
            return "Nothing loaded"

        while True:
            track_id = self._history.pop()
            if track_id is None:
                return "History is empty"
            track = self._registry.get(track_id)
            if track is not None:
                break

        self._load(track, push_history=False, arm_chain=False)
        return f"Playing {track.display_name}"

    def seek(self, delta: float) -> str:
        """Seek relative to the estimated position, clamped to the track."""
        if self._current is None:
            return "Nothing playing"
        self._set_position(self._state_position() + delta)
        return f"Seeked to {self._position:.0f}s"

    def set_position(self, track_id: int, position: float) -> str:
        """Absolute seek, honoured only for the current track and in range."""
        if self._current is None or track_id != self._current.id:
            logger.debug(f"Ignoring set_position for non-current track {track_id}")
            return "Not the current track"
        if position < 0 or (self._duration is not None and position > self._duration):
            logger.debug(f"Ignoring out-of-range set_position {position}")
            return "Position out of range"
        self._set_position(position)
        return f"Seeked to {self._position:.0f}s"

    # -- Backend signals -----------------------------------------------------

    def track_finished(self, generation: int) -> Optional[str]:
        if self._is_stale(generation, "track_finished"):
            return "stale"
        self._failed_tracks = 0
        return self.skip_forward()

    def playback_failed(self, generation: int, error: str) -> Optional[str]:
        """Retry the failed track once, then move on."""
        if self._is_stale(generation, "playback_failed"):
            return "stale"

        track = self._current
        failure = PlaybackError(str(error), track.path if track else None)
        logger.error(f"Playback failed for {failure.track_path}: {failure}")
        self._error = str(failure)

        if track is None or self._registry is None:
            self._publish()
            return "Playback failed"

        if self._retry_failed_once and self._retried_track != track.id:
            logger.info(f"Retrying {track.path}")
            self._retried_track = track.id
            self._start(track)
            self._publish()
            return f"Retrying {track.display_name}"

        self._failed_tracks += 1
        if self._failed_tracks >= len(self._registry):
            logger.error(f"{self._failed_tracks} tracks failed in a row, stopping")
            self._failed_tracks = 0
            self.stop()
            return "Stopped after repeated failures"

        return self.skip_forward()

    def sync_position(
        self, generation: int, position: float, duration: Optional[float] = None
    ) -> Optional[str]:
        """Correct the position estimate from a backend progress report."""
        if self._is_stale(generation, "sync_position"):
            return "stale"
        if duration is not None and duration > 0:
            self._duration = duration
        self._position = max(0.0, position)
        self._position_at = self._clock()
        if position > 0:
            self._failed_tracks = 0
            self._error = None
        self._publish()
        return None

    # -- Internals -----------------------------------------------------------

    def _require_track(self, track_id: Any) -> Track:
        track = self._registry.get(track_id) if self._registry else None
        if track is None:
            raise UnknownTrackError(track_id)
        return track

    def _is_stale(self, generation: int, signal: str) -> bool:
        if generation != self._generation:
            logger.debug(
                f"Discarding stale {signal} (generation {generation}, current {self._generation})"
            )
            return True
        return False

    def _resolve_next(self) -> Optional[tuple[Track, bool]]:
        """Pick the next track by priority. Returns (track, via_chain)."""
        assert self._registry is not None

        forced_id, self._forced_target = self._forced_target, None
        forced = self._registry.get(forced_id)
        if forced is not None:
            return forced, True

        slot_track = self._registry.get(self._slot.take())
        if slot_track is not None:
            return slot_track, False

        while len(self._queue):
            queued = self._registry.get(self._queue.pop())
            if queued is not None:
                return queued, False

        current_id = self._current.id if self._current else None
        deck_track = self._registry.get(self._shuffle.next(avoid_first=current_id))
        if deck_track is not None:
            return deck_track, False

        return None

    def _load(
        self,
        track: Track,
        *,
        push_history: bool = True,
        arm_chain: bool = True,
        continue_chain: bool = False,
    ) -> None:
        """Make ``track`` current and start it."""
        if push_history and self._current is not None:
            self._push_history(self._current)

        self._current = track
        self._queue.discard(track.id)
        self._retried_track = None
        self._error = None

        if continue_chain:
            self._chain.append(track.id)
        else:
            self._chain = [track.id]
        self._forced_target = self._arm_chain(track) if arm_chain else None

        self._start(track)
        self._publish()

    def _arm_chain(self, track: Track) -> Optional[int]:
        """Forced-next target to follow ``track``, if the chain may continue."""
        target = self._registry.forced_target(track) if self._registry else None
        if target is None:
            if track.forced_next:
                logger.debug(f"Forced-next target {track.forced_next} is not loaded")
            return None
        if target.id in self._chain or len(self._chain) >= self._max_chain_length:
            logger.info(f"Breaking back-to-back chain at {track.path} -> {target.path}")
            return None
        return target.id

    def _start(self, track: Track) -> None:
        """Hand ``track`` to the backend under a new generation."""
        self._generation += 1
        self._status = PlaybackStatus.PLAYING
        self._position = 0.0
        self._position_at = self._clock()
        self._duration = track.duration

        logger.info(f"Playing [{self._generation}] {track.path}")
        try:
            self._backend.play(track, self._generation)
        except PlaybackError as e:
            # Handled as a normal failure on the next pass, not recursively
            self.submit("playback_failed", generation=self._generation, error=str(e))

    def _push_history(self, track: Track) -> None:
        if self._registry is not None and track.id in self._registry:
            self._history.push(track.id)

    def _set_position(self, position: float) -> None:
        upper = self._duration if self._duration is not None else float("inf")
        position = max(0.0, min(position, upper))
        self._backend.seek(position)
        self._position = position
        self._position_at = self._clock()
        self._publish()

    def _state_position(self) -> float:
        return self._snapshot().estimated_position(self._clock())

    def _preview(self) -> tuple[Track, ...]:
        """Tracks resolution would pick next, without consuming anything."""
        if self._registry is None:
            return ()
        ids: list[Optional[int]] = [self._forced_target, self._slot.pending]
        ids.extend(self._queue)
        ids.extend(self._shuffle.peek(self._preview_length))
        preview = [self._registry.get(i) for i in ids if i is not None]
        return tuple(t for t in preview if t is not None)[: self._preview_length]

    def _snapshot(self) -> PlayerState:
        registry = self._registry
        lookup = registry.get if registry else (lambda _id: None)
        return PlayerState(
            status=self._status,
            current=self._current,
            position=self._position,
            position_updated_at=self._position_at,
            duration=self._duration,
            generation=self._generation,
            play_next=lookup(self._slot.pending),
            queue=tuple(t for t in map(lookup, self._queue) if t is not None),
            upcoming=self._preview(),
            history=tuple(t for t in map(lookup, self._history.snapshot()) if t is not None),
            deck_remaining=self._shuffle.remaining,
            library_size=len(registry) if registry else 0,
            error=self._error,
        )

    def _publish(self) -> None:
        self._state = self._snapshot()
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("State listener failed")
