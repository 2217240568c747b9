"""Application context for explicit state passing.

There is no global player: main() builds one AppContext and hands it to
the UI loop, the remote-control server and the headless loop.
"""

import random
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rich.console import Console

from cramp.core.config import Config
from cramp.domain.library.registry import TrackRegistry
from cramp.domain.library.scanner import load_library_paths, load_source
from cramp.domain.playback.backend import AudioBackend
from cramp.domain.playback.controller import PlaybackController


@dataclass
class AppContext:
    """Everything an adapter needs to drive the player.

    Attributes:
        config: Application configuration
        controller: The playback controller (single writer of player state)
        backend: Audio backend the controller plays through
        console: Rich Console for CLI output (None under the terminal UI)
    """

    config: Config
    controller: PlaybackController
    backend: AudioBackend
    source: Optional[str] = None
    console: Optional[Console] = None

    @classmethod
    def create(
        cls,
        config: Config,
        backend: AudioBackend,
        registry: Optional[TrackRegistry] = None,
        source: Optional[str] = None,
        console: Optional[Console] = None,
        rng: Optional[random.Random] = None,
    ) -> "AppContext":
        """Create the application context and its controller.

        Args:
            config: Application configuration
            backend: Audio backend
            registry: Initial library, if already loaded
            source: Folder or playlist the library comes from (None: the
                configured library paths)
            console: Optional Rich Console instance
            rng: Random source for the shuffle deck

        Returns:
            New AppContext
        """
        controller = PlaybackController(
            backend,
            registry,
            history_capacity=config.playback.history_capacity,
            max_chain_length=config.playback.max_chain_length,
            retry_failed_once=config.playback.retry_failed_once,
            preview_length=config.ui.up_next_length,
            rng=rng,
        )
        attach = getattr(backend, "attach", None)
        if attach is not None:
            attach(controller.submit)
        return cls(
            config=config,
            controller=controller,
            backend=backend,
            source=source,
            console=console,
        )

    def build_registry(self) -> TrackRegistry:
        """Load the library source again, keeping ids of known paths.

        Safe to call off the controller thread; the result is applied with
        a ``reload`` command.

        Raises:
            LoadError: If the source is unreadable or has no tracks
        """
        previous = self.controller.registry
        if self.source:
            return load_source(Path(self.source), self.config, previous)
        return load_library_paths(self.config, previous)
