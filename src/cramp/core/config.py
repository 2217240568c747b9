"""
Configuration management for cramp
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from loguru import logger

DEFAULT_HISTORY_CAPACITY = 32


@dataclass
class MusicConfig:
    """Configuration for library loading."""

    library_paths: List[str] = field(
        default_factory=lambda: [str(Path.home() / "Music")]
    )
    supported_formats: List[str] = field(
        default_factory=lambda: [".mp3", ".m4a", ".wav", ".flac", ".ogg", ".opus"]
    )
    scan_recursive: bool = True
    read_tags: bool = True  # Read duration/title with mutagen during folder scans


@dataclass
class PlayerConfig:
    """Configuration for the mpv backend."""

    mpv_socket_path: Optional[str] = None
    mpv_binary: str = "mpv"
    position_poll_interval: float = 1.0  # Seconds between time-pos reads


@dataclass
class PlaybackConfig:
    """Configuration for ordering and navigation."""

    history_capacity: int = DEFAULT_HISTORY_CAPACITY
    seek_step: float = 5.0  # Seconds for shift+arrow seeks
    max_chain_length: int = 16  # Longest back-to-back chain followed in one go
    retry_failed_once: bool = True

    def validate(self) -> None:
        """Validate playback configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.history_capacity < 1:
            raise ValueError(
                f"history_capacity must be at least 1, got {self.history_capacity}"
            )
        if self.seek_step <= 0:
            raise ValueError(f"seek_step must be positive, got {self.seek_step}")
        if self.max_chain_length < 1:
            raise ValueError(
                f"max_chain_length must be at least 1, got {self.max_chain_length}"
            )


@dataclass
class UIConfig:
    """Configuration for the terminal interface."""

    show_up_next: bool = True
    up_next_length: int = 5
    use_colors: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = None  # Default: ~/.local/share/cramp/cramp.log


@dataclass
class IPCConfig:
    """Configuration for the remote-control socket."""

    enabled: bool = True
    socket_path: Optional[str] = None  # Default: $XDG_RUNTIME_DIR/cramp/control.sock
    response_timeout: float = 15.0


@dataclass
class Config:
    """Main configuration object."""

    music: MusicConfig = field(default_factory=MusicConfig)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    playback: PlaybackConfig = field(default_factory=PlaybackConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    ipc: IPCConfig = field(default_factory=IPCConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "cramp"
    return Path.home() / ".config" / "cramp"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "cramp"
    return Path.home() / ".local" / "share" / "cramp"


def _find_project_config() -> Optional[Path]:
    """Find config.toml next to pyproject.toml when running from a checkout."""
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            return config_path if config_path.exists() else None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/cramp (or ~/.config/cramp)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# cramp configuration

[music]
# Folders loaded when no source is given on the command line
library_paths = ["~/Music"]

# Audio file extensions picked up by folder scans
supported_formats = [".mp3", ".m4a", ".wav", ".flac", ".ogg", ".opus"]

# Recursively scan subdirectories
scan_recursive = true

# Read duration and title tags while scanning (slower on large folders)
read_tags = true

[player]
# Path for the mpv IPC socket (temporary path if not specified)
# mpv_socket_path = "/tmp/cramp-mpv.sock"

# mpv executable
mpv_binary = "mpv"

# Seconds between playback position reads
position_poll_interval = 1.0

[playback]
# Number of tracks remembered for "previous"
history_capacity = 32

# Seconds skipped by shift+left / shift+right
seek_step = 5.0

# Longest back-to-back (#EXTNEXT) chain followed before falling back to shuffle
max_chain_length = 16

# Retry a track once before skipping it when playback fails
retry_failed_once = true

[ui]
# Show the upcoming tracks panel
show_up_next = true

# Number of upcoming tracks listed
up_next_length = 5

# Use colors in terminal output
use_colors = true

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/cramp/cramp.log)
# log_file = "/path/to/cramp.log"

[ipc]
# Accept remote-control commands on a Unix socket
enabled = true

# Seconds a remote client waits for a command to be applied
response_timeout = 15.0
""".strip()


def _parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML, falling back to defaults per field."""
    config = Config()

    if "music" in toml_data:
        music_data = toml_data["music"]
        config.music = MusicConfig(
            library_paths=[
                str(Path(p).expanduser())
                for p in music_data.get("library_paths", config.music.library_paths)
            ],
            supported_formats=[
                ext.lower()
                for ext in music_data.get(
                    "supported_formats", config.music.supported_formats
                )
            ],
            scan_recursive=music_data.get(
                "scan_recursive", config.music.scan_recursive
            ),
            read_tags=music_data.get("read_tags", config.music.read_tags),
        )

    if "player" in toml_data:
        player_data = toml_data["player"]
        config.player = PlayerConfig(
            mpv_socket_path=player_data.get("mpv_socket_path"),
            mpv_binary=player_data.get("mpv_binary", config.player.mpv_binary),
            position_poll_interval=float(
                player_data.get(
                    "position_poll_interval", config.player.position_poll_interval
                )
            ),
        )

    if "playback" in toml_data:
        playback_data = toml_data["playback"]
        config.playback = PlaybackConfig(
            history_capacity=int(
                playback_data.get(
                    "history_capacity", config.playback.history_capacity
                )
            ),
            seek_step=float(
                playback_data.get("seek_step", config.playback.seek_step)
            ),
            max_chain_length=int(
                playback_data.get(
                    "max_chain_length", config.playback.max_chain_length
                )
            ),
            retry_failed_once=playback_data.get(
                "retry_failed_once", config.playback.retry_failed_once
            ),
        )
        try:
            config.playback.validate()
        except ValueError as e:
            logger.warning(f"Invalid playback configuration: {e}")
            config.playback = PlaybackConfig()

    if "ui" in toml_data:
        ui_data = toml_data["ui"]
        config.ui = UIConfig(
            show_up_next=ui_data.get("show_up_next", config.ui.show_up_next),
            up_next_length=ui_data.get("up_next_length", config.ui.up_next_length),
            use_colors=ui_data.get("use_colors", config.ui.use_colors),
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
        )

    if "ipc" in toml_data:
        ipc_data = toml_data["ipc"]
        socket_path = ipc_data.get("socket_path")
        if socket_path:
            socket_path = str(Path(socket_path).expanduser())
        config.ipc = IPCConfig(
            enabled=ipc_data.get("enabled", config.ipc.enabled),
            socket_path=socket_path,
            response_timeout=float(
                ipc_data.get("response_timeout", config.ipc.response_timeout)
            ),
        )

    return config


def apply_env_overrides(config: Config) -> Config:
    """Apply CRAMP_* environment variable overrides in place.

    - CRAMP_HISTORY_CAPACITY
    - CRAMP_MPV_SOCKET
    - CRAMP_LOG_LEVEL
    """
    history_capacity = os.environ.get("CRAMP_HISTORY_CAPACITY")
    if history_capacity:
        try:
            capacity = int(history_capacity)
            if capacity < 1:
                raise ValueError(capacity)
            config.playback.history_capacity = capacity
        except ValueError:
            logger.warning(
                f"Ignoring invalid CRAMP_HISTORY_CAPACITY={history_capacity!r}"
            )

    mpv_socket = os.environ.get("CRAMP_MPV_SOCKET")
    if mpv_socket:
        config.player.mpv_socket_path = mpv_socket

    log_level = os.environ.get("CRAMP_LOG_LEVEL")
    if log_level:
        config.logging.level = log_level.upper()

    return config


def load_config() -> Config:
    """Load configuration from file or create default.

    Environment variables (optionally from a .env file in the config
    directory) override TOML values.
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = get_config_path()

    if not config_path.exists():
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                f.write(create_default_config())
            logger.info(f"Created default configuration at: {config_path}")
        except OSError as e:
            logger.warning(f"Could not write default configuration: {e}")
        return apply_env_overrides(Config())

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
        config = _parse_config(toml_data)
    except (OSError, tomllib.TOMLDecodeError, TypeError, ValueError) as e:
        logger.warning(f"Error loading configuration from {config_path}: {e}")
        config = Config()

    return apply_env_overrides(config)


def ensure_directories() -> None:
    """Ensure all necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
