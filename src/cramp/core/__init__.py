"""Core infrastructure layer - no domain dependencies.

- Configuration management (TOML)
- Output and logging (Loguru)
- Console management (Rich)
"""

from .config import (
    Config,
    create_default_config,
    ensure_directories,
    get_config_dir,
    get_config_path,
    get_data_dir,
    load_config,
)
from .console import get_console, safe_print
from .exceptions import CrampError
from .output import log, setup_loguru

__all__ = [
    "Config",
    "create_default_config",
    "ensure_directories",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "load_config",
    "get_console",
    "safe_print",
    "CrampError",
    "log",
    "setup_loguru",
]
