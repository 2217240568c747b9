"""Tests for configuration loading."""

from pathlib import Path

import pytest

from cramp.core import config as config_module
from cramp.core.config import (
    DEFAULT_HISTORY_CAPACITY,
    Config,
    PlaybackConfig,
    apply_env_overrides,
    load_config,
)


@pytest.fixture
def config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point config lookup at a temp file and isolate XDG dirs."""
    path = tmp_path / "config.toml"
    monkeypatch.setattr(config_module, "get_config_path", lambda: path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in ("CRAMP_HISTORY_CAPACITY", "CRAMP_MPV_SOCKET", "CRAMP_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return path


class TestLoadConfig:
    """Tests for load_config."""

    def test_creates_default_file(self, config_path: Path) -> None:
        config = load_config()
        assert config_path.exists()
        assert config.playback.history_capacity == DEFAULT_HISTORY_CAPACITY
        assert "[playback]" in config_path.read_text()

    def test_default_file_parses_to_defaults(self, config_path: Path) -> None:
        load_config()
        config = load_config()
        assert config.playback == PlaybackConfig()
        assert config.ipc.enabled is True

    def test_reads_values(self, config_path: Path) -> None:
        config_path.write_text(
            "[playback]\nhistory_capacity = 5\nseek_step = 10\n"
            "[music]\nlibrary_paths = ['~/tunes']\nsupported_formats = ['.MP3']\n"
            "[logging]\nlevel = 'debug'\n"
        )
        config = load_config()
        assert config.playback.history_capacity == 5
        assert config.playback.seek_step == 10.0
        assert config.music.library_paths == [str(Path("~/tunes").expanduser())]
        assert config.music.supported_formats == [".mp3"]
        assert config.logging.level == "DEBUG"

    def test_invalid_playback_falls_back(self, config_path: Path) -> None:
        config_path.write_text("[playback]\nhistory_capacity = 0\n")
        assert load_config().playback == PlaybackConfig()

    def test_broken_toml_falls_back(self, config_path: Path) -> None:
        config_path.write_text("[playback\nnot toml")
        assert load_config().playback == PlaybackConfig()

    def test_env_overrides_file(
        self, config_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        config_path.write_text("[playback]\nhistory_capacity = 5\n")
        monkeypatch.setenv("CRAMP_HISTORY_CAPACITY", "12")
        assert load_config().playback.history_capacity == 12


class TestEnvOverrides:
    """Tests for apply_env_overrides."""

    def test_all_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CRAMP_HISTORY_CAPACITY", "3")
        monkeypatch.setenv("CRAMP_MPV_SOCKET", "/tmp/mpv.sock")
        monkeypatch.setenv("CRAMP_LOG_LEVEL", "warning")
        config = apply_env_overrides(Config())
        assert config.playback.history_capacity == 3
        assert config.player.mpv_socket_path == "/tmp/mpv.sock"
        assert config.logging.level == "WARNING"

    def test_invalid_capacity_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CRAMP_HISTORY_CAPACITY", "zero")
        assert apply_env_overrides(Config()).playback.history_capacity == DEFAULT_HISTORY_CAPACITY

    def test_validate(self) -> None:
        with pytest.raises(ValueError):
            PlaybackConfig(seek_step=0).validate()
