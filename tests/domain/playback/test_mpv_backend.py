"""Tests for the mpv backend with the IPC socket mocked out."""

from typing import Iterator
from unittest.mock import MagicMock, patch

import pytest

from cramp.core.config import PlayerConfig
from cramp.core.exceptions import BackendUnavailableError, PlaybackError
from cramp.domain.library.models import Track
from cramp.domain.playback.backend import MpvBackend, MpvProcess

TRACK = Track(1, "/music/a.mp3")


@pytest.fixture
def report() -> MagicMock:
    return MagicMock()


@pytest.fixture
def mpv_backend(report: MagicMock) -> Iterator[MpvBackend]:
    backend = MpvBackend(PlayerConfig(position_poll_interval=0.0), report=report)
    process = MagicMock()
    process.poll.return_value = None
    backend._mpv = MpvProcess(socket_path="/tmp/cramp-test.sock", process=process)
    with patch("cramp.domain.playback.backend.send_mpv_command", return_value=True):
        yield backend


def loaded(backend: MpvBackend, generation: int = 3) -> MpvBackend:
    """Play TRACK and pretend it has been loaded for a while."""
    backend.play(TRACK, generation)
    backend._loaded_at -= 10.0
    return backend


def properties(**values):
    return lambda socket_path, name: values.get(name.replace("-", "_"))


class TestPlay:
    """Tests for starting playback."""

    def test_not_running(self, report: MagicMock) -> None:
        backend = MpvBackend(PlayerConfig(), report=report)
        with pytest.raises(BackendUnavailableError):
            backend.play(TRACK, 1)

    def test_refused_load(self, mpv_backend: MpvBackend) -> None:
        with patch("cramp.domain.playback.backend.send_mpv_command", return_value=False):
            with pytest.raises(PlaybackError) as exc_info:
                mpv_backend.play(TRACK, 1)
        assert exc_info.value.track_path == TRACK.path


class TestPoll:
    """Tests for completion, failure and progress reporting."""

    def test_end_of_file_reported_once(self, mpv_backend: MpvBackend, report: MagicMock) -> None:
        loaded(mpv_backend)
        with patch(
            "cramp.domain.playback.backend.get_mpv_property",
            side_effect=properties(eof_reached=True),
        ):
            mpv_backend.poll()
            mpv_backend.poll()
        report.assert_called_once_with("track_finished", generation=3)

    def test_idle_after_grace_is_failure(self, mpv_backend: MpvBackend, report: MagicMock) -> None:
        loaded(mpv_backend)
        with patch(
            "cramp.domain.playback.backend.get_mpv_property",
            side_effect=properties(eof_reached=False, idle_active=True),
        ):
            mpv_backend.poll()
        action = report.call_args.args[0]
        assert action == "playback_failed"
        assert report.call_args.kwargs["generation"] == 3

    def test_progress_is_reported(self, mpv_backend: MpvBackend, report: MagicMock) -> None:
        loaded(mpv_backend, generation=7)
        with patch(
            "cramp.domain.playback.backend.get_mpv_property",
            side_effect=properties(eof_reached=False, idle_active=False, time_pos=12.5, duration=100),
        ):
            mpv_backend.poll()
        report.assert_called_once_with(
            "sync_position", generation=7, position=12.5, duration=100.0
        )

    def test_mpv_exit_is_failure(self, mpv_backend: MpvBackend, report: MagicMock) -> None:
        loaded(mpv_backend)
        mpv_backend._mpv.process.poll.return_value = 1
        mpv_backend.poll()
        report.assert_called_once_with("playback_failed", generation=3, error="mpv exited")

    def test_nothing_loaded(self, mpv_backend: MpvBackend, report: MagicMock) -> None:
        mpv_backend.poll()
        report.assert_not_called()
