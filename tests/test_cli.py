"""Tests for the cramp command line."""

from unittest.mock import patch

import pytest

from cramp.cli import build_ctl_request, main, send_ctl_command


class TestBuildCtlRequest:
    """Tests for translating ctl arguments into remote requests."""

    def test_aliases(self):
        assert build_ctl_request("play-pause", []) == ("PlayPause", [])
        assert build_ctl_request("next", []) == ("Next", [])
        assert build_ctl_request("status", []) == ("GetAll", [])

    def test_raw_method_names_pass_through(self):
        assert build_ctl_request("Enqueue", ["3"]) == ("Enqueue", ["3"])

    def test_seek_seconds_to_microseconds(self):
        assert build_ctl_request("seek", ["-2.5"]) == ("Seek", [-2_500_000])

    def test_position(self):
        assert build_ctl_request("position", ["/com/cramp/tracks/trackid4", "90"]) == (
            "SetPosition",
            ["/com/cramp/tracks/trackid4", 90_000_000],
        )

    def test_bad_number(self):
        with pytest.raises(ValueError):
            build_ctl_request("seek", ["soon"])


class TestSendCtlCommand:
    """Tests for ctl exit codes."""

    def test_success(self):
        with patch("cramp.cli.ipc.send_command", return_value=(True, "Next", {})) as send:
            assert send_ctl_command("next", []) == 0
        send.assert_called_once_with("Next", [])

    def test_failure(self):
        with patch(
            "cramp.cli.ipc.send_command", return_value=(False, "cramp is not running", {})
        ):
            assert send_ctl_command("next", []) == 1

    def test_invalid_argument(self):
        with patch("cramp.cli.ipc.send_command") as send:
            assert send_ctl_command("seek", ["soon"]) == 1
        send.assert_not_called()

    def test_main_dispatches_ctl(self):
        with patch("cramp.cli.send_ctl_command", return_value=0) as ctl:
            with pytest.raises(SystemExit) as exit_info:
                main(["ctl", "seek", "5"])
        assert exit_info.value.code == 0
        ctl.assert_called_once_with("seek", ["5"])

    def test_main_rejects_bad_history(self):
        with pytest.raises(SystemExit) as exit_info:
            main(["--history", "0"])
        assert exit_info.value.code == 1
