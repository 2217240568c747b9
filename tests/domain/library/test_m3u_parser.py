"""Tests for M3U playlist parsing."""

from pathlib import Path

import pytest

from cramp.core.exceptions import LoadError
from cramp.domain.library.m3u import is_playlist_file, normalize_path, parse_m3u, read_m3u

BASE = Path("/music/lists")


class TestNormalizePath:
    """Tests for playlist path resolution."""

    def test_relative_path_resolved_against_playlist_dir(self) -> None:
        assert normalize_path("../a/song.mp3", BASE) == "/music/a/song.mp3"

    def test_absolute_path_is_normalized(self) -> None:
        assert normalize_path("/music//x/./song.mp3", BASE) == "/music/x/song.mp3"

    def test_file_uri_is_decoded(self) -> None:
        assert normalize_path("file:///music/My%20Song.mp3", BASE) == "/music/My Song.mp3"

    def test_home_relative_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", "/home/listener")
        assert normalize_path("~/song.mp3", BASE) == "/home/listener/song.mp3"


class TestParseM3u:
    """Tests for parse_m3u directive handling."""

    def test_plain_entries_in_order(self) -> None:
        """Plain lines become entries, blank lines and #EXTM3U are skipped."""
        text = "#EXTM3U\n\na.mp3\nb.mp3\n"
        entries = parse_m3u(text, BASE)
        assert [e.path for e in entries] == ["/music/lists/a.mp3", "/music/lists/b.mp3"]
        assert entries[0].tags == {}

    def test_extinf_applies_to_following_entry(self) -> None:
        text = "#EXTINF:215,Artist - Title\na.mp3\nb.mp3\n"
        entries = parse_m3u(text, BASE)
        assert entries[0].tags == {"duration": 215.0, "title": "Artist - Title"}
        assert entries[1].tags == {}

    def test_extinf_negative_duration_ignored(self) -> None:
        entries = parse_m3u("#EXTINF:-1,Stream\na.mp3\n", BASE)
        assert "duration" not in entries[0].tags
        assert entries[0].tags["title"] == "Stream"

    def test_malformed_extinf_does_not_fail(self) -> None:
        entries = parse_m3u("#EXTINF:abc\na.mp3\n", BASE)
        assert len(entries) == 1
        assert entries[0].tags == {}

    def test_extnoshuffle_marks_preceding_entry(self) -> None:
        text = "a.mp3\n#EXTNOSHUFFLE\nb.mp3\n"
        entries = parse_m3u(text, BASE)
        assert entries[0].tags.get("no_shuffle") is True
        assert "no_shuffle" not in entries[1].tags

    def test_extnext_marks_preceding_entry(self) -> None:
        text = "intro.mp3\n#EXTNEXT:main.mp3\nmain.mp3\n"
        entries = parse_m3u(text, BASE)
        assert entries[0].tags["next"] == "/music/lists/main.mp3"
        assert "next" not in entries[1].tags

    def test_directives_before_first_entry_are_ignored(self) -> None:
        text = "#EXTNOSHUFFLE\n#EXTNEXT:b.mp3\na.mp3\n"
        entries = parse_m3u(text, BASE)
        assert entries[0].tags == {}

    def test_unknown_directives_and_comments_are_skipped(self) -> None:
        text = "#PLAYLIST:Mine\n# just a comment\n#EXTGRP:rock\na.mp3\n"
        assert [e.path for e in parse_m3u(text, BASE)] == ["/music/lists/a.mp3"]

    def test_bom_and_crlf(self) -> None:
        text = "\ufeff#EXTM3U\r\na.mp3\r\n"
        assert [e.path for e in parse_m3u(text, BASE)] == ["/music/lists/a.mp3"]

    def test_duplicates_are_kept(self) -> None:
        """Deduplication happens in the registry, not the parser."""
        entries = parse_m3u("a.mp3\na.mp3\n", BASE)
        assert len(entries) == 2


class TestReadM3u:
    """Tests for reading playlist files from disk."""

    def test_reads_utf8_relative_to_playlist(self, tmp_path: Path) -> None:
        playlist = tmp_path / "list.m3u8"
        playlist.write_text("#EXTINF:10,Café\nsongs/a.mp3\n", encoding="utf-8")
        entries = read_m3u(playlist)
        assert entries[0].path == str(tmp_path / "songs" / "a.mp3")
        assert entries[0].tags["title"] == "Café"

    def test_falls_back_to_latin1(self, tmp_path: Path) -> None:
        playlist = tmp_path / "list.m3u"
        playlist.write_bytes("#EXTINF:10,Caf\xe9\na.mp3\n".encode("latin-1"))
        entries = read_m3u(playlist)
        assert entries[0].tags["title"] == "Café"

    def test_missing_file_raises_load_error(self, tmp_path: Path) -> None:
        with pytest.raises(LoadError):
            read_m3u(tmp_path / "missing.m3u")

    def test_is_playlist_file(self) -> None:
        assert is_playlist_file(Path("a.M3U"))
        assert is_playlist_file(Path("a.m3u8"))
        assert not is_playlist_file(Path("a.mp3"))
