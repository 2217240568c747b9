"""Tests for TrackRegistry construction and shuffle eligibility."""

import pytest

from cramp.core.exceptions import LoadError
from cramp.domain.library.models import PlaylistEntry, Track
from cramp.domain.library.registry import TrackRegistry


def entry(path: str, **tags) -> PlaylistEntry:
    return PlaylistEntry(path, tags)


class TestFromEntries:
    """Tests for building a registry from parsed entries."""

    def test_assigns_sequential_ids_in_order(self) -> None:
        registry = TrackRegistry.from_entries([entry("/m/a.mp3"), entry("/m/b.mp3")])
        assert [(t.id, t.path) for t in registry] == [(1, "/m/a.mp3"), (2, "/m/b.mp3")]

    def test_duplicate_paths_keep_first_occurrence(self) -> None:
        registry = TrackRegistry.from_entries(
            [
                entry("/m/a.mp3", title="First"),
                entry("/m/b.mp3"),
                entry("/m/./a.mp3", title="Second"),
            ]
        )
        assert len(registry) == 2
        assert registry.by_path("/m/a.mp3").title == "First"

    def test_tags_become_track_fields(self) -> None:
        registry = TrackRegistry.from_entries(
            [
                entry("/m/a.mp3", title="A", duration=12.5, no_shuffle=True, next="/m/b.mp3"),
                entry("/m/b.mp3"),
            ]
        )
        track = registry.get(1)
        assert track.title == "A"
        assert track.duration == 12.5
        assert track.no_shuffle is True
        assert track.forced_next == "/m/b.mp3"

    def test_empty_source_raises_load_error(self) -> None:
        with pytest.raises(LoadError):
            TrackRegistry.from_entries([], source="/empty")

    def test_reload_keeps_ids_for_known_paths(self) -> None:
        """Known paths keep their id; new paths get fresh ids never reused."""
        first = TrackRegistry.from_entries([entry("/m/a.mp3"), entry("/m/b.mp3")])
        second = TrackRegistry.from_entries(
            [entry("/m/c.mp3"), entry("/m/b.mp3")], previous=first
        )
        assert second.by_path("/m/b.mp3").id == 2
        assert second.by_path("/m/c.mp3").id == 3
        assert 1 not in second

    def test_registry_rejects_duplicate_ids(self) -> None:
        with pytest.raises(ValueError):
            TrackRegistry([Track(1, "/m/a.mp3"), Track(1, "/m/b.mp3")])


class TestLookups:
    """Tests for id, path and position lookups."""

    def test_get_unknown_and_none(self) -> None:
        registry = TrackRegistry([Track(1, "/m/a.mp3")])
        assert registry.get(99) is None
        assert registry.get(None) is None

    def test_by_path_normalizes(self) -> None:
        registry = TrackRegistry([Track(1, "/m/a.mp3")])
        assert registry.by_path("/m/x/../a.mp3").id == 1

    def test_forced_target_missing_is_none(self) -> None:
        registry = TrackRegistry([Track(1, "/m/a.mp3", forced_next="/m/gone.mp3")])
        assert registry.forced_target(registry.get(1)) is None


class TestShuffleEligibility:
    """Tests for which tracks the shuffle deck may draw."""

    def test_plain_tracks_are_all_eligible(self) -> None:
        registry = TrackRegistry([Track(1, "/m/a.mp3"), Track(2, "/m/b.mp3")])
        assert registry.shuffle_eligible_ids() == [1, 2]

    def test_no_shuffle_tracks_excluded(self) -> None:
        registry = TrackRegistry(
            [Track(1, "/m/a.mp3"), Track(2, "/m/b.mp3", no_shuffle=True)]
        )
        assert registry.shuffle_eligible_ids() == [1]

    def test_chain_targets_excluded(self) -> None:
        """Only the chain head is drawn; A brings in B, B brings in C."""
        registry = TrackRegistry(
            [
                Track(1, "/m/a.mp3", forced_next="/m/b.mp3"),
                Track(2, "/m/b.mp3", forced_next="/m/c.mp3"),
                Track(3, "/m/c.mp3"),
                Track(4, "/m/d.mp3"),
            ]
        )
        assert registry.shuffle_eligible_ids() == [1, 4]

    def test_closed_loop_keeps_first_member(self) -> None:
        registry = TrackRegistry(
            [
                Track(1, "/m/a.mp3"),
                Track(2, "/m/b.mp3", forced_next="/m/c.mp3"),
                Track(3, "/m/c.mp3", forced_next="/m/b.mp3"),
            ]
        )
        assert registry.shuffle_eligible_ids() == [1, 2]

    def test_self_reference_is_not_a_target(self) -> None:
        registry = TrackRegistry([Track(1, "/m/a.mp3", forced_next="/m/a.mp3")])
        assert registry.shuffle_eligible_ids() == [1]

    def test_no_shuffle_head_still_excludes_its_target(self) -> None:
        registry = TrackRegistry(
            [
                Track(1, "/m/a.mp3", no_shuffle=True, forced_next="/m/b.mp3"),
                Track(2, "/m/b.mp3"),
                Track(3, "/m/c.mp3"),
            ]
        )
        assert registry.shuffle_eligible_ids() == [3]
