"""Tests for the playlist model."""

import json

import pytest

from melody.core.store import PLAYLIST_KEY, MemoryStore
from melody.domain.exceptions import NotFoundError, ValidationError
from melody.domain.playlists.model import Playlist


class TestMutations:
    """Tests for add/remove/move."""

    def test_add_appends_in_order(self, playlist, make_track) -> None:
        """Insertion order is display order."""
        a, b = make_track(), make_track()
        assert playlist.add(a) == 0
        assert playlist.add(b) == 1
        assert [t.id for t in playlist] == [a.id, b.id]

    def test_add_rejects_empty_source(self, playlist, make_track) -> None:
        """A track without a source cannot be added."""
        with pytest.raises(ValidationError):
            playlist.add(make_track(source_uri="  "))
        assert len(playlist) == 0

    def test_add_rejects_duplicate_id(self, playlist, make_track) -> None:
        """Ids are unique within the playlist."""
        track = make_track()
        playlist.add(track)
        with pytest.raises(ValidationError):
            playlist.add(make_track(id=track.id))

    def test_remove_returns_track(self, playlist, make_track) -> None:
        """The removed track is handed back."""
        a, b = make_track(), make_track()
        playlist.add(a)
        playlist.add(b)

        assert playlist.remove(0) is a
        assert playlist.tracks == [b]

    @pytest.mark.parametrize("index", [-1, 1, 5])
    def test_remove_out_of_range(self, playlist, make_track, index: int) -> None:
        """Invalid positions raise NotFoundError."""
        playlist.add(make_track())
        with pytest.raises(NotFoundError):
            playlist.remove(index)

    def test_move(self, playlist, make_track) -> None:
        """A track lands at the destination position."""
        tracks = [make_track() for _ in range(4)]
        for t in tracks:
            playlist.add(t)

        playlist.move(0, 2)

        assert [t.id for t in playlist] == [tracks[1].id, tracks[2].id, tracks[0].id, tracks[3].id]

    def test_move_out_of_range(self, playlist, make_track) -> None:
        """Both positions must exist."""
        playlist.add(make_track())
        with pytest.raises(NotFoundError):
            playlist.move(0, 3)

    def test_update_duration_by_id(self, playlist, make_track) -> None:
        """Durations are matched by id, not position."""
        track = make_track(duration=None)
        playlist.add(make_track())
        playlist.add(track)

        assert playlist.update_duration(track.id, 61.0)
        assert playlist.get(track.id).duration == 61.0
        assert not playlist.update_duration("gone", 10.0)


class TestPersistence:
    """Tests for load/save through the store."""

    def test_every_mutation_is_saved(self, store, make_track) -> None:
        """A new instance sees the same list."""
        playlist = Playlist(store)
        a, b = make_track(), make_track()
        playlist.add(a)
        playlist.add(b)
        playlist.move(1, 0)

        reloaded = Playlist(store)
        reloaded.load()

        assert [t.id for t in reloaded] == [b.id, a.id]
        assert reloaded[0].title == b.title

    def test_absent_key_is_empty(self, store) -> None:
        """No stored data means an empty playlist."""
        playlist = Playlist(store)
        playlist.load()
        assert len(playlist) == 0

    @pytest.mark.parametrize("raw", ["{not json", '{"a": 1}', "42"])
    def test_corrupt_data_is_empty(self, raw: str) -> None:
        """Unreadable data is discarded."""
        playlist = Playlist(MemoryStore({PLAYLIST_KEY: raw}))
        playlist.load()
        assert len(playlist) == 0

    def test_bad_entries_and_duplicates_dropped(self) -> None:
        """Unusable records are skipped and repeated ids keep the first copy."""
        raw = json.dumps(
            [
                {"id": "1", "source_uri": "file:///a.mp3", "title": "A"},
                {"id": "2"},
                "garbage",
                {"id": "1", "source_uri": "file:///other.mp3", "title": "A again"},
                {"id": "3", "source_uri": "https://x/b.mp3", "duration": 0},
            ]
        )
        playlist = Playlist(MemoryStore({PLAYLIST_KEY: raw}))
        playlist.load()

        assert [t.id for t in playlist] == ["1", "3"]
        assert playlist[0].title == "A"
        assert playlist[1].duration is None
