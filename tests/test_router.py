"""Tests for command routing and handlers."""

from pathlib import Path
from unittest.mock import patch

import pytest

from melody.domain.library.providers.ytdlp.download import FetchResult
from melody.domain.playback import PlayerStatus
from melody.router import handle_command


@pytest.fixture
def loaded(app, make_track):
    """Context with three tracks in the playlist."""
    for _ in range(3):
        app.playlist.add(make_track())
    return app


class TestRouting:
    """Tests for handle_command dispatch."""

    @pytest.mark.parametrize("command", ["quit", "exit"])
    def test_quit_stops_loop(self, app, command: str) -> None:
        """quit/exit end the interactive loop."""
        _, should_continue = handle_command(app, command, [])
        assert should_continue is False

    def test_empty_command(self, app, output) -> None:
        """Blank input does nothing."""
        _, should_continue = handle_command(app, "", [])
        assert should_continue
        assert output.calls == []

    def test_unknown_command(self, app, capsys) -> None:
        """Unknown commands point at help."""
        _, should_continue = handle_command(app, "dance", [])
        assert should_continue
        assert "Unknown command" in capsys.readouterr().out

    def test_help(self, app, capsys) -> None:
        """help lists the commands."""
        handle_command(app, "help", [])
        assert "add <url>" in capsys.readouterr().out


class TestPlaybackCommands:
    """Tests for playback handlers."""

    def test_play_position_is_one_indexed(self, loaded, output) -> None:
        """'play 2' plays the second track."""
        handle_command(loaded, "play", ["2"])

        assert loaded.controller.current_index == 1
        assert ("load", loaded.playlist[1].source_uri) in output.calls

    @pytest.mark.parametrize("arg", ["0", "4", "two"])
    def test_play_invalid_position(self, loaded, output, arg: str) -> None:
        """Bad positions never reach the output."""
        handle_command(loaded, "play", [arg])
        assert output.calls == []

    def test_play_without_args_toggles(self, loaded) -> None:
        """'play' alone starts from the top, then pauses."""
        handle_command(loaded, "play", [])
        assert loaded.controller.status is PlayerStatus.PLAYING

        handle_command(loaded, "play", [])
        assert loaded.controller.status is PlayerStatus.PAUSED

    def test_next_and_prev(self, loaded) -> None:
        """Navigation commands move the selection."""
        handle_command(loaded, "play", ["1"])
        handle_command(loaded, "next", [])
        assert loaded.controller.current_index == 1
        handle_command(loaded, "prev", [])
        handle_command(loaded, "prev", [])
        assert loaded.controller.current_index == 2

    def test_volume_percent(self, app, output) -> None:
        """Volume is given in percent."""
        handle_command(app, "volume", ["50"])
        assert output.calls[-1] == ("set_volume", 0.5)

    def test_seek_percent(self, loaded, output) -> None:
        """Seek is given in percent of the track."""
        handle_command(loaded, "play", ["1"])
        handle_command(loaded, "seek", ["25%"])
        assert output.calls[-1] == ("set_position", 45.0)

    def test_status(self, loaded, capsys) -> None:
        """Status shows the current track."""
        handle_command(loaded, "play", ["3"])
        capsys.readouterr()

        handle_command(loaded, "status", [])

        out = capsys.readouterr().out
        assert loaded.playlist[2].title in out
        assert "Playing" in out


class TestPlaylistCommands:
    """Tests for playlist handlers."""

    def test_list_renders_table(self, loaded) -> None:
        """Every track appears in the table."""
        handle_command(loaded, "list", [])
        rendered = loaded.console.file.getvalue()
        for track in loaded.playlist:
            assert track.title in rendered

    def test_add_url_runs_in_background(self, app, tmp_path: Path) -> None:
        """The fetch result is applied when events are pumped."""
        app.config.library.download_dir = str(tmp_path)
        with patch("melody.commands.playlist.ytdlp.fetch_track_async") as fetch:
            handle_command(app, "add", ["https://example.com/watch?v=1"])

        fetch.assert_called_once()
        assert len(app.playlist) == 0

        on_done = fetch.call_args.kwargs["on_done"]
        on_done(FetchResult(success=True, id="yt1", title="Remote", artist="A",
                            source_uri="file:///dl/yt1.mp3"))
        app.pump_events()

        assert [t.id for t in app.playlist] == ["yt1"]

    def test_add_invalid_url(self, app) -> None:
        """Invalid URLs never start a download."""
        with patch("melody.commands.playlist.ytdlp.fetch_track_async") as fetch:
            handle_command(app, "add", ["not-a-url"])
        fetch.assert_not_called()

    def test_open_local_file(self, app, tmp_path: Path) -> None:
        """'open' adds a local file with unknown duration."""
        path = tmp_path / "Song.mp3"
        path.write_bytes(b"\x00")

        with patch("melody.domain.library.local.read_tags",
                   return_value={"title": None, "artist": None}):
            handle_command(app, "open", [str(path)])

        track = app.playlist[0]
        assert track.title == "Song"
        assert track.is_local
        assert track.duration is None

    def test_remove_current(self, loaded, output) -> None:
        """Removing the playing track stops playback."""
        handle_command(loaded, "play", ["2"])
        handle_command(loaded, "remove", ["2"])

        assert len(loaded.playlist) == 2
        assert loaded.controller.status is PlayerStatus.IDLE
        assert output.names()[-1] == "stop"

    def test_move(self, loaded) -> None:
        """Positions are 1-indexed."""
        first = loaded.playlist[0].id
        handle_command(loaded, "move", ["1", "3"])
        assert loaded.playlist[2].id == first


class TestTrackerCommands:
    """Tests for favorites and history handlers."""

    def test_fav_current_track(self, loaded) -> None:
        """'fav' toggles the playing track."""
        handle_command(loaded, "play", ["1"])
        track_id = loaded.playlist[0].id

        handle_command(loaded, "fav", [])
        assert loaded.favorites.is_favorite(track_id)
        handle_command(loaded, "fav", [])
        assert not loaded.favorites.is_favorite(track_id)

    def test_fav_by_position(self, loaded) -> None:
        """'fav 3' marks the third track."""
        handle_command(loaded, "fav", ["3"])
        assert loaded.favorites.is_favorite(loaded.playlist[2].id)

    def test_fav_without_selection(self, loaded, capsys) -> None:
        """Nothing to mark when nothing plays."""
        handle_command(loaded, "fav", [])
        assert loaded.favorites.ids() == set()
        assert "No track selected" in capsys.readouterr().out

    def test_recent_lists_and_clears(self, loaded, capsys) -> None:
        """Played tracks appear newest first and can be cleared."""
        handle_command(loaded, "play", ["1"])
        handle_command(loaded, "play", ["2"])
        capsys.readouterr()

        handle_command(loaded, "recent", [])
        out = capsys.readouterr().out
        assert out.index(loaded.playlist[1].title) < out.index(loaded.playlist[0].title)

        handle_command(loaded, "recent", ["clear"])
        assert loaded.history.entries() == []

    def test_recent_entry_plays_track(self, loaded) -> None:
        """'recent 2' replays the second most recent track from the playlist."""
        handle_command(loaded, "play", ["1"])
        handle_command(loaded, "play", ["2"])

        handle_command(loaded, "recent", ["2"])

        assert loaded.controller.current_index == 0
        assert loaded.controller.status is PlayerStatus.PLAYING
        assert loaded.history.entries()[0].id == loaded.playlist[0].id

    def test_recent_entry_removed_from_playlist(self, loaded, output, capsys) -> None:
        """A history entry whose track was removed does nothing."""
        handle_command(loaded, "play", ["1"])
        handle_command(loaded, "play", ["2"])
        removed_id = loaded.playlist[0].id
        handle_command(loaded, "remove", ["1"])
        calls_before = list(output.calls)
        capsys.readouterr()

        handle_command(loaded, "recent", ["2"])

        assert loaded.history.entries()[1].id == removed_id
        assert output.calls == calls_before
        assert loaded.controller.current_track.id == loaded.playlist[0].id
        assert capsys.readouterr().out == ""

    def test_recent_invalid_position(self, loaded, capsys) -> None:
        """Positions outside the history are rejected."""
        handle_command(loaded, "recent", ["4"])
        assert "Invalid position" in capsys.readouterr().out
