"""Tests for the mpv output handle."""

from pathlib import Path
from unittest.mock import patch

import pytest

from melody.domain.exceptions import PlaybackError
from melody.domain.playback import player
from melody.domain.playback.events import Ended, MetadataLoaded, OutputError, TimeUpdate
from melody.domain.playback.player import MpvOutput

PLAYER = "melody.domain.playback.player"
REMOTE = "https://cdn.example/stream.mp3"


@pytest.fixture
def mpv(tmp_path: Path):
    """MpvOutput that believes mpv is running and accepts every command."""
    output = MpvOutput(socket_path=str(tmp_path / "mpv.sock"))
    with patch.object(MpvOutput, "is_running", return_value=True), patch(
        f"{PLAYER}.send_mpv_command", return_value=True
    ) as send:
        output.sent = send
        yield output


def _properties(values: dict):
    return lambda socket_path, name: values.get(name)


class TestCommands:
    """Tests for commands sent to mpv."""

    def test_load_replaces_paused(self, mpv) -> None:
        """Loading pauses first, then replaces the current file."""
        mpv.load(REMOTE)

        commands = [c.args[1]["command"] for c in mpv.sent.call_args_list]
        assert commands == [["set_property", "pause", True], ["loadfile", REMOTE, "replace"]]

    def test_load_missing_local_file(self, mpv, tmp_path: Path) -> None:
        """Local files are checked before mpv is asked."""
        with pytest.raises(PlaybackError):
            mpv.load((tmp_path / "missing.mp3").as_uri())
        mpv.sent.assert_not_called()

    def test_volume_is_percent(self, mpv) -> None:
        """Levels 0-1 map to mpv's 0-100."""
        mpv.set_volume(0.35)
        assert mpv.sent.call_args.args[1] == {"command": ["set_property", "volume", 35]}

    def test_rejected_command_raises(self, mpv) -> None:
        """A command mpv refuses becomes PlaybackError."""
        mpv.sent.return_value = False
        with pytest.raises(PlaybackError):
            mpv.play()

    def test_not_running_raises(self, tmp_path: Path) -> None:
        """Commands fail cleanly when mpv is not started."""
        output = MpvOutput(socket_path=str(tmp_path / "none.sock"))
        with pytest.raises(PlaybackError):
            output.play()


class TestPoll:
    """Tests for translating mpv state into events."""

    def test_nothing_loaded(self, mpv) -> None:
        """No events before a load."""
        assert mpv.poll() == []

    def test_duration_reported_once(self, mpv) -> None:
        """MetadataLoaded is emitted once per load."""
        mpv.load(REMOTE)
        values = {"duration": 200.0, "time-pos": 1.0, "eof-reached": False, "idle-active": False}

        with patch(f"{PLAYER}.get_mpv_property", side_effect=_properties(values)):
            first = mpv.poll()
            values["time-pos"] = 2.0
            second = mpv.poll()

        assert first == [MetadataLoaded(200.0, REMOTE), TimeUpdate(1.0)]
        assert second == [TimeUpdate(2.0)]

    def test_unchanged_position_is_quiet(self, mpv) -> None:
        """Repeated identical positions are not re-reported."""
        mpv.load(REMOTE)
        values = {"duration": 200.0, "time-pos": 5.0}

        with patch(f"{PLAYER}.get_mpv_property", side_effect=_properties(values)):
            mpv.poll()
            assert mpv.poll() == []

    def test_end_reported_once(self, mpv) -> None:
        """eof-reached produces a single Ended event."""
        mpv.load(REMOTE)
        values = {"duration": 200.0, "time-pos": 200.0, "eof-reached": True}

        with patch(f"{PLAYER}.get_mpv_property", side_effect=_properties(values)):
            events = mpv.poll()
            again = mpv.poll()

        assert Ended(REMOTE) in events
        assert again == []

    def test_seek_rearms_end(self, mpv) -> None:
        """After a seek (repeat), the next end is reported again."""
        mpv.load(REMOTE)
        values = {"duration": 200.0, "time-pos": 200.0, "eof-reached": True}

        with patch(f"{PLAYER}.get_mpv_property", side_effect=_properties(values)):
            mpv.poll()
            mpv.set_position(0.0)
            values["time-pos"] = 0.5
            assert Ended(REMOTE) in mpv.poll()

    def test_idle_after_grace_is_error(self, mpv) -> None:
        """A source that never loads is reported as an error."""
        mpv.load(REMOTE)
        values = {"idle-active": True}

        with patch(f"{PLAYER}.get_mpv_property", side_effect=_properties(values)), patch(
            f"{PLAYER}.time.time", return_value=mpv._loaded_at + player.LOAD_GRACE_SECONDS + 1
        ):
            events = mpv.poll()

        assert events == [OutputError("Error loading audio file", REMOTE)]
        assert mpv.poll() == []

    def test_idle_within_grace_is_not_error(self, mpv) -> None:
        """mpv is briefly idle while opening a file."""
        mpv.load(REMOTE)

        with patch(f"{PLAYER}.get_mpv_property", side_effect=_properties({"idle-active": True})):
            assert mpv.poll() == []

    def test_process_exit_reported(self, tmp_path: Path) -> None:
        """A dead mpv yields one OutputError for the loaded source."""
        output = MpvOutput(socket_path=str(tmp_path / "mpv.sock"))
        with patch.object(MpvOutput, "is_running", return_value=True), patch(
            f"{PLAYER}.send_mpv_command", return_value=True
        ):
            output.load(REMOTE)

        with patch.object(MpvOutput, "is_running", return_value=False):
            events = output.poll()
            again = output.poll()

        assert events == [OutputError("Audio output stopped unexpectedly", REMOTE)]
        assert again == []
