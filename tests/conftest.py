"""Shared fixtures for Melody tests."""

import io
import random
from typing import Callable, List, Optional, Tuple

import pytest
from rich.console import Console

from melody.context import AppContext
from melody.core import signals
from melody.core.config import Config, NotificationsConfig
from melody.core.store import MemoryStore
from melody.domain.exceptions import PlaybackError
from melody.domain.library.models import Track
from melody.domain.playback.controller import PlaybackController
from melody.domain.playlists.model import Playlist
from melody.domain.tracker.history import RecentlyPlayedLog
from melody.notifications import Notifier


class FakeOutput:
    """Output handle that records calls instead of playing audio."""

    def __init__(self) -> None:
        self.calls: List[Tuple] = []
        self.loaded: Optional[str] = None
        self.fail_on_load = False
        self.fail_on_volume = False

    def load(self, uri: str) -> None:
        self.calls.append(("load", uri))
        if self.fail_on_load:
            raise PlaybackError(f"Cannot load {uri}")
        self.loaded = uri

    def play(self) -> None:
        self.calls.append(("play",))

    def pause(self) -> None:
        self.calls.append(("pause",))

    def stop(self) -> None:
        self.calls.append(("stop",))
        self.loaded = None

    def set_position(self, seconds: float) -> None:
        self.calls.append(("set_position", seconds))

    def set_volume(self, level: float) -> None:
        self.calls.append(("set_volume", level))
        if self.fail_on_volume:
            raise PlaybackError("Volume rejected")

    def names(self) -> List[str]:
        return [call[0] for call in self.calls]


class SignalRecorder:
    """Collects every emission on a bus as (topic, payload)."""

    def __init__(self, bus: signals.SignalBus) -> None:
        self.events: List[Tuple[str, dict]] = []
        for topic in (
            signals.NOW_PLAYING,
            signals.PROGRESS,
            signals.PLAYBACK_STATE,
            signals.PLAYLIST_CHANGED,
            signals.FAVORITE_CHANGED,
            signals.RECENTLY_PLAYED_CHANGED,
            signals.DOWNLOAD_PROGRESS,
            signals.NOTIFICATION,
        ):
            bus.subscribe(topic, self._recorder(topic))

    def _recorder(self, topic: str) -> Callable[..., None]:
        def record(**payload) -> None:
            self.events.append((topic, payload))

        return record

    def of(self, topic: str) -> List[dict]:
        return [payload for t, payload in self.events if t == topic]


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def bus() -> signals.SignalBus:
    return signals.SignalBus()


@pytest.fixture
def recorder(bus: signals.SignalBus) -> SignalRecorder:
    return SignalRecorder(bus)


@pytest.fixture
def notifier(bus: signals.SignalBus) -> Notifier:
    """Notifier that never shells out to notify-send."""
    return Notifier(bus, NotificationsConfig(desktop=False))


@pytest.fixture
def make_track() -> Callable[..., Track]:
    """Factory for tracks with unique ids and local-looking URIs."""
    counter = iter(range(1, 10_000))

    def factory(**overrides) -> Track:
        n = next(counter)
        fields = {
            "id": f"t{n}",
            "source_uri": f"file:///music/track{n}.mp3",
            "title": f"Track {n}",
            "artist": f"Artist {n}",
            "duration": 180.0,
        }
        fields.update(overrides)
        return Track(**fields)

    return factory


@pytest.fixture
def output() -> FakeOutput:
    return FakeOutput()


@pytest.fixture
def playlist(store: MemoryStore) -> Playlist:
    return Playlist(store)


@pytest.fixture
def history(store: MemoryStore, bus: signals.SignalBus) -> RecentlyPlayedLog:
    return RecentlyPlayedLog(store, bus)


@pytest.fixture
def resolver_calls() -> List[Tuple]:
    return []


@pytest.fixture
def controller(
    playlist: Playlist,
    output: FakeOutput,
    history: RecentlyPlayedLog,
    bus: signals.SignalBus,
    notifier: Notifier,
    resolver_calls: List[Tuple],
) -> PlaybackController:
    """Controller wired to fakes; durations are never read from disk."""

    def fake_resolver(track_id, source_uri, on_resolved):
        resolver_calls.append((track_id, source_uri, on_resolved))

    return PlaybackController(
        playlist,
        output,
        history,
        bus=bus,
        notifier=notifier,
        rng=random.Random(1234),
        duration_resolver=fake_resolver,
    )


@pytest.fixture
def filled(controller: PlaybackController, make_track) -> PlaybackController:
    """Controller whose playlist holds three tracks."""
    for _ in range(3):
        controller.playlist.add(make_track())
    return controller


@pytest.fixture
def app(store: MemoryStore, output: FakeOutput):
    """AppContext over in-memory fakes with desktop notifications off."""
    cfg = Config()
    cfg.notifications.desktop = False
    return AppContext.create(
        cfg,
        store=store,
        output=output,
        console=Console(file=io.StringIO(), width=120),
        duration_resolver=lambda track_id, source_uri, on_resolved: None,
    )
