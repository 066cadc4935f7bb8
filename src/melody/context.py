"""Application context for explicit state passing.

This module provides the AppContext dataclass that owns every long-lived
object in a Melody session: configuration, the persistent store, the
playlist/favorites/history aggregates and the playback controller. Command
handlers receive it explicitly instead of reaching for module globals.
"""

import threading
from dataclasses import dataclass, field
from typing import Optional

from rich.console import Console

from melody.core import signals
from melody.core.config import Config, get_database_path
from melody.core.console import get_console
from melody.core.store import KeyValueStore, SqliteStore
from melody.domain.library.metadata import resolve_duration_async
from melody.domain.playback.controller import DurationResolver, PlaybackController
from melody.domain.playback.player import MpvOutput, OutputHandle
from melody.domain.playlists.model import Playlist
from melody.domain.tracker.favorites import FavoriteSet
from melody.domain.tracker.history import RecentlyPlayedLog
from melody.notifications import Notifier


@dataclass
class AppContext:
    """Application context passed to all command handlers.

    Attributes:
        config: Application configuration
        store: Persistent key-value store backing the aggregates
        bus: Signal bus front ends subscribe to
        notifier: Transient notification sink
        playlist: The single working playlist
        favorites: Favorite track ids
        history: Recently played snapshots
        output: Audio output handle driven by the controller
        controller: Playback state machine
        console: Rich Console for formatted output
        lock: Guards every mutation; worker threads only post events
    """

    config: Config
    store: KeyValueStore
    bus: signals.SignalBus
    notifier: Notifier
    playlist: Playlist
    favorites: FavoriteSet
    history: RecentlyPlayedLog
    output: OutputHandle
    controller: PlaybackController
    console: Console
    lock: threading.RLock = field(default_factory=threading.RLock)

    @classmethod
    def create(
        cls,
        config: Config,
        store: Optional[KeyValueStore] = None,
        output: Optional[OutputHandle] = None,
        console: Optional[Console] = None,
        duration_resolver: DurationResolver = resolve_duration_async,
    ) -> "AppContext":
        """Build a context and load persisted state.

        Args:
            config: Application configuration
            store: Store to use (default: SQLite database from config)
            output: Output handle (default: an unstarted MpvOutput)
            console: Rich Console (default: the shared console)
            duration_resolver: How local track durations are read

        Returns:
            New AppContext with playlist, favorites and history loaded
        """
        if store is None:
            store = SqliteStore(get_database_path(config))
        if output is None:
            output = MpvOutput(config.player.mpv_socket_path, config.player.volume)

        bus = signals.SignalBus()
        notifier = Notifier(bus, config.notifications)

        playlist = Playlist(store)
        favorites = FavoriteSet(store, bus)
        history = RecentlyPlayedLog(store, bus)
        playlist.load()
        favorites.load()
        history.load()

        controller = PlaybackController(
            playlist,
            output,
            history,
            bus=bus,
            notifier=notifier,
            volume=config.player.volume,
            duration_resolver=duration_resolver,
        )

        return cls(
            config=config,
            store=store,
            bus=bus,
            notifier=notifier,
            playlist=playlist,
            favorites=favorites,
            history=history,
            output=output,
            controller=controller,
            console=console or get_console(),
        )

    def pump_events(self) -> int:
        """Apply queued output/worker events under the context lock."""
        with self.lock:
            return self.controller.pump()
