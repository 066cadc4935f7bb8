"""
Playback controller for Melody

Owns the single output handle and the transient playback session. User
intents (play, pause, next, ...) and output/worker events all go through here
and run to completion one at a time.

Every public operation returns an Outcome instead of raising; failures the
user should see are also raised as transient notifications.
"""

import queue
import random
from typing import Callable, Optional

from loguru import logger

from melody.core import signals
from melody.domain.exceptions import (
    NotFoundError,
    Outcome,
    PlaybackError,
    ValidationError,
)
from melody.domain.library.local import PickResult
from melody.domain.library.metadata import resolve_duration_async
from melody.domain.library.models import Track, generate_track_id
from melody.domain.playlists.model import Playlist
from melody.domain.tracker.history import RecentlyPlayedLog
from melody.notifications import Notifier

from .events import (
    DownloadProgress,
    DurationResolved,
    Ended,
    FetchCompleted,
    MetadataLoaded,
    OutputError,
    PlaybackEvent,
    TimeUpdate,
)
from .player import OutputHandle
from .selection import next_index, previous_index
from .state import NO_SELECTION, PlaybackSession, PlayerStatus

# Volume restored by unmute when the remembered level is 0
DEFAULT_UNMUTE_VOLUME = 0.7

DurationResolver = Callable[[str, str, Callable[[str, float], None]], object]


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


class PlaybackController:
    """State machine over one playlist and one output handle."""

    def __init__(
        self,
        playlist: Playlist,
        output: OutputHandle,
        history: RecentlyPlayedLog,
        bus: Optional[signals.SignalBus] = None,
        notifier: Optional[Notifier] = None,
        volume: float = 0.7,
        rng: Optional[random.Random] = None,
        duration_resolver: DurationResolver = resolve_duration_async,
    ) -> None:
        self.playlist = playlist
        self.output = output
        self.history = history
        self.bus = bus or signals.SignalBus()
        self.notifier = notifier or Notifier(self.bus)
        self.session = PlaybackSession(volume=_clamp(volume))
        self._rng = rng
        self._duration_resolver = duration_resolver
        self._events: "queue.Queue[PlaybackEvent]" = queue.Queue()

    # -- queries ----------------------------------------------------------

    @property
    def status(self) -> PlayerStatus:
        return self.session.status

    @property
    def current_index(self) -> int:
        return self.session.current_index

    @property
    def current_track(self) -> Optional[Track]:
        if self.playlist.is_valid_index(self.session.current_index):
            return self.playlist[self.session.current_index]
        return None

    def progress(self) -> tuple[float, Optional[float], float]:
        """Position, duration and percentage of the current track."""
        position = self.session.position
        duration = self.session.duration
        percent = (position / duration) * 100 if duration else 0.0
        return position, duration, min(100.0, percent)

    # -- notifications ----------------------------------------------------

    def _emit_state(self) -> None:
        self.bus.emit(
            signals.PLAYBACK_STATE,
            status=self.session.status,
            index=self.session.current_index,
            shuffle=self.session.shuffle,
            repeat=self.session.repeat,
            volume=self.session.volume,
            muted=self.session.muted,
        )

    def _emit_now_playing(self) -> None:
        self.bus.emit(
            signals.NOW_PLAYING,
            track=self.current_track,
            index=self.session.current_index,
        )

    def _emit_playlist_changed(self) -> None:
        self.bus.emit(signals.PLAYLIST_CHANGED, tracks=self.playlist.tracks)

    def _fail_playback(self, message: str) -> Outcome:
        logger.error(f"Playback error: {message}")
        self.session.status = PlayerStatus.ERROR
        self.session.last_error = message
        self._emit_state()
        self.notifier.error(message)
        return Outcome.failure(message)

    # -- transport --------------------------------------------------------

    def play_song(self, index: int) -> Outcome:
        """Load and start the track at ``index``; out-of-range indexes are ignored."""
        if not self.playlist.is_valid_index(index):
            logger.debug(f"play_song ignored: index {index} of {len(self.playlist)}")
            return Outcome.failure("")

        track = self.playlist[index]
        self.session.current_index = index
        self.session.position = 0.0
        self.session.duration = track.duration

        try:
            self.output.load(track.source_uri)
            self.output.play()
        except PlaybackError as e:
            return self._fail_playback(f"Error playing song: {e}")

        self.session.status = PlayerStatus.PLAYING
        self.session.last_error = None
        logger.info(f"Playing [{index}] {track.id} '{track.title}'")

        self._emit_now_playing()
        self._emit_state()
        self.history.record(track)
        return Outcome.success(f"Now playing: {track.title} - {track.artist}")

    def toggle_play(self) -> Outcome:
        """Play/pause; starts the first track when nothing is selected."""
        status = self.session.status

        if status is PlayerStatus.IDLE:
            if len(self.playlist) == 0:
                return Outcome.failure("Playlist is empty")
            return self.play_song(0)

        if status is PlayerStatus.ERROR:
            if self.playlist.is_valid_index(self.session.current_index):
                return self.play_song(self.session.current_index)
            self.session.reset()
            self._emit_state()
            return Outcome.failure("Nothing to retry")

        if status is PlayerStatus.PLAYING:
            return self.pause()
        return self.resume()

    def pause(self) -> Outcome:
        if self.session.status is not PlayerStatus.PLAYING:
            return Outcome.failure("Nothing is playing")
        try:
            self.output.pause()
        except PlaybackError as e:
            return self._fail_playback(str(e))
        self.session.status = PlayerStatus.PAUSED
        self._emit_state()
        return Outcome.success("Paused")

    def resume(self) -> Outcome:
        if self.session.status is not PlayerStatus.PAUSED:
            return Outcome.failure("Nothing is paused")
        try:
            self.output.play()
        except PlaybackError as e:
            return self._fail_playback(str(e))
        self.session.status = PlayerStatus.PLAYING
        self._emit_state()
        return Outcome.success("Resumed")

    def stop(self) -> Outcome:
        """Unload the current track and return to Idle."""
        if self.session.status is PlayerStatus.IDLE:
            return Outcome.success("Stopped")
        try:
            self.output.stop()
        except PlaybackError as e:
            logger.warning(f"Output stop failed: {e}")
        self.session.reset()
        self._emit_now_playing()
        self._emit_state()
        return Outcome.success("Stopped")

    def next(self) -> Outcome:
        index = next_index(
            self.session.current_index,
            len(self.playlist),
            self.session.shuffle,
            self._rng,
        )
        if index is None:
            return Outcome.failure("Playlist is empty")
        return self.play_song(index)

    def previous(self) -> Outcome:
        index = previous_index(
            self.session.current_index,
            len(self.playlist),
            self.session.shuffle,
            self._rng,
        )
        if index is None:
            return Outcome.failure("Playlist is empty")
        return self.play_song(index)

    def on_track_end(self) -> Outcome:
        """Repeat restarts the same track; otherwise advance like next()."""
        if self.session.status not in (PlayerStatus.PLAYING, PlayerStatus.PAUSED):
            logger.debug(f"Track end ignored in state {self.session.status.value}")
            return Outcome.failure("Nothing is playing")

        if self.session.repeat:
            try:
                self.output.set_position(0.0)
                self.output.play()
            except PlaybackError as e:
                return self._fail_playback(str(e))
            self.session.position = 0.0
            self.session.status = PlayerStatus.PLAYING
            logger.debug(f"Repeating track at {self.session.current_index}")
            return Outcome.success("Repeating")

        return self.next()

    def seek(self, fraction: float) -> Outcome:
        """Jump to ``fraction`` (0-1) of the current track; needs a known duration."""
        if not self.session.has_selection:
            return Outcome.failure("Nothing is playing")

        duration = self.session.duration
        if not duration:
            track = self.current_track
            duration = track.duration if track else None
        if not duration:
            return Outcome.failure("Duration unknown")

        position = _clamp(fraction) * duration
        try:
            self.output.set_position(position)
        except PlaybackError as e:
            logger.warning(f"Seek failed: {e}")
            return Outcome.failure(str(e))
        self.session.position = position
        self._emit_progress()
        return Outcome.success(f"Seeked to {position:.0f}s")

    # -- volume and modes -------------------------------------------------

    def set_volume(self, level: float) -> Outcome:
        level = _clamp(level)
        try:
            self.output.set_volume(level)
        except PlaybackError as e:
            logger.warning(f"Volume change not applied: {e}")
            return Outcome.failure(str(e))
        self.session.volume = level
        self.session.muted = False
        self._emit_state()
        return Outcome.success(f"Volume {round(level * 100)}%")

    def toggle_mute(self) -> Outcome:
        if self.session.muted:
            level = self.session.volume or DEFAULT_UNMUTE_VOLUME
            return self.set_volume(level)

        try:
            self.output.set_volume(0.0)
        except PlaybackError as e:
            logger.warning(f"Mute not applied: {e}")
            return Outcome.failure(str(e))
        self.session.muted = True
        self._emit_state()
        return Outcome.success("Muted")

    def toggle_shuffle(self) -> bool:
        self.session.shuffle = not self.session.shuffle
        self._emit_state()
        return self.session.shuffle

    def toggle_repeat(self) -> bool:
        self.session.repeat = not self.session.repeat
        self._emit_state()
        return self.session.repeat

    # -- playlist edits ---------------------------------------------------

    def add_track(self, track: Track) -> Outcome:
        try:
            index = self.playlist.add(track)
        except ValidationError as e:
            self.notifier.error(f"Error adding song: {e}")
            return Outcome.failure(str(e))
        self._emit_playlist_changed()
        return Outcome.success(f"Added '{track.title}' at position {index + 1}")

    def add_local_file(self, pick: PickResult) -> Outcome:
        """Add a picked local file and resolve its duration in the background."""
        if pick.cancelled:
            return Outcome.failure("")
        if not pick.success:
            self.notifier.error(f"Error: {pick.error}")
            return Outcome.failure(pick.error or "Could not open file")

        track = Track(
            id=generate_track_id(),
            source_uri=pick.source_uri or "",
            title=pick.title or "Local File",
            artist=pick.artist or "Local File",
            duration=None,
            is_local=True,
        )
        outcome = self.add_track(track)
        if not outcome.ok:
            return outcome

        self._duration_resolver(
            track.id,
            track.source_uri,
            lambda track_id, seconds: self.post(DurationResolved(track_id, seconds)),
        )
        self.notifier.success("File added successfully!")
        return outcome

    def add_fetched(self, result) -> Outcome:
        """Add the track described by a FetchResult; failures leave the playlist alone."""
        if not result.success:
            message = f"Error adding song: {result.error or 'Unknown error'}"
            self.notifier.error(message)
            return Outcome.failure(message)

        track = Track(
            id=result.id or generate_track_id(),
            source_uri=result.source_uri or "",
            title=result.title or "Unknown Title",
            artist=result.artist or "Unknown Artist",
            duration=result.duration or None,
            thumbnail_uri=result.thumbnail or None,
            is_local=False,
        )
        outcome = self.add_track(track)
        if outcome.ok:
            self.notifier.success("Song added successfully!")
        return outcome

    def remove_track(self, index: int) -> Outcome:
        """Remove a track, keeping the selection on the same track when possible.

        Removing the current track stops output and returns to Idle.
        """
        current = self.session.current_index
        try:
            track = self.playlist.remove(index)
        except NotFoundError as e:
            logger.debug(f"remove_track ignored: {e}")
            return Outcome.failure("")

        if index == current:
            try:
                self.output.stop()
            except PlaybackError as e:
                logger.warning(f"Output stop failed: {e}")
            self.session.reset()
            self._emit_now_playing()
            self._emit_state()
        elif current != NO_SELECTION and index < current:
            self.session.current_index = current - 1

        self._emit_playlist_changed()
        return Outcome.success(f"Removed '{track.title}'")

    def move_track(self, src: int, dst: int) -> Outcome:
        """Reorder; the current selection follows its track."""
        try:
            self.playlist.move(src, dst)
        except NotFoundError as e:
            logger.debug(f"move_track ignored: {e}")
            return Outcome.failure("")

        current = self.session.current_index
        if current == src:
            self.session.current_index = dst
        elif src < current <= dst:
            self.session.current_index = current - 1
        elif dst <= current < src:
            self.session.current_index = current + 1

        self._emit_playlist_changed()
        return Outcome.success(f"Moved track {src + 1} to {dst + 1}")

    # -- events -----------------------------------------------------------

    def post(self, event: PlaybackEvent) -> None:
        """Queue an event from any thread; applied by pump()."""
        self._events.put(event)

    def pump(self) -> int:
        """Apply all queued events in order; call from the control thread.

        Returns:
            Number of events handled
        """
        handled = 0
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                return handled
            self.handle(event)
            handled += 1

    def _is_current_source(self, source_uri: Optional[str]) -> bool:
        track = self.current_track
        if track is None:
            return False
        return source_uri is None or source_uri == track.source_uri

    def _emit_progress(self) -> None:
        position, duration, percent = self.progress()
        self.bus.emit(
            signals.PROGRESS, position=position, duration=duration, percent=percent
        )

    def handle(self, event: PlaybackEvent) -> Outcome:
        """Apply one output or worker event to the session."""
        if isinstance(event, TimeUpdate):
            if not self.session.has_selection:
                return Outcome.failure("No track loaded")
            self.session.position = event.position
            self._emit_progress()
            return Outcome.success()

        if isinstance(event, Ended):
            if not self._is_current_source(event.source_uri):
                logger.debug(f"Stale end-of-track for {event.source_uri}")
                return Outcome.failure("Stale event")
            return self.on_track_end()

        if isinstance(event, MetadataLoaded):
            if not self._is_current_source(event.source_uri):
                return Outcome.failure("Stale event")
            self.session.duration = event.duration
            track = self.current_track
            if track is not None and track.duration is None:
                self.playlist.update_duration(track.id, event.duration)
                self._emit_playlist_changed()
            self._emit_progress()
            return Outcome.success()

        if isinstance(event, OutputError):
            if not self._is_current_source(event.source_uri):
                return Outcome.failure("Stale event")
            return self._fail_playback(event.message)

        if isinstance(event, DurationResolved):
            if not self.playlist.update_duration(event.track_id, event.duration):
                return Outcome.failure("Track no longer in playlist")
            track = self.current_track
            if track is not None and track.id == event.track_id and not self.session.duration:
                self.session.duration = event.duration
            self._emit_playlist_changed()
            return Outcome.success()

        if isinstance(event, FetchCompleted):
            return self.add_fetched(event.result)

        if isinstance(event, DownloadProgress):
            self.bus.emit(signals.DOWNLOAD_PROGRESS, percent=event.percent)
            return Outcome.success()

        logger.warning(f"Unhandled playback event: {event!r}")
        return Outcome.failure("Unhandled event")
