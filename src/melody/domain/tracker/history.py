"""
Recently played log.

Holds copies of tracks, newest first, so entries survive the track being
removed from the playlist. Re-playing a track moves it to the front.
"""

import json
from typing import List, Optional

from loguru import logger

from melody.core import signals
from melody.core.store import RECENTLY_PLAYED_KEY, KeyValueStore
from melody.domain.library.models import Track

MAX_RECENTLY_PLAYED = 10


class RecentlyPlayedLog:
    """Bounded, id-deduplicated, most-recent-first list of track snapshots."""

    def __init__(
        self,
        store: KeyValueStore,
        bus: Optional[signals.SignalBus] = None,
        limit: int = MAX_RECENTLY_PLAYED,
        key: str = RECENTLY_PLAYED_KEY,
    ) -> None:
        self._store = store
        self._bus = bus
        self._limit = limit
        self._key = key
        self._entries: List[Track] = []

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> List[Track]:
        """Newest first."""
        return list(self._entries)

    def record(self, track: Track) -> None:
        """Put a snapshot of ``track`` at the front, dropping any older entry with its id."""
        snapshot = track.snapshot()
        self._entries = [snapshot] + [t for t in self._entries if t.id != track.id]
        del self._entries[self._limit :]
        self._changed()

    def clear(self) -> None:
        self._entries = []
        self._changed()

    def _changed(self) -> None:
        self.save()
        if self._bus:
            self._bus.emit(signals.RECENTLY_PLAYED_CHANGED, entries=self.entries())

    def load(self) -> None:
        self._entries = []
        raw = self._store.get(self._key)
        if raw is None:
            return
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Stored history is corrupt; starting empty")
            return
        if not isinstance(payload, list):
            logger.warning("Stored history is not a list; starting empty")
            return

        seen_ids = set()
        for entry in payload:
            track = Track.from_dict(entry)
            if track is None or track.id in seen_ids:
                continue
            seen_ids.add(track.id)
            self._entries.append(track)
        del self._entries[self._limit :]

    def save(self) -> None:
        self._store.set(self._key, json.dumps([t.to_dict() for t in self._entries]))
