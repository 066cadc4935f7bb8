"""
Playlist model for Melody

The playlist is one flat, ordered list of tracks. Order is insertion order
unless the user moves a track; nothing is sorted implicitly. Every mutation is
written through to the store.

IMPORTANT: Positions are 0-indexed here but displayed 1-indexed to users.
"""

import json
from typing import Iterator, List, Optional

from loguru import logger

from melody.core.store import PLAYLIST_KEY, KeyValueStore
from melody.domain.exceptions import NotFoundError, ValidationError
from melody.domain.library.models import Track


class Playlist:
    """Ordered collection of tracks persisted under a single store key."""

    def __init__(self, store: KeyValueStore, key: str = PLAYLIST_KEY) -> None:
        self._store = store
        self._key = key
        self._tracks: List[Track] = []

    def __len__(self) -> int:
        return len(self._tracks)

    def __iter__(self) -> Iterator[Track]:
        return iter(self._tracks)

    def __getitem__(self, index: int) -> Track:
        return self._tracks[index]

    @property
    def tracks(self) -> List[Track]:
        """Shallow copy of the current order."""
        return list(self._tracks)

    def is_valid_index(self, index: int) -> bool:
        return 0 <= index < len(self._tracks)

    def find_index(self, track_id: str) -> Optional[int]:
        """Position of the track with ``track_id``, or None."""
        for i, track in enumerate(self._tracks):
            if track.id == track_id:
                return i
        return None

    def get(self, track_id: str) -> Optional[Track]:
        index = self.find_index(track_id)
        return self._tracks[index] if index is not None else None

    def add(self, track: Track) -> int:
        """Append a track and persist.

        Returns:
            Position of the new track

        Raises:
            ValidationError: Empty source or an id already in the playlist
        """
        if not track.source_uri or not track.source_uri.strip():
            raise ValidationError("Track has no source")
        if self.find_index(track.id) is not None:
            raise ValidationError(f"Track {track.id} is already in the playlist")

        self._tracks.append(track)
        self.save()
        logger.info(f"Added track {track.id} '{track.title}' at {len(self._tracks) - 1}")
        return len(self._tracks) - 1

    def remove(self, index: int) -> Track:
        """Remove the track at ``index`` and persist.

        Raises:
            NotFoundError: Index outside the playlist
        """
        if not self.is_valid_index(index):
            raise NotFoundError(f"No track at position {index}")
        track = self._tracks.pop(index)
        self.save()
        logger.info(f"Removed track {track.id} '{track.title}' from {index}")
        return track

    def move(self, src: int, dst: int) -> None:
        """Move the track at ``src`` so that it ends up at ``dst``.

        Raises:
            NotFoundError: Either index outside the playlist
        """
        if not self.is_valid_index(src) or not self.is_valid_index(dst):
            raise NotFoundError(f"Cannot move {src} -> {dst} in {len(self._tracks)} tracks")
        if src == dst:
            return
        track = self._tracks.pop(src)
        self._tracks.insert(dst, track)
        self.save()
        logger.debug(f"Moved track {track.id} from {src} to {dst}")

    def update_duration(self, track_id: str, seconds: float) -> bool:
        """Fill in a resolved duration.

        Returns:
            False when the track is no longer in the playlist (nothing changed)
        """
        track = self.get(track_id)
        if track is None:
            logger.debug(f"Duration for removed track {track_id} ignored")
            return False
        track.duration = seconds
        self.save()
        return True

    def load(self) -> None:
        """Replace contents with the stored list; bad data yields an empty playlist."""
        self._tracks = []
        raw = self._store.get(self._key)
        if raw is None:
            return

        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Stored playlist is corrupt; starting empty")
            return
        if not isinstance(payload, list):
            logger.warning("Stored playlist is not a list; starting empty")
            return

        seen_ids = set()
        for entry in payload:
            track = Track.from_dict(entry)
            if track is None:
                logger.warning(f"Skipping unreadable playlist entry: {entry!r}")
                continue
            if track.id in seen_ids:
                logger.warning(f"Skipping duplicate playlist entry {track.id}")
                continue
            seen_ids.add(track.id)
            self._tracks.append(track)

        logger.info(f"Loaded playlist with {len(self._tracks)} tracks")

    def save(self) -> None:
        """Write the full list to the store."""
        self._store.set(self._key, json.dumps([t.to_dict() for t in self._tracks]))
