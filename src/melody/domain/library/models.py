"""
Music library domain models.

Contains data structures for representing playable tracks.
"""

import threading
import time
from dataclasses import asdict, dataclass, replace
from typing import Any, Optional

DEFAULT_TITLE = "Unknown Title"
DEFAULT_ARTIST = "Unknown Artist"

_id_lock = threading.Lock()
_last_id = 0


def generate_track_id() -> str:
    """Return a time-based track id, strictly increasing within the process.

    Ids are millisecond timestamps; two calls in the same millisecond get
    consecutive values instead of colliding.
    """
    global _last_id
    with _id_lock:
        candidate = time.time_ns() // 1_000_000
        if candidate <= _last_id:
            candidate = _last_id + 1
        _last_id = candidate
        return str(candidate)


@dataclass
class Track:
    """One playable audio item.

    ``id`` is the identity key used by the playlist, favorites and history.
    ``duration`` may be None until metadata for a local file has been read;
    it is then filled in place.
    """

    id: str
    source_uri: str
    title: str = DEFAULT_TITLE
    artist: str = DEFAULT_ARTIST
    duration: Optional[float] = None  # in seconds
    thumbnail_uri: Optional[str] = None
    is_local: bool = False

    def snapshot(self) -> "Track":
        """Independent copy, unaffected by later edits to this track."""
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Track"]:
        """Rebuild a track from stored data, or None if the record is unusable."""
        if not isinstance(data, dict):
            return None

        track_id = data.get("id")
        source_uri = data.get("source_uri")
        if not track_id or not isinstance(source_uri, str) or not source_uri:
            return None

        duration = data.get("duration")
        try:
            duration = float(duration) if duration is not None else None
        except (TypeError, ValueError):
            duration = None
        if duration is not None and duration <= 0:
            duration = None

        return cls(
            id=str(track_id),
            source_uri=source_uri,
            title=str(data.get("title") or DEFAULT_TITLE),
            artist=str(data.get("artist") or DEFAULT_ARTIST),
            duration=duration,
            thumbnail_uri=data.get("thumbnail_uri") or None,
            is_local=bool(data.get("is_local", False)),
        )
