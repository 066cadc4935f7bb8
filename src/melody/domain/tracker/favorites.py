"""Favorite tracks, stored as a set of track ids."""

import json
from typing import Optional, Set

from loguru import logger

from melody.core import signals
from melody.core.store import FAVORITES_KEY, KeyValueStore


class FavoriteSet:
    """Set of favorite track ids, written through to the store on every toggle."""

    def __init__(
        self,
        store: KeyValueStore,
        bus: Optional[signals.SignalBus] = None,
        key: str = FAVORITES_KEY,
    ) -> None:
        self._store = store
        self._bus = bus
        self._key = key
        self._ids: Set[str] = set()

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, track_id: object) -> bool:
        return track_id in self._ids

    def ids(self) -> Set[str]:
        return set(self._ids)

    def is_favorite(self, track_id: str) -> bool:
        return track_id in self._ids

    def toggle(self, track_id: str) -> bool:
        """Flip membership of ``track_id`` and persist.

        Returns:
            True if the track is now a favorite
        """
        if track_id in self._ids:
            self._ids.remove(track_id)
            is_favorite = False
        else:
            self._ids.add(track_id)
            is_favorite = True

        self.save()
        logger.info(f"Favorite {'added' if is_favorite else 'removed'}: {track_id}")
        if self._bus:
            self._bus.emit(
                signals.FAVORITE_CHANGED, track_id=track_id, is_favorite=is_favorite
            )
        return is_favorite

    def load(self) -> None:
        self._ids = set()
        raw = self._store.get(self._key)
        if raw is None:
            return
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Stored favorites are corrupt; starting empty")
            return
        if not isinstance(payload, list):
            logger.warning("Stored favorites are not a list; starting empty")
            return
        self._ids = {str(item) for item in payload if isinstance(item, (str, int))}

    def save(self) -> None:
        # Sorted for a stable stored representation
        self._store.set(self._key, json.dumps(sorted(self._ids)))
