"""Tracker domain - favorites and recently played history."""

from .favorites import FavoriteSet
from .history import MAX_RECENTLY_PLAYED, RecentlyPlayedLog

__all__ = [
    "FavoriteSet",
    "RecentlyPlayedLog",
    "MAX_RECENTLY_PLAYED",
]
