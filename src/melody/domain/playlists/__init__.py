"""Playlists domain - the single ordered working set of tracks."""

from .model import Playlist

__all__ = ["Playlist"]
