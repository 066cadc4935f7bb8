"""
State-change notifications for front ends.

The core emits on named topics; a front end subscribes to the topics it
renders. The core never reads anything back from subscribers.
"""

import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List

from loguru import logger

# Topics
NOW_PLAYING = "now-playing"
PROGRESS = "progress"
PLAYBACK_STATE = "playback-state"
PLAYLIST_CHANGED = "playlist-changed"
FAVORITE_CHANGED = "favorite-changed"
RECENTLY_PLAYED_CHANGED = "recently-played-changed"
DOWNLOAD_PROGRESS = "download-progress"
NOTIFICATION = "notification"

Subscriber = Callable[..., None]


class SignalBus:
    """Topic based publish/subscribe with isolated subscribers."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Subscriber]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, topic: str, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` for ``topic``.

        Returns:
            A function that removes the subscription
        """
        with self._lock:
            self._subscribers[topic].append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers[topic]:
                    self._subscribers[topic].remove(callback)

        return unsubscribe

    def emit(self, topic: str, **payload: Any) -> None:
        """Call every subscriber of ``topic`` with ``payload`` as keyword arguments.

        A failing subscriber is logged and skipped.
        """
        with self._lock:
            callbacks = list(self._subscribers.get(topic, ()))
        for callback in callbacks:
            try:
                callback(**payload)
            except Exception:
                logger.exception(f"Subscriber for '{topic}' failed")
