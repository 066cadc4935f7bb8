"""Playback domain - session state, selection policy and the controller.

This domain handles:
- The playback state machine (PlaybackController)
- Output handles (mpv over JSON IPC)
- Next/previous selection with shuffle
"""

# Controller
from .controller import PlaybackController

# Events
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

# Output
from .player import MpvOutput, OutputHandle, check_mpv_available

# Selection
from .selection import next_index, previous_index

# State
from .state import NO_SELECTION, PlaybackSession, PlayerStatus

__all__ = [
    # Controller
    "PlaybackController",
    # Events
    "DownloadProgress",
    "DurationResolved",
    "Ended",
    "FetchCompleted",
    "MetadataLoaded",
    "OutputError",
    "PlaybackEvent",
    "TimeUpdate",
    # Output
    "MpvOutput",
    "OutputHandle",
    "check_mpv_available",
    # Selection
    "next_index",
    "previous_index",
    # State
    "NO_SELECTION",
    "PlaybackSession",
    "PlayerStatus",
]
