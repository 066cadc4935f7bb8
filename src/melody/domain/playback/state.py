"""
Transient playback session state.

Nothing here is persisted: every launch starts Idle with no selection.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

NO_SELECTION = -1


class PlayerStatus(str, Enum):
    """Controller states."""

    IDLE = "idle"
    PAUSED = "paused"
    PLAYING = "playing"
    ERROR = "error"


@dataclass
class PlaybackSession:
    """State of the single playback session.

    ``current_index`` refers into the playlist by position only; it is -1
    when nothing is loaded.
    """

    current_index: int = NO_SELECTION
    status: PlayerStatus = PlayerStatus.IDLE
    volume: float = 0.7
    muted: bool = False
    shuffle: bool = False
    repeat: bool = False
    position: float = 0.0
    duration: Optional[float] = None
    last_error: Optional[str] = None

    @property
    def is_playing(self) -> bool:
        return self.status is PlayerStatus.PLAYING

    @property
    def has_selection(self) -> bool:
        return self.current_index != NO_SELECTION

    def reset(self) -> None:
        """Back to Idle with no selection; modes and volume are kept."""
        self.current_index = NO_SELECTION
        self.status = PlayerStatus.IDLE
        self.position = 0.0
        self.duration = None
        self.last_error = None
