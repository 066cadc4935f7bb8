"""
Events consumed by the playback controller.

Output-handle callbacks and worker-thread results are modelled as plain
immutable messages. They are queued from any thread and applied one at a
time on the control path.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True)
class TimeUpdate:
    """Playback position moved."""

    position: float


@dataclass(frozen=True)
class Ended:
    """The loaded track reached its end."""

    source_uri: Optional[str] = None


@dataclass(frozen=True)
class MetadataLoaded:
    """The output handle learned the loaded track's duration."""

    duration: float
    source_uri: Optional[str] = None


@dataclass(frozen=True)
class OutputError:
    """The output handle failed to load or play the current source."""

    message: str = "Error loading audio file"
    source_uri: Optional[str] = None


@dataclass(frozen=True)
class DurationResolved:
    """Background metadata read finished for a local track."""

    track_id: str
    duration: float


@dataclass(frozen=True)
class FetchCompleted:
    """A remote fetch finished (successfully or not)."""

    result: Any  # FetchResult


@dataclass(frozen=True)
class DownloadProgress:
    """Percentage reported by a running fetch."""

    percent: float


PlaybackEvent = Union[
    TimeUpdate,
    Ended,
    MetadataLoaded,
    OutputError,
    DurationResolved,
    FetchCompleted,
    DownloadProgress,
]
