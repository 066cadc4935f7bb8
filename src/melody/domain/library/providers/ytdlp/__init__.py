"""Remote fetch provider backed by yt-dlp."""

from .download import (
    FetchResult,
    build_options,
    classify_error,
    download_audio,
    fetch_track,
    fetch_track_async,
    validate_url,
)
from .exceptions import (
    AgeRestrictedError,
    CopyrightBlockedError,
    DownloaderNotFoundError,
    InvalidURLError,
    VideoUnavailableError,
)

__all__ = [
    "FetchResult",
    "build_options",
    "classify_error",
    "download_audio",
    "fetch_track",
    "fetch_track_async",
    "validate_url",
    "AgeRestrictedError",
    "CopyrightBlockedError",
    "DownloaderNotFoundError",
    "InvalidURLError",
    "VideoUnavailableError",
]
