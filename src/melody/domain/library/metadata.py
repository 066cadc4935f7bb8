"""
Audio metadata helpers.

Reads durations and tags from local files using Mutagen, converts between
filesystem paths and file:// URIs, and formats times for display.
"""

import math
import threading
from pathlib import Path
from typing import Any, Callable, Optional
from urllib.parse import unquote, urlparse
from urllib.request import pathname2url

from loguru import logger
from mutagen import File as MutagenFile
from mutagen import MutagenError


def path_to_uri(path: str | Path) -> str:
    """Convert a local path to a file:// URI."""
    return "file://" + pathname2url(str(Path(path).expanduser().resolve()))


def uri_to_path(uri: str) -> Optional[Path]:
    """Return the local path for a file:// URI or bare path, None for remote URIs."""
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    if parsed.scheme == "" or (len(parsed.scheme) == 1 and uri[1:3] in (":\\", ":/")):
        # Bare path (including Windows drive letters)
        return Path(uri)
    return None


def get_tag_value(audio_file: Any, tag_names: list[str]) -> Optional[str]:
    """Get tag value, trying multiple possible tag names."""
    for tag_name in tag_names:
        try:
            value = audio_file.get(tag_name)
            if value:
                if isinstance(value, list) and value:
                    return str(value[0])
                return str(value)
        except (KeyError, ValueError):
            # Vorbis comments raise ValueError for unknown keys
            continue
    return None


def read_tags(path: Path) -> dict[str, Optional[str]]:
    """Read title/artist tags; missing or unreadable tags come back as None."""
    try:
        audio_file = MutagenFile(path)
    except (MutagenError, OSError) as e:
        logger.debug(f"Could not read tags from {path}: {e}")
        return {"title": None, "artist": None}

    if audio_file is None:
        return {"title": None, "artist": None}

    return {
        "title": get_tag_value(audio_file, ["TIT2", "\xa9nam", "TITLE", "title"]),
        "artist": get_tag_value(audio_file, ["TPE1", "\xa9ART", "ARTIST", "artist"]),
    }


def read_duration(path: Path) -> Optional[float]:
    """Return the duration of an audio file in seconds, or None if unknown."""
    try:
        audio_file = MutagenFile(path)
    except (MutagenError, OSError) as e:
        logger.warning(f"Could not read metadata from {path}: {e}")
        return None

    if audio_file is None or not hasattr(audio_file, "info"):
        return None

    length = getattr(audio_file.info, "length", None)
    if length is None or not math.isfinite(length) or length <= 0:
        return None
    return float(length)


def resolve_duration_async(
    track_id: str,
    source_uri: str,
    on_resolved: Callable[[str, float], None],
) -> Optional[threading.Thread]:
    """Read a local track's duration on a worker thread.

    ``on_resolved(track_id, seconds)`` is called from the worker only when a
    duration was found. Remote URIs are skipped.

    Returns:
        The started thread, or None when there was nothing to resolve
    """
    path = uri_to_path(source_uri)
    if path is None:
        return None

    def worker() -> None:
        seconds = read_duration(path)
        if seconds is None:
            logger.debug(f"No duration found for track {track_id} ({path})")
            return
        logger.debug(f"Resolved duration for track {track_id}: {seconds:.2f}s")
        on_resolved(track_id, seconds)

    thread = threading.Thread(
        target=worker, name=f"metadata-{track_id}", daemon=True
    )
    thread.silent_logging = True
    thread.start()
    return thread


def format_time(seconds: Optional[float]) -> str:
    """Format seconds as M:SS; unknown, zero or infinite values show 0:00."""
    if not seconds or not math.isfinite(seconds) or seconds < 0:
        return "0:00"
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"


def format_duration(seconds: Optional[float]) -> str:
    """Playlist column formatting: --:-- while the duration is unknown."""
    if seconds is None:
        return "--:--"
    return format_time(seconds)
