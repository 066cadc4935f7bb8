"""
Local file selection.

Validates a user-chosen path and turns it into the pieces needed to build a
playlist entry. An empty selection is a cancellation, not an error.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger

from melody.core.config import DEFAULT_AUDIO_EXTENSIONS

from .metadata import path_to_uri, read_tags

LOCAL_ARTIST = "Local File"


@dataclass(frozen=True)
class PickResult:
    """Outcome of a file selection."""

    success: bool
    title: Optional[str] = None
    artist: Optional[str] = None
    source_uri: Optional[str] = None
    error: Optional[str] = None  # None on success and on cancellation

    @property
    def cancelled(self) -> bool:
        return not self.success and self.error is None


def title_from_path(path: Path) -> str:
    """File name without its extension."""
    return path.stem or path.name


def is_supported_format(path: Path, supported_formats: Iterable[str]) -> bool:
    """Check whether the file extension is an accepted audio format."""
    return path.suffix.lower() in {ext.lower() for ext in supported_formats}


def select_local_file(
    raw_path: Optional[str],
    supported_formats: Iterable[str] = DEFAULT_AUDIO_EXTENSIONS,
) -> PickResult:
    """Validate a chosen audio file.

    Args:
        raw_path: Path typed or dropped by the user; empty or None cancels
        supported_formats: Accepted extensions (with leading dot)

    Returns:
        PickResult with title/artist taken from tags when present,
        falling back to the file name and "Local File"
    """
    if not raw_path or not raw_path.strip():
        return PickResult(success=False)

    path = Path(raw_path.strip().strip('"').strip("'")).expanduser()
    formats = list(supported_formats)

    if not path.is_file():
        return PickResult(success=False, error=f"File not found: {path}")

    if not is_supported_format(path, formats):
        return PickResult(
            success=False,
            error=f"Unsupported format '{path.suffix}' (expected {', '.join(formats)})",
        )

    tags = read_tags(path)
    logger.debug(f"Selected local file {path} (tags={tags})")

    return PickResult(
        success=True,
        title=tags["title"] or title_from_path(path),
        artist=tags["artist"] or LOCAL_ARTIST,
        source_uri=path_to_uri(path),
    )
