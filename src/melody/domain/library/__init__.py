"""Library domain - tracks, local files and metadata.

This domain handles:
- Track data model and id generation
- Local file selection and Mutagen metadata
- Remote fetch providers (yt-dlp)
"""

# Models
from .models import Track, generate_track_id

# Metadata
from .metadata import (
    format_duration,
    format_time,
    path_to_uri,
    read_duration,
    read_tags,
    resolve_duration_async,
    uri_to_path,
)

# Local files
from .local import PickResult, select_local_file

__all__ = [
    # Models
    "Track",
    "generate_track_id",
    # Metadata
    "format_duration",
    "format_time",
    "path_to_uri",
    "read_duration",
    "read_tags",
    "resolve_duration_async",
    "uri_to_path",
    # Local files
    "PickResult",
    "select_local_file",
]
