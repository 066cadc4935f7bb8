"""yt-dlp specific fetch exceptions."""

from melody.domain.exceptions import FetchError


class InvalidURLError(FetchError):
    """Raised when the input is not a fetchable URL."""

    pass


class VideoUnavailableError(FetchError):
    """Raised when the source is deleted, private or unavailable."""

    pass


class AgeRestrictedError(FetchError):
    """Raised when the source requires signing in."""

    pass


class CopyrightBlockedError(FetchError):
    """Raised when the source is blocked due to copyright."""

    pass


class DownloaderNotFoundError(FetchError):
    """Raised when yt-dlp cannot be started."""

    pass
