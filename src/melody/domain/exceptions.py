"""Melody exceptions and the result type returned by core operations."""

from typing import NamedTuple


class MelodyError(Exception):
    """Base exception for Melody operations."""

    pass


class ValidationError(MelodyError):
    """Raised when a mutating call receives bad input (e.g. empty source)."""

    pass


class NotFoundError(MelodyError):
    """Raised when an index or id lookup misses."""

    pass


class PlaybackError(MelodyError):
    """Raised when the audio output cannot load or play a source."""

    pass


class FetchError(MelodyError):
    """Raised when a remote fetch fails."""

    pass


class FetchTimeout(FetchError):
    """Raised when a remote fetch exceeds its time limit."""

    def __init__(self, timeout: float, message: str | None = None):
        self.timeout = timeout
        super().__init__(message or f"Download timed out after {timeout:g}s")


class Outcome(NamedTuple):
    """Result of a user-triggered operation."""

    ok: bool
    message: str = ""

    @classmethod
    def success(cls, message: str = "") -> "Outcome":
        return cls(True, message)

    @classmethod
    def failure(cls, message: str) -> "Outcome":
        return cls(False, message)
