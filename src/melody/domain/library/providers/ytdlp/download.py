"""Remote audio fetch using yt-dlp.

The download runs ``yt_dlp.YoutubeDL`` in a child process that leads its own
session, so a download exceeding its time limit is killed together with the
ffmpeg post-processing it started.
"""

import multiprocessing
import os
import queue
import signal
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional
from urllib.parse import urlparse

import yt_dlp
from loguru import logger
from yt_dlp.version import __version__ as YT_DLP_VERSION

from melody.core.config import DEFAULT_FETCH_TIMEOUT
from melody.domain.exceptions import FetchError, FetchTimeout
from melody.domain.library.metadata import path_to_uri
from melody.domain.library.models import DEFAULT_TITLE, generate_track_id

from .exceptions import (
    AgeRestrictedError,
    CopyrightBlockedError,
    DownloaderNotFoundError,
    InvalidURLError,
    VideoUnavailableError,
)

# Type alias for download progress callback
DownloadProgressCallback = Callable[[float], None]  # (percent: 0-100)

DEFAULT_ARTIST = "YouTube"
AUDIO_FORMAT = "mp3"

# Seconds between liveness checks while waiting on the worker
POLL_INTERVAL = 0.5

_INFO_FIELDS = ("title", "artist", "uploader", "duration", "thumbnail")


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a remote fetch.

    On success every track field is set; on failure only ``error`` is.
    """

    success: bool
    id: Optional[str] = None
    title: Optional[str] = None
    artist: Optional[str] = None
    duration: Optional[float] = None
    thumbnail: Optional[str] = None
    source_uri: Optional[str] = None
    error: Optional[str] = None


def validate_url(url: str) -> str:
    """Return the trimmed URL or raise InvalidURLError."""
    url = (url or "").strip()
    if not url:
        raise InvalidURLError("Please enter a URL")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidURLError(f"Invalid URL: {url}")
    return url


def build_options(output_template: str, progress_hook: Callable[[dict], None]) -> dict:
    """YoutubeDL options: single item, best audio converted to mp3."""
    return {
        "format": "bestaudio/best",
        "outtmpl": output_template,
        "noplaylist": True,
        "quiet": True,
        "no_warnings": True,
        "noprogress": True,
        "progress_hooks": [progress_hook],
        "postprocessors": [
            {"key": "FFmpegExtractAudio", "preferredcodec": AUDIO_FORMAT}
        ],
    }


def _make_progress_hook(
    callback: Optional[DownloadProgressCallback],
    throttle_ms: int = 500,
) -> Callable[[dict], None]:
    """Create a throttled yt-dlp progress hook.

    Percentages are capped at 95 while downloading; 100 is reported once the
    audio file exists.
    """
    if callback is None:
        return lambda d: None

    state = {"last_update": 0.0, "last_percent": -1}

    def hook(d: dict) -> None:
        if d.get("status") != "downloading":
            return

        now = time.time()
        if now - state["last_update"] < throttle_ms / 1000:
            return

        total = d.get("total_bytes") or d.get("total_bytes_estimate")
        downloaded = d.get("downloaded_bytes") or 0
        if total and total > 0:
            percent = int(downloaded / total * 100)
        else:
            # Unknown size: creep forward with elapsed time
            percent = int((d.get("elapsed") or 0) * 2)
        percent = min(95, max(0, percent))

        if percent != state["last_percent"]:
            state["last_update"] = now
            state["last_percent"] = percent
            try:
                callback(float(percent))
            except Exception:
                logger.exception("Download progress callback failed")

    return hook


def classify_error(error_text: str) -> FetchError:
    """Map a yt-dlp error message to a specific exception."""
    error_msg = error_text.lower()
    if "unsupported url" in error_msg or "is not a valid url" in error_msg:
        return InvalidURLError("Unsupported or invalid URL")
    if "sign in" in error_msg or "age-restricted" in error_msg or "your age" in error_msg:
        return AgeRestrictedError("Source requires sign-in (login not supported)")
    if "unavailable" in error_msg or "deleted" in error_msg or "private" in error_msg:
        return VideoUnavailableError("Source is unavailable, deleted, or private")
    if "copyright" in error_msg or "blocked" in error_msg:
        return CopyrightBlockedError("Source blocked due to copyright")
    last_line = error_text.strip().splitlines()[-1] if error_text.strip() else ""
    return FetchError(f"Download failed{': ' + last_line if last_line else ''}")


def _download_worker(url: str, output_template: str, results: Any) -> None:
    """Child-process body: download with YoutubeDL and report over ``results``.

    Messages are ``("progress", percent)``, then one ``("done", info)`` or
    ``("error", message)``.
    """
    hook = _make_progress_hook(lambda percent: results.put(("progress", percent)))
    try:
        with yt_dlp.YoutubeDL(build_options(output_template, hook)) as ydl:
            info = ydl.extract_info(url, download=True)
    except yt_dlp.utils.DownloadError as e:
        results.put(("error", str(e)))
        return
    except Exception as e:
        results.put(("error", f"Unexpected error: {e}"))
        return

    if not info:
        results.put(("error", "Source is unavailable"))
        return
    entries = info.get("entries")
    if entries is not None:
        entries = [entry for entry in entries if entry]
        if not entries:
            results.put(("error", "Source is unavailable"))
            return
        info = entries[0]
    results.put(("done", {key: info.get(key) for key in _INFO_FIELDS}))


def _run_in_session(target: Callable[..., None], *args: Any) -> None:
    # Own session: the process id doubles as the group id for killpg
    os.setsid()
    target(*args)


def _start_worker(target: Callable[..., None], args: tuple) -> tuple[Any, Any]:
    """Start ``target(*args, results)`` in a fresh process; returns (process, results)."""
    ctx = multiprocessing.get_context("spawn")
    results = ctx.Queue()
    process = ctx.Process(
        target=_run_in_session,
        args=(target, *args, results),
        name="yt-dlp",
        daemon=True,
    )
    process.start()
    return process, results


def _kill_worker(process: Any) -> None:
    """SIGKILL the worker's whole process group, then the worker itself."""
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        # Worker has not reached setsid yet (or is gone)
        pass
    process.kill()
    process.join(timeout=5.0)


def _remove_partials(output_dir: Path, file_id: str) -> None:
    for leftover in output_dir.glob(f"{file_id}.*"):
        try:
            leftover.unlink()
        except OSError as e:
            logger.warning(f"Could not remove partial download {leftover}: {e}")


def _find_output_file(output_dir: Path, file_id: str) -> Optional[Path]:
    expected = output_dir / f"{file_id}.{AUDIO_FORMAT}"
    if expected.exists():
        return expected
    # Post-processing may leave a different extension behind
    candidates = sorted(output_dir.glob(f"{file_id}.*"))
    candidates = [c for c in candidates if c.suffix not in (".part", ".ytdl", ".json")]
    return candidates[0] if candidates else None


def _collect(
    process: Any,
    results: Any,
    timeout: float,
    progress_callback: Optional[DownloadProgressCallback],
) -> tuple[str, Any]:
    """Relay worker messages until it finishes; ("timeout", None) past the deadline."""
    deadline = time.monotonic() + timeout
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return "timeout", None
        try:
            kind, payload = results.get(timeout=min(POLL_INTERVAL, remaining))
        except queue.Empty:
            if process.is_alive():
                continue
            try:
                kind, payload = results.get(timeout=POLL_INTERVAL)
            except queue.Empty:
                return "error", "Downloader exited unexpectedly"

        if kind != "progress":
            return kind, payload
        if progress_callback:
            try:
                progress_callback(payload)
            except Exception:
                logger.exception("Download progress callback failed")


def download_audio(
    url: str,
    output_dir: Path,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
    progress_callback: Optional[DownloadProgressCallback] = None,
) -> tuple[Path, dict]:
    """Download the audio of a single remote item.

    Args:
        url: Source URL
        output_dir: Folder the audio file is written to
        timeout: Seconds before the download is killed
        progress_callback: Optional callback receiving progress (0-100)

    Returns:
        Tuple of (file_path, info) where info holds yt-dlp's title, artist,
        uploader, duration and thumbnail plus the generated ``file_id``

    Raises:
        InvalidURLError: URL is empty or not http(s)
        FetchTimeout: Download exceeded ``timeout``
        FetchError: Any other download failure
    """
    url = validate_url(url)
    output_dir = Path(output_dir).expanduser()
    output_dir.mkdir(parents=True, exist_ok=True)

    file_id = generate_track_id()
    output_template = str(output_dir / f"{file_id}.%(ext)s")

    logger.info(f"Starting yt-dlp {YT_DLP_VERSION} for {url} -> {output_dir}")

    try:
        process, results = _start_worker(_download_worker, (url, output_template))
    except OSError as e:
        raise DownloaderNotFoundError(f"Could not start yt-dlp: {e}") from e

    kind, payload = _collect(process, results, timeout, progress_callback)

    if kind == "timeout":
        logger.warning(f"yt-dlp exceeded {timeout}s for {url}; killing it")
        _kill_worker(process)
        _remove_partials(output_dir, file_id)
        raise FetchTimeout(timeout)

    process.join(timeout=5.0)
    if kind == "error":
        _remove_partials(output_dir, file_id)
        raise classify_error(payload or "")

    final_path = _find_output_file(output_dir, file_id)
    if final_path is None:
        raise FetchError("Download completed but file not found")

    if progress_callback:
        try:
            progress_callback(100.0)
        except Exception:
            logger.exception("Download progress callback failed")

    info = dict(payload or {})
    info["file_id"] = file_id
    logger.info(f"Downloaded {info.get('title') or url} -> {final_path}")
    return final_path, info


def fetch_track(
    url: str,
    output_dir: Path,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
    progress_callback: Optional[DownloadProgressCallback] = None,
) -> FetchResult:
    """Download ``url`` and describe the result as a FetchResult.

    Never raises for download problems; they come back as
    ``FetchResult(success=False, error=...)``.
    """
    try:
        path, info = download_audio(url, output_dir, timeout, progress_callback)
    except FetchError as e:
        logger.warning(f"Fetch failed for {url!r}: {e}")
        return FetchResult(success=False, error=str(e))
    except OSError as e:
        logger.exception(f"Unexpected I/O error fetching {url!r}")
        return FetchResult(success=False, error=str(e))

    duration = info.get("duration")
    try:
        duration = float(duration) if duration else None
    except (TypeError, ValueError):
        duration = None

    return FetchResult(
        success=True,
        id=info["file_id"],
        title=info.get("title") or DEFAULT_TITLE,
        artist=info.get("artist") or info.get("uploader") or DEFAULT_ARTIST,
        duration=duration,
        thumbnail=info.get("thumbnail") or None,
        source_uri=path_to_uri(path),
    )


def fetch_track_async(
    url: str,
    output_dir: Path,
    on_done: Callable[[FetchResult], None],
    timeout: float = DEFAULT_FETCH_TIMEOUT,
    progress_callback: Optional[DownloadProgressCallback] = None,
) -> threading.Thread:
    """Run fetch_track on a worker thread and hand the result to ``on_done``."""

    def worker() -> None:
        on_done(fetch_track(url, output_dir, timeout, progress_callback))

    thread = threading.Thread(target=worker, name="fetch", daemon=True)
    thread.silent_logging = True
    thread.start()
    return thread
