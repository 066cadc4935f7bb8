"""
Audio output handles.

``OutputHandle`` is the interface the playback controller drives. ``MpvOutput``
implements it on top of an mpv process controlled over JSON IPC; mpv status is
polled and turned into controller events.
"""

import json
import os
import socket
import subprocess
import tempfile
import time
from pathlib import Path
from typing import Any, List, Optional, Protocol

from loguru import logger

from melody.domain.exceptions import PlaybackError
from melody.domain.library.metadata import uri_to_path

from .events import Ended, MetadataLoaded, OutputError, PlaybackEvent, TimeUpdate

# Seconds a freshly loaded source may stay idle before it counts as unplayable
LOAD_GRACE_SECONDS = 2.0

# Seconds to wait for the IPC socket after spawning mpv
SOCKET_TIMEOUT = 5.0


class OutputHandle(Protocol):
    """What the controller needs from an audio backend.

    Every method raises PlaybackError on failure.
    """

    def load(self, uri: str) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def stop(self) -> None: ...

    def set_position(self, seconds: float) -> None: ...

    def set_volume(self, level: float) -> None: ...


def check_mpv_available() -> bool:
    """Check if MPV is available on the system."""
    try:
        result = subprocess.run(
            ["mpv", "--version"], capture_output=True, text=True, timeout=5
        )
        return result.returncode == 0
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return False


def _mpv_request(socket_path: Optional[str], command: dict[str, Any]) -> Optional[dict]:
    """Send one JSON IPC request and return the decoded reply (None on failure)."""
    if not socket_path or not os.path.exists(socket_path):
        return None

    try:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(2.0)
        try:
            sock.connect(socket_path)
            sock.sendall((json.dumps(command) + "\n").encode("utf-8"))
            response = sock.recv(4096).decode("utf-8")
        finally:
            sock.close()
    except (socket.error, OSError):
        return None

    # mpv may interleave event lines; the reply is the line with an "error" key
    for line in response.splitlines():
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict) and "error" in data:
            return data
    return None


def send_mpv_command(socket_path: Optional[str], command: dict[str, Any]) -> bool:
    """Send JSON IPC command to MPV."""
    reply = _mpv_request(socket_path, command)
    return reply is not None and reply.get("error") == "success"


def get_mpv_property(socket_path: Optional[str], property_name: str) -> Any:
    """Get a property value from MPV."""
    reply = _mpv_request(socket_path, {"command": ["get_property", property_name]})
    if reply and reply.get("error") == "success":
        return reply.get("data")
    return None


class MpvOutput:
    """Output handle backed by an ``mpv --idle`` process."""

    def __init__(self, socket_path: Optional[str] = None, volume: float = 0.7) -> None:
        if socket_path is None:
            socket_path = str(Path(tempfile.gettempdir()) / f"melody-mpv-{os.getpid()}")
        self.socket_path = socket_path
        self.initial_volume = volume
        self.process: Optional[subprocess.Popen] = None

        self._loaded_uri: Optional[str] = None
        self._loaded_at = 0.0
        self._reported_duration = False
        self._reported_end = False
        self._last_position: Optional[float] = None
        self._reported_exit = False

    # -- process lifecycle -------------------------------------------------

    def start(self) -> None:
        """Spawn mpv with JSON IPC.

        Raises:
            PlaybackError: mpv missing or its socket never appeared
        """
        logger.info(f"Starting MPV player with socket: {self.socket_path}")

        if os.path.exists(self.socket_path):
            logger.debug(f"Removing existing socket: {self.socket_path}")
            os.unlink(self.socket_path)

        cmd = [
            "mpv",
            "--idle=yes",
            "--no-video",
            "--no-terminal",
            f"--input-ipc-server={self.socket_path}",
            f"--volume={round(self.initial_volume * 100)}",
            "--keep-open=yes",
            "--load-scripts=no",
        ]

        try:
            self.process = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                stdin=subprocess.DEVNULL,
            )
        except (subprocess.SubprocessError, OSError) as e:
            raise PlaybackError(f"Failed to start mpv: {e}") from e

        start_time = time.time()
        while not os.path.exists(self.socket_path):
            if time.time() - start_time > SOCKET_TIMEOUT:
                self.process.kill()
                raise PlaybackError(f"mpv socket not created after {SOCKET_TIMEOUT}s")
            time.sleep(0.1)

        if not send_mpv_command(self.socket_path, {"command": ["get_property", "idle-active"]}):
            self.process.kill()
            raise PlaybackError("mpv socket connection test failed")

        logger.info("MPV started successfully")

    def shutdown(self) -> None:
        """Stop the mpv process and remove its socket."""
        if self.process:
            try:
                self.process.kill()
                self.process.wait(timeout=2.0)
            except (OSError, subprocess.TimeoutExpired):
                logger.debug("mpv already gone during shutdown")
            self.process = None

        if os.path.exists(self.socket_path):
            try:
                os.unlink(self.socket_path)
            except OSError:
                logger.debug(f"Could not remove socket {self.socket_path}")

    def is_running(self) -> bool:
        """Check if the mpv process is alive and its socket exists."""
        if not self.process or self.process.poll() is not None:
            return False
        return os.path.exists(self.socket_path)

    def _command(self, *args: Any) -> None:
        if not self.is_running():
            raise PlaybackError("Audio output is not running")
        if not send_mpv_command(self.socket_path, {"command": list(args)}):
            raise PlaybackError(f"mpv rejected command: {args[0]}")

    # -- OutputHandle -----------------------------------------------------

    def load(self, uri: str) -> None:
        """Replace whatever is loaded with ``uri``, paused at the start."""
        path = uri_to_path(uri)
        if path is not None and not path.is_file():
            raise PlaybackError(f"File not found: {path}")
        target = str(path) if path is not None else uri

        self._command("set_property", "pause", True)
        self._command("loadfile", target, "replace")

        self._loaded_uri = uri
        self._loaded_at = time.time()
        self._reported_duration = False
        self._reported_end = False
        self._last_position = None
        self._reported_exit = False
        logger.debug(f"Loaded {target}")

    def play(self) -> None:
        self._command("set_property", "pause", False)

    def pause(self) -> None:
        self._command("set_property", "pause", True)

    def stop(self) -> None:
        self._loaded_uri = None
        if self.is_running():
            self._command("stop")

    def set_position(self, seconds: float) -> None:
        self._command("seek", max(0.0, seconds), "absolute")
        self._reported_end = False

    def set_volume(self, level: float) -> None:
        volume = round(max(0.0, min(1.0, level)) * 100)
        self._command("set_property", "volume", volume)

    # -- event polling ----------------------------------------------------

    def poll(self) -> List[PlaybackEvent]:
        """Translate current mpv state into controller events."""
        if self._loaded_uri is None:
            return []

        uri = self._loaded_uri
        if not self.is_running():
            if self._reported_exit:
                return []
            self._reported_exit = True
            self._loaded_uri = None
            return [OutputError("Audio output stopped unexpectedly", uri)]

        events: List[PlaybackEvent] = []
        duration = get_mpv_property(self.socket_path, "duration")
        position = get_mpv_property(self.socket_path, "time-pos")
        eof = get_mpv_property(self.socket_path, "eof-reached")
        idle = get_mpv_property(self.socket_path, "idle-active")

        if duration and duration > 0 and not self._reported_duration:
            self._reported_duration = True
            events.append(MetadataLoaded(float(duration), uri))

        if position is not None and position != self._last_position:
            self._last_position = position
            events.append(TimeUpdate(float(position)))

        if eof is True and not self._reported_end:
            self._reported_end = True
            events.append(Ended(uri))

        if (
            idle is True
            and not self._reported_duration
            and time.time() - self._loaded_at > LOAD_GRACE_SECONDS
        ):
            logger.warning(f"mpv went idle without loading {uri}")
            self._loaded_uri = None
            events.append(OutputError("Error loading audio file", uri))

        return events
