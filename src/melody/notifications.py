"""Transient user notifications for Melody.

Every notification is logged and published on the signal bus; desktop
notifications through notify-send are optional.
"""

import shutil
import subprocess
from typing import Literal, Optional

from loguru import logger

from melody.core import signals
from melody.core.config import NotificationsConfig

NotificationKind = Literal["success", "error", "info"]

_URGENCY = {"success": "normal", "info": "low", "error": "critical"}


def notify_desktop(
    title: str,
    message: str,
    urgency: Literal["low", "normal", "critical"] = "normal",
    expire_ms: int = 3000,
) -> None:
    """
    Show a desktop notification using notify-send.

    Args:
        title: Notification title
        message: Notification message body
        urgency: Urgency level ('low', 'normal', 'critical')
        expire_ms: Milliseconds before the notification is dismissed

    Note:
        Silently skips notification if notify-send is not available.
    """
    if not shutil.which("notify-send"):
        return

    try:
        subprocess.run(
            [
                "notify-send",
                "--urgency",
                urgency,
                "--expire-time",
                str(expire_ms),
                "--app-name",
                "Melody",
                title,
                message,
            ],
            check=False,
            timeout=2.0,
            capture_output=True,
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        logger.debug(f"notify-send failed: {e}")


class Notifier:
    """Raises transient, auto-dismissed notifications."""

    def __init__(
        self,
        bus: Optional[signals.SignalBus] = None,
        config: Optional[NotificationsConfig] = None,
    ) -> None:
        self.bus = bus
        self.config = config or NotificationsConfig()

    def notify(self, message: str, kind: NotificationKind = "info") -> None:
        log_level = "error" if kind == "error" else "info"
        getattr(logger, log_level)(f"[notification:{kind}] {message}")

        if not self.config.enabled:
            return

        if self.bus:
            self.bus.emit(
                signals.NOTIFICATION,
                message=message,
                kind=kind,
                expires_in=self.config.duration_seconds,
            )
        if self.config.desktop:
            notify_desktop(
                "✗ Melody" if kind == "error" else "♪ Melody",
                message,
                urgency=_URGENCY[kind],
                expire_ms=int(self.config.duration_seconds * 1000),
            )

    def success(self, message: str) -> None:
        self.notify(message, "success")

    def error(self, message: str) -> None:
        self.notify(message, "error")
