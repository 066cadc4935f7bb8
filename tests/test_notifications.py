"""Tests for transient notifications."""

from unittest.mock import patch

from melody.core import signals
from melody.core.config import NotificationsConfig
from melody.notifications import Notifier, notify_desktop


class TestNotifier:
    """Tests for Notifier."""

    def test_publishes_on_bus(self, bus, recorder) -> None:
        """Notifications carry message, kind and lifetime."""
        Notifier(bus, NotificationsConfig(desktop=False)).error("Error adding song: x")

        assert recorder.of(signals.NOTIFICATION) == [
            {"message": "Error adding song: x", "kind": "error", "expires_in": 3.0}
        ]

    def test_disabled(self, bus, recorder) -> None:
        """Disabled notifications are only logged."""
        Notifier(bus, NotificationsConfig(enabled=False)).success("done")
        assert recorder.of(signals.NOTIFICATION) == []

    def test_desktop_when_enabled(self, bus) -> None:
        """Desktop notifications expire with the configured duration."""
        with patch("melody.notifications.notify_desktop") as desktop:
            Notifier(bus, NotificationsConfig(duration_seconds=2.0)).success("Song added successfully!")

        desktop.assert_called_once()
        assert desktop.call_args.args[1] == "Song added successfully!"
        assert desktop.call_args.kwargs["expire_ms"] == 2000


class TestNotifyDesktop:
    """Tests for notify-send integration."""

    def test_skipped_without_notify_send(self) -> None:
        """Nothing runs when notify-send is missing."""
        with patch("melody.notifications.shutil.which", return_value=None), patch(
            "melody.notifications.subprocess.run"
        ) as run:
            notify_desktop("Melody", "hi")
        run.assert_not_called()

    def test_invokes_notify_send(self) -> None:
        """The expiry time is passed through."""
        with patch("melody.notifications.shutil.which", return_value="/usr/bin/notify-send"), patch(
            "melody.notifications.subprocess.run"
        ) as run:
            notify_desktop("Melody", "hi", expire_ms=1500)

        cmd = run.call_args.args[0]
        assert cmd[0] == "notify-send"
        assert cmd[cmd.index("--expire-time") + 1] == "1500"
        assert cmd[-2:] == ["Melody", "hi"]
