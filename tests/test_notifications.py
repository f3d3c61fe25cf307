"""Tests for the notification dispatcher and notifier backends."""

import subprocess
from unittest.mock import ANY, MagicMock, patch

from core.models import TimerConfig
from core.notifications import (
    BREAK_OVER, SESSION_COMPLETE, NotificationDispatcher, NullNotifier,
    TrayNotifier, native_command,
)

from conftest import RecordingNotifier


class TestNotificationDispatcher:
    def test_session_complete_message(self) -> None:
        notifier = RecordingNotifier()
        dispatcher = NotificationDispatcher(notifier, TimerConfig)
        assert dispatcher.session_complete() is True
        assert notifier.sent == [SESSION_COMPLETE]

    def test_break_over_message(self) -> None:
        notifier = RecordingNotifier()
        NotificationDispatcher(notifier, TimerConfig).break_over()
        assert notifier.sent == [("Break Over", "Time to focus again.")]

    def test_disabled_never_calls_notifier(self) -> None:
        notifier = MagicMock()
        dispatcher = NotificationDispatcher(
            notifier, lambda: TimerConfig(notifications_enabled=False)
        )
        assert dispatcher.session_complete() is False
        notifier.can_notify.assert_not_called()
        notifier.notify.assert_not_called()

    def test_permission_denied_is_silent(self) -> None:
        notifier = RecordingNotifier(allowed=False)
        assert NotificationDispatcher(notifier, TimerConfig).break_over() is False
        assert notifier.sent == []

    def test_missing_notifier_is_silent(self) -> None:
        assert NotificationDispatcher(None, TimerConfig).notify("t", "b") is False

    def test_config_is_read_on_each_dispatch(self) -> None:
        notifier = RecordingNotifier()
        config = {"value": TimerConfig()}
        dispatcher = NotificationDispatcher(notifier, lambda: config["value"])
        dispatcher.session_complete()
        config["value"] = TimerConfig(notifications_enabled=False)
        dispatcher.session_complete()
        assert notifier.sent == [SESSION_COMPLETE]


class TestNullNotifier:
    def test_cannot_notify(self) -> None:
        assert NullNotifier().can_notify() is False


class TestTrayNotifier:
    def test_uses_tray_balloon_when_available(self) -> None:
        icon = MagicMock()
        notifier = TrayNotifier(icon)
        with patch("core.notifications.QSystemTrayIcon") as mock_tray:
            mock_tray.isSystemTrayAvailable.return_value = True
            assert notifier.can_notify()
            notifier.notify(*BREAK_OVER)
        icon.showMessage.assert_called_once_with(
            "Break Over", "Time to focus again.", ANY, TrayNotifier.MESSAGE_TIMEOUT_MS
        )

    def test_linux_falls_back_to_notify_send(self) -> None:
        notifier = TrayNotifier()
        with patch("core.notifications.sys") as mock_sys, \
                patch("core.notifications.shutil.which", return_value="/usr/bin/notify-send"), \
                patch("core.notifications.subprocess.run") as mock_run:
            mock_sys.platform = "linux"
            assert notifier.can_notify()
            notifier.notify("Great Job!", "Focus session completed.")
        mock_run.assert_called_once_with(
            ["notify-send", "--app-name=Focus Flow", "Great Job!", "Focus session completed."],
            capture_output=True,
            timeout=5,
        )

    def test_native_failure_is_absorbed(self) -> None:
        notifier = TrayNotifier()
        with patch("core.notifications.sys") as mock_sys, \
                patch("core.notifications.shutil.which", return_value="/usr/bin/notify-send"), \
                patch("core.notifications.subprocess.run") as mock_run:
            mock_sys.platform = "linux"
            mock_run.side_effect = subprocess.TimeoutExpired("notify-send", 5)
            notifier.notify("title", "body")

    def test_linux_without_notify_send(self) -> None:
        with patch("core.notifications.sys") as mock_sys, \
                patch("core.notifications.shutil.which", return_value=None), \
                patch("core.notifications.subprocess.run") as mock_run:
            mock_sys.platform = "linux"
            notifier = TrayNotifier()
            assert notifier.can_notify() is False
            notifier.notify("title", "body")
        mock_run.assert_not_called()

    def test_unsupported_platform_without_tray(self) -> None:
        with patch("core.notifications.sys") as mock_sys:
            mock_sys.platform = "win32"
            assert TrayNotifier().can_notify() is False


class TestNativeCommand:
    def test_macos_quotes_text_for_applescript(self) -> None:
        with patch("core.notifications.sys") as mock_sys:
            mock_sys.platform = "darwin"
            command = native_command('Say "hi"', "back\\slash")
        assert command == [
            "osascript", "-e",
            'display notification "back\\\\slash" with title "Say \\"hi\\""',
        ]

    def test_windows_has_no_command(self) -> None:
        with patch("core.notifications.sys") as mock_sys:
            mock_sys.platform = "win32"
            assert native_command("title", "body") is None
