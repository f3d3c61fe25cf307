"""
Notification module for the Focus Flow timer.
Dispatches desktop alerts on interval completion through a Notifier port.
"""

import logging
import shutil
import subprocess
import sys
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from PySide6.QtWidgets import QSystemTrayIcon

from .models import TimerConfig

logger = logging.getLogger(__name__)

APP_NAME = "Focus Flow"
NATIVE_TIMEOUT_S = 5

SESSION_COMPLETE = ("Great Job!", "Focus session completed.")
BREAK_OVER = ("Break Over", "Time to focus again.")


class Notifier(ABC):
    """Abstract delivery backend for desktop notifications."""

    @abstractmethod
    def can_notify(self) -> bool:
        """Whether notifications can currently be shown."""
        pass

    @abstractmethod
    def notify(self, title: str, body: str):
        pass


class NullNotifier(Notifier):
    """Notifier for environments without a desktop."""

    def can_notify(self) -> bool:
        return False

    def notify(self, title: str, body: str):
        pass


class TrayNotifier(Notifier):
    """
    Shows notifications as system tray balloons.
    Falls back to native OS commands when no tray icon is available.
    """

    MESSAGE_TIMEOUT_MS = 3000

    def __init__(self, tray_icon: Optional[QSystemTrayIcon] = None):
        self._tray_icon = tray_icon

    def set_tray_icon(self, tray_icon: QSystemTrayIcon):
        """Set the system tray icon for showing notifications."""
        self._tray_icon = tray_icon

    def can_notify(self) -> bool:
        return self._tray_available() or native_command("", "") is not None

    def notify(self, title: str, body: str):
        if self._tray_available():
            self._tray_icon.showMessage(
                title, body,
                QSystemTrayIcon.MessageIcon.Information,
                self.MESSAGE_TIMEOUT_MS
            )
            return

        command = native_command(title, body)
        if command is None:
            logger.debug("No notification backend on %s", sys.platform)
            return
        try:
            subprocess.run(command, capture_output=True, timeout=NATIVE_TIMEOUT_S)
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("Could not show notification: %s", e)

    def _tray_available(self) -> bool:
        return (
            self._tray_icon is not None
            and QSystemTrayIcon.isSystemTrayAvailable()
        )


def native_command(title: str, body: str) -> Optional[List[str]]:
    """Return the command that raises a desktop alert, or None if unsupported."""
    if sys.platform == 'darwin':
        script = (
            f"display notification {_applescript_string(body)} "
            f"with title {_applescript_string(title)}"
        )
        return ['osascript', '-e', script]
    if sys.platform.startswith('linux') and shutil.which('notify-send'):
        return ['notify-send', f'--app-name={APP_NAME}', title, body]
    return None


def _applescript_string(text: str) -> str:
    escaped = text.replace('\\', '\\\\').replace('"', '\\"')
    return f'"{escaped}"'


class NotificationDispatcher:
    """
    Sends completion alerts when the configuration allows it.

    `config_provider` is called on every dispatch so toggling
    notifications takes effect immediately.
    """

    def __init__(
        self,
        notifier: Optional[Notifier],
        config_provider: Callable[[], TimerConfig]
    ):
        self.notifier = notifier
        self._config_provider = config_provider

    def notify(self, title: str, body: str) -> bool:
        """Forward an alert to the notifier. Returns True if it was sent."""
        if not self._config_provider().notifications_enabled:
            return False
        if self.notifier is None or not self.notifier.can_notify():
            return False
        self.notifier.notify(title, body)
        return True

    def session_complete(self) -> bool:
        return self.notify(*SESSION_COMPLETE)

    def break_over(self) -> bool:
        return self.notify(*BREAK_OVER)
