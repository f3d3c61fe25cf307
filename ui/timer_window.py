"""
Main window for the Focus Flow timer.
Observes the timer engine and renders the countdown, controls and stats.
"""

from typing import List, Optional
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
    QSystemTrayIcon, QMenu, QApplication
)
from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QIcon, QAction, QCloseEvent, QFont, QPixmap, QPainter, QColor

from core.audio import WavAudioOutput
from core.models import Mode, Stats, TimerState
from core.notifications import TrayNotifier
from core.timer_engine import TimerEngine

MODE_COLORS = {
    Mode.FOCUS: "#34d399",
    Mode.SHORT_BREAK: "#818cf8",
    Mode.LONG_BREAK: "#fb7185",
}

# Interval progress dots: (colour, width in px) per dot kind.
DOT_STYLES = {
    "done": (MODE_COLORS[Mode.FOCUS], 32),
    "current": ("rgba(255, 255, 255, 0.4)", 32),
    "pending": ("rgba(255, 255, 255, 0.1)", 8),
}


def interval_dots(position: int, interval: int, focus_running: bool) -> List[str]:
    """
    Return one dot kind per focus session in the long-break interval.

    Sessions before *position* are done. The session at *position* is
    highlighted only while a focus interval is counting down.
    """
    dots = []
    for i in range(interval):
        if i < position:
            dots.append("done")
        elif i == position and focus_running:
            dots.append("current")
        else:
            dots.append("pending")
    return dots


def create_app_icon() -> QIcon:
    """Create a simple app icon programmatically."""
    icon = QIcon()

    for size in [16, 32, 48, 64]:
        pixmap = QPixmap(size, size)
        pixmap.fill(Qt.GlobalColor.transparent)

        painter = QPainter(pixmap)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QColor(MODE_COLORS[Mode.FOCUS]))
        margin = size // 8
        painter.drawEllipse(margin, margin, size - 2*margin, size - 2*margin)

        inner_margin = size // 4
        painter.setBrush(QColor("white"))
        painter.drawEllipse(
            inner_margin, inner_margin,
            size - 2*inner_margin, size - 2*inner_margin
        )
        painter.end()
        icon.addPixmap(pixmap)

    return icon


class TimerWindow(QMainWindow):
    """
    Single-page timer window with a system tray icon.
    """

    def __init__(
        self,
        engine: TimerEngine,
        notifier: Optional[TrayNotifier] = None,
        audio: Optional[WavAudioOutput] = None
    ):
        super().__init__()

        self.engine = engine
        self.notifier = notifier
        self.audio = audio

        self.setMinimumSize(420, 460)
        self.app_icon = create_app_icon()
        self.setWindowIcon(self.app_icon)

        self._setup_ui()
        self._setup_tray()
        self._connect_signals()

        self._on_state_changed(self.engine.state)
        self._on_stats_changed(self.engine.stats)

    def _setup_ui(self):
        """Set up the UI components."""
        central = QWidget()
        self.setCentralWidget(central)

        layout = QVBoxLayout(central)
        layout.setSpacing(20)
        layout.setContentsMargins(30, 30, 30, 30)

        self.mode_label = QLabel()
        self.mode_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        mode_font = QFont()
        mode_font.setPointSize(16)
        mode_font.setBold(True)
        self.mode_label.setFont(mode_font)
        layout.addWidget(self.mode_label)

        self.time_label = QLabel("00:00")
        self.time_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        time_font = QFont()
        time_font.setPointSize(72)
        self.time_label.setFont(time_font)
        self.time_label.setMinimumHeight(120)
        layout.addWidget(self.time_label)

        self.status_label = QLabel()
        self.status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.status_label.setStyleSheet("color: #a0a0a0; font-size: 12px;")
        layout.addWidget(self.status_label)

        # Controls
        button_layout = QHBoxLayout()
        button_layout.setSpacing(15)

        self.reset_btn = QPushButton("Reset")
        self.reset_btn.setMinimumSize(100, 45)
        button_layout.addWidget(self.reset_btn)

        self.toggle_btn = QPushButton("Start")
        self.toggle_btn.setMinimumSize(120, 45)
        button_layout.addWidget(self.toggle_btn)

        self.cycle_label = QLabel()
        self.cycle_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.cycle_label.setMinimumWidth(70)
        button_layout.addWidget(self.cycle_label)

        layout.addLayout(button_layout)

        self.dots_layout = QHBoxLayout()
        self.dots_layout.setSpacing(12)
        self.dots_layout.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._dots: List[QLabel] = []
        layout.addLayout(self.dots_layout)

        self.stats_label = QLabel()
        self.stats_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.stats_label.setStyleSheet("color: #808080; font-size: 12px;")
        layout.addWidget(self.stats_label)

        layout.addStretch()

    def _setup_tray(self):
        """Set up system tray icon."""
        if not QSystemTrayIcon.isSystemTrayAvailable():
            return

        self.tray_icon = QSystemTrayIcon(self.app_icon, self)
        self.tray_icon.setToolTip("Focus Flow")

        tray_menu = QMenu()

        show_action = QAction("Show", self)
        show_action.triggered.connect(self._show_window)
        tray_menu.addAction(show_action)

        tray_menu.addSeparator()

        self.tray_toggle_action = QAction("Start", self)
        self.tray_toggle_action.triggered.connect(self.engine.toggle)
        tray_menu.addAction(self.tray_toggle_action)

        reset_action = QAction("Reset", self)
        reset_action.triggered.connect(self.engine.reset)
        tray_menu.addAction(reset_action)

        tray_menu.addSeparator()

        quit_action = QAction("Quit", self)
        quit_action.triggered.connect(self._quit_app)
        tray_menu.addAction(quit_action)

        self.tray_icon.setContextMenu(tray_menu)
        self.tray_icon.activated.connect(self._on_tray_activated)
        self.tray_icon.show()

        if self.notifier is not None:
            self.notifier.set_tray_icon(self.tray_icon)

    def _connect_signals(self):
        """Connect engine signals and buttons."""
        self.engine.state_changed.connect(self._on_state_changed)
        self.engine.stats_changed.connect(self._on_stats_changed)

        self.toggle_btn.clicked.connect(self.engine.toggle)
        self.reset_btn.clicked.connect(self.engine.reset)

    @Slot(TimerState)
    def _on_state_changed(self, state: TimerState):
        """Re-render everything derived from the timer state."""
        color = MODE_COLORS[state.mode]
        self.setWindowTitle(self.engine.window_title())
        self.mode_label.setText(state.mode.label.upper())
        self.mode_label.setStyleSheet(f"color: {color};")
        self.time_label.setText(state.format_remaining())
        self.time_label.setStyleSheet(
            f"color: {'#ffffff' if state.is_active else '#c0c0c0'};"
        )
        self.status_label.setText(
            f"{'RUNNING' if state.is_active else 'PAUSED'}"
            f"  ({self.engine.progress:.0f}%)"
        )
        self.toggle_btn.setText("Pause" if state.is_active else "Start")

        if hasattr(self, 'tray_icon'):
            self.tray_toggle_action.setText("Pause" if state.is_active else "Start")
            self.tray_icon.setToolTip(f"Focus Flow - {self.engine.window_title()}")

        self._render_cycle()

    @Slot(Stats)
    def _on_stats_changed(self, stats: Stats):
        self._render_cycle()
        self.stats_label.setText(
            f"{stats.completed_cycles} cycles completed, "
            f"{stats.total_focus_minutes} focus minutes"
        )

    def _render_cycle(self):
        """Update the cycle counter and the interval dots."""
        state = self.engine.state
        config = self.engine.config
        self.cycle_label.setText(
            f"CYCLE\n{self.engine.stats.completed_cycles}/{config.long_break_interval}"
        )

        kinds = interval_dots(
            self.engine.tracker.cycle_position(config),
            config.long_break_interval,
            state.is_active and not state.mode.is_break,
        )
        while len(self._dots) < len(kinds):
            dot = QLabel()
            dot.setFixedHeight(8)
            self.dots_layout.addWidget(dot)
            self._dots.append(dot)
        while len(self._dots) > len(kinds):
            dot = self._dots.pop()
            self.dots_layout.removeWidget(dot)
            dot.deleteLater()

        for dot, kind in zip(self._dots, kinds):
            color, width = DOT_STYLES[kind]
            dot.setFixedWidth(width)
            dot.setStyleSheet(f"background-color: {color}; border-radius: 4px;")

    @Slot(QSystemTrayIcon.ActivationReason)
    def _on_tray_activated(self, reason: QSystemTrayIcon.ActivationReason):
        """Handle tray icon activation."""
        if reason == QSystemTrayIcon.ActivationReason.DoubleClick:
            self._show_window()

    @Slot()
    def _show_window(self):
        """Show and bring window to front."""
        self.show()
        self.raise_()
        self.activateWindow()

    @Slot()
    def _quit_app(self):
        """Quit the application."""
        self._cleanup()
        QApplication.quit()

    def closeEvent(self, event: QCloseEvent):
        """Minimize to tray while a countdown is running."""
        if self.engine.is_active and hasattr(self, 'tray_icon') and self.tray_icon.isVisible():
            event.ignore()
            self.hide()
            self.tray_icon.showMessage(
                "Focus Flow",
                "Timer still running. Click tray icon to show window.",
                QSystemTrayIcon.MessageIcon.Information,
                2000
            )
            return

        self._cleanup()
        event.accept()

    def _cleanup(self):
        """Clean up resources before exit."""
        self.engine.cleanup()
        if self.audio is not None:
            self.audio.cleanup()
        if hasattr(self, 'tray_icon'):
            self.tray_icon.hide()
