#!/usr/bin/env python3
"""
Focus Flow - a Pomodoro-style focus timer.

Alternates focus and break intervals with:
- Configurable focus, short-break and long-break durations
- Long break after every Nth completed focus session
- Synthesized completion cues (bell, digital, nature)
- Desktop notifications through the system tray

Usage:
    pip install -e .
    focus-flow [--focus 25] [--short-break 5] [--long-break 15] [--interval 4]
    focus-flow --preview bell

License: MIT
"""

import argparse
import logging
import signal
import sys
import time

from PySide6.QtWidgets import QApplication
from PySide6.QtCore import Qt

from core.audio import AudioSynthesizer, WavAudioOutput, cue_length
from core.models import SoundProfile, TimerConfig
from core.notifications import TrayNotifier
from core.storage import ConfigStore
from core.timer_engine import TimerEngine

logger = logging.getLogger("focus_flow")

STYLESHEET = """
    QMainWindow, QWidget {
        background-color: #0f172a;
        color: #e0e0e0;
    }
    QLabel {
        color: #e0e0e0;
        font-size: 13px;
    }
    QPushButton {
        background-color: #1e293b;
        color: #ffffff;
        border: 1px solid #334155;
        border-radius: 8px;
        font-size: 14px;
        font-weight: bold;
    }
    QPushButton:hover {
        background-color: #334155;
    }
    QMenu {
        background-color: #1e293b;
        color: #e0e0e0;
        border: 1px solid #334155;
        padding: 5px;
    }
    QMenu::item:selected {
        background-color: #059669;
        color: #ffffff;
    }
"""


def setup_exception_handling():
    """Log unhandled exceptions before the default hook runs."""
    def exception_hook(exctype, value, traceback):
        logger.critical("Unhandled exception: %s: %s", exctype.__name__, value)
        sys.__excepthook__(exctype, value, traceback)

    sys.excepthook = exception_hook


def setup_signal_handlers(app: QApplication):
    """Set up signal handlers for graceful shutdown."""
    def signal_handler(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        app.quit()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Focus Flow Pomodoro timer")
    parser.add_argument("--focus", type=int, help="Focus duration in minutes")
    parser.add_argument("--short-break", type=int, help="Short break in minutes")
    parser.add_argument("--long-break", type=int, help="Long break in minutes")
    parser.add_argument("--interval", type=int, help="Focus sessions per long break")
    parser.add_argument(
        "--sound", choices=[p.value for p in SoundProfile],
        help="Completion sound profile"
    )
    parser.add_argument("--volume", type=float, help="Cue volume, 0.0 to 1.0")
    parser.add_argument(
        "--preview", choices=[p.value for p in SoundProfile],
        help="Play a sound profile and exit"
    )
    parser.add_argument(
        "--no-save", action="store_true",
        help="Do not write command-line overrides to the settings store"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def apply_overrides(config: TimerConfig, args) -> TimerConfig:
    """Return *config* with any command-line overrides applied."""
    overrides = {
        "focus_minutes": args.focus,
        "short_break_minutes": args.short_break,
        "long_break_minutes": args.long_break,
        "long_break_interval": args.interval,
        "sound_profile": args.sound,
        "volume": args.volume,
    }
    changes = {k: v for k, v in overrides.items() if v is not None}
    return config.updated(**changes) if changes else config


def main(argv=None):
    """Main entry point for the Focus Flow application."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    setup_exception_handling()

    store = ConfigStore()
    stored = store.load()
    config = apply_overrides(stored, args)
    if config != stored and not args.no_save:
        store.save(config)

    audio = WavAudioOutput()
    synthesizer = AudioSynthesizer(audio)

    if args.preview:
        synthesizer.activate()
        events = synthesizer.render_cue(SoundProfile.parse(args.preview), config.volume)
        if not events:
            logger.warning("No audio output available")
            return 0
        # Asynchronous playback ends with the process on some platforms.
        time.sleep(cue_length(events))
        audio.cleanup()
        return 0

    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication(sys.argv[:1])
    app.setApplicationName("Focus Flow")
    app.setApplicationDisplayName("Focus Flow")
    app.setOrganizationName("FocusFlow")
    app.setStyle("Fusion")
    app.setStyleSheet(STYLESHEET)

    setup_signal_handlers(app)

    notifier = TrayNotifier()
    engine = TimerEngine(config, synthesizer=synthesizer, notifier=notifier)

    from ui.timer_window import TimerWindow
    window = TimerWindow(engine, notifier=notifier, audio=audio)
    window.show()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
