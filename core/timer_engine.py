"""
Timer engine for the Focus Flow timer.
Implements the focus/break state machine on top of a one-second clock.
"""

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from .audio import AudioSynthesizer
from .clock import Clock, QtClock
from .cycle_tracker import CycleTracker
from .models import Mode, SoundProfile, Stats, TimerConfig, TimerState
from .notifications import NotificationDispatcher, Notifier

logger = logging.getLogger(__name__)


class TimerEngine(QObject):
    """
    Core timer engine implementing a state machine.

    States are (mode, running) pairs: FOCUS, SHORT_BREAK and LONG_BREAK,
    each idle or running. The machine starts in FOCUS idle and cycles
    indefinitely.

    Signals:
        state_changed: Emitted after every mutation with a TimerState copy
        interval_completed: Emitted once per zero crossing with the finished Mode
        stats_changed: Emitted after a focus completion with the new Stats
    """

    state_changed = Signal(TimerState)
    interval_completed = Signal(Mode)
    stats_changed = Signal(Stats)

    def __init__(
        self,
        config: Optional[TimerConfig] = None,
        clock: Optional[Clock] = None,
        synthesizer: Optional[AudioSynthesizer] = None,
        notifier: Optional[Notifier] = None,
        tracker: Optional[CycleTracker] = None,
        parent: Optional[QObject] = None
    ):
        """
        Initialize the timer engine.

        Args:
            config: Initial configuration; defaults are used when omitted.
            clock: Tick source. A QtClock is created when omitted.
            synthesizer: Plays completion cues; silent when omitted.
            notifier: Desktop notification backend; none when omitted.
            tracker: Cycle tracker holding this session's stats.
            parent: Optional Qt parent object.
        """
        super().__init__(parent)

        self._config = config if config is not None else TimerConfig()
        self._clock = clock if clock is not None else QtClock(self)
        self._clock.set_callback(self.tick)
        self._synthesizer = synthesizer if synthesizer is not None else AudioSynthesizer()
        self._tracker = tracker if tracker is not None else CycleTracker()
        self._dispatcher = NotificationDispatcher(notifier, lambda: self._config)

        self._state = TimerState(
            mode=Mode.FOCUS,
            remaining_seconds=self._config.seconds_for(Mode.FOCUS),
            is_active=False,
        )
        self._prepare_cue()

    # -- read-only views ---------------------------------------------------

    @property
    def state(self) -> TimerState:
        """Copy of the current timer state."""
        return self._state.copy()

    @property
    def config(self) -> TimerConfig:
        return self._config

    @property
    def stats(self) -> Stats:
        return self._tracker.stats

    @property
    def tracker(self) -> CycleTracker:
        return self._tracker

    @property
    def mode(self) -> Mode:
        return self._state.mode

    @property
    def remaining_seconds(self) -> int:
        return self._state.remaining_seconds

    @property
    def is_active(self) -> bool:
        return self._state.is_active

    @property
    def progress(self) -> float:
        """Return progress of the current interval as percentage (0-100)."""
        total = self._config.seconds_for(self._state.mode)
        if total == 0:
            return 0.0
        return ((total - self._state.remaining_seconds) / total) * 100.0

    def window_title(self) -> str:
        return f"{self._state.format_remaining()} - {self._state.mode.label}"

    # -- controls ----------------------------------------------------------

    def start(self):
        """Start counting down. Also unlocks audio for later cues."""
        self._synthesizer.activate()
        if self._state.remaining_seconds <= 0 or self._state.is_active:
            return
        self._set_active(True)
        self._emit_state()

    def pause(self):
        """Stop counting down, keeping the remaining time."""
        if not self._state.is_active:
            return
        self._set_active(False)
        self._emit_state()

    def toggle(self):
        """Start when idle, pause when running."""
        if self._state.is_active:
            self.pause()
        else:
            self.start()

    def reset(self):
        """Stop and refill the current mode's full duration."""
        full = self._config.seconds_for(self._state.mode)
        if not self._state.is_active and self._state.remaining_seconds == full:
            return
        self._set_active(False)
        self._state.remaining_seconds = full
        self._emit_state()

    def switch_mode(self, new_mode: Mode, auto_start: bool = False):
        """Enter *new_mode* with its full duration."""
        logger.debug("Switching to %s (auto_start=%s)", new_mode.value, auto_start)
        self._state.mode = new_mode
        self._state.remaining_seconds = self._config.seconds_for(new_mode)
        self._set_active(auto_start)
        self._emit_state()

    def update_config(self, config: TimerConfig, reset: bool = False):
        """
        Replace the configuration.

        The running countdown keeps its remaining time unless *reset* is
        set; it is only shortened when it would exceed the new duration.
        """
        # Private validated copy.
        self._config = config.updated()
        self._prepare_cue()
        if reset:
            self._set_active(False)
            self._state.remaining_seconds = self._config.seconds_for(self._state.mode)
        else:
            self._state.remaining_seconds = min(
                self._state.remaining_seconds,
                self._config.seconds_for(self._state.mode)
            )
        self._emit_state()

    def preview_sound(self, profile: SoundProfile, volume: Optional[float] = None):
        """Play *profile* without changing the stored configuration."""
        self._synthesizer.activate()
        if volume is None:
            volume = self._config.volume
        return self._synthesizer.render_cue(profile, volume)

    # -- clock -------------------------------------------------------------

    def tick(self):
        """Advance the countdown by one second."""
        if not self._state.is_active:
            return

        if self._state.remaining_seconds > 0:
            self._state.remaining_seconds -= 1

        if self._state.remaining_seconds == 0:
            self._on_complete()
        else:
            self._emit_state()

    def _on_complete(self):
        """Handle completion of the current interval."""
        # Leave the running state first so a stray tick cannot complete twice.
        self._set_active(False)
        self._emit_state()
        completed = self._state.mode
        logger.info("%s interval completed", completed.label)
        self.interval_completed.emit(completed)

        config = self._config
        self._synthesizer.render_cue(
            config.sound_profile, config.volume, enabled=config.sound_enabled
        )

        if completed is Mode.FOCUS:
            self._dispatcher.session_complete()
            transition = self._tracker.on_focus_completed(config)
            self.stats_changed.emit(transition.stats)
        else:
            self._dispatcher.break_over()
            transition = self._tracker.on_break_completed(config)

        self.switch_mode(transition.next_mode, transition.auto_start)

    # -- helpers -----------------------------------------------------------

    def _set_active(self, active: bool):
        self._state.is_active = active
        if active:
            self._clock.start()
        else:
            self._clock.stop()

    def _emit_state(self):
        self.state_changed.emit(self._state.copy())

    def _prepare_cue(self):
        # Completion runs on the tick path, so render the cue beforehand.
        config = self._config
        self._synthesizer.prepare(
            config.sound_profile, config.volume, enabled=config.sound_enabled
        )

    def cleanup(self):
        """Stop the clock. Call before application exit."""
        self._set_active(False)
