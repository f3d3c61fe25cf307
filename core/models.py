"""
Data models for the Focus Flow timer.
Uses dataclasses for clean, type-annotated data structures.
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Tuple


class Mode(Enum):
    """Interval kinds the timer cycles through."""
    FOCUS = "focus"
    SHORT_BREAK = "short"
    LONG_BREAK = "long"

    @property
    def label(self) -> str:
        return MODE_LABELS[self]

    @property
    def is_break(self) -> bool:
        return self is not Mode.FOCUS


MODE_LABELS = {
    Mode.FOCUS: "Focus Flow",
    Mode.SHORT_BREAK: "Short Break",
    Mode.LONG_BREAK: "Long Break",
}


class SoundProfile(Enum):
    """Built-in completion cues."""
    BELL = "bell"
    DIGITAL = "digital"
    NATURE = "nature"

    @classmethod
    def parse(cls, value) -> "SoundProfile":
        """Return the profile for *value*, falling back to BELL."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.BELL


def _clamp(value, low, high=None):
    if high is not None and value > high:
        return high
    if value < low:
        return low
    return value


@dataclass
class TimerConfig:
    """
    User-adjustable timer settings.

    Every instance is valid: numeric fields are clamped in __post_init__,
    so `updated()` (built on dataclasses.replace) always yields a full,
    validated replacement.
    """
    focus_minutes: int = 25
    short_break_minutes: int = 5
    long_break_minutes: int = 15
    auto_start_breaks: bool = True
    auto_start_focus: bool = False
    long_break_interval: int = 4
    sound_enabled: bool = True
    volume: float = 0.5
    sound_profile: SoundProfile = SoundProfile.BELL
    notifications_enabled: bool = True

    def __post_init__(self):
        """Clamp values into their valid ranges."""
        self.focus_minutes = _clamp(_to_int(self.focus_minutes), 1)
        self.short_break_minutes = _clamp(_to_int(self.short_break_minutes), 1)
        self.long_break_minutes = _clamp(_to_int(self.long_break_minutes), 1)
        self.long_break_interval = _clamp(_to_int(self.long_break_interval), 1)
        self.volume = _clamp(_to_float(self.volume), 0.0, 1.0)
        self.sound_profile = SoundProfile.parse(self.sound_profile)
        self.auto_start_breaks = bool(self.auto_start_breaks)
        self.auto_start_focus = bool(self.auto_start_focus)
        self.sound_enabled = bool(self.sound_enabled)
        self.notifications_enabled = bool(self.notifications_enabled)

    def minutes_for(self, mode: Mode) -> int:
        """Return the configured length of *mode* in minutes."""
        if mode is Mode.FOCUS:
            return self.focus_minutes
        if mode is Mode.SHORT_BREAK:
            return self.short_break_minutes
        return self.long_break_minutes

    def seconds_for(self, mode: Mode) -> int:
        return self.minutes_for(mode) * 60

    def updated(self, **changes) -> "TimerConfig":
        """Return a validated copy with *changes* applied."""
        return replace(self, **changes)


def _to_int(value) -> int:
    # Non-numeric or non-finite input collapses to the minimum and is
    # clamped afterwards.
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0


def _to_float(value) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


@dataclass(frozen=True)
class Stats:
    """Completed-focus statistics for the current process."""
    completed_cycles: int = 0
    total_focus_minutes: int = 0


@dataclass
class TimerState:
    """
    Current countdown state.
    Owned and mutated only by TimerEngine; observers receive copies.
    """
    mode: Mode = Mode.FOCUS
    remaining_seconds: int = 0
    is_active: bool = False

    def copy(self) -> "TimerState":
        return replace(self)

    def format_remaining(self) -> str:
        """Format remaining time as MM:SS."""
        minutes, seconds = format_time(self.remaining_seconds)
        return f"{minutes}:{seconds}"


def format_time(seconds: int) -> Tuple[str, str]:
    """Split *seconds* into zero-padded (minutes, seconds) strings."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}", f"{seconds % 60:02d}"


# ==================== Audio schedule ====================

class Waveform(Enum):
    """Oscillator shapes available to a tone."""
    SINE = "sine"
    TRIANGLE = "triangle"
    SQUARE = "square"


class RampKind(Enum):
    """How a parameter reaches an automation point."""
    SET = "set"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class AutomationPoint:
    """A parameter value reached at `time` seconds after the tone starts."""
    time: float
    value: float
    ramp: RampKind = RampKind.SET


@dataclass(frozen=True)
class ToneEvent:
    """
    A single oscillator voice in a cue.

    `frequency` and `gain_envelope` are automation timelines relative to
    the tone's own start. A point with a LINEAR or EXPONENTIAL ramp
    describes the segment that ends at that point; a SET point holds the
    previous value until its time and then steps.
    """
    waveform: Waveform
    frequency: Tuple[AutomationPoint, ...]
    start_offset: float
    duration: float
    gain_envelope: Tuple[AutomationPoint, ...] = field(default_factory=tuple)

    @property
    def end_offset(self) -> float:
        return self.start_offset + self.duration

    @property
    def peak_gain(self) -> float:
        return max((p.value for p in self.gain_envelope), default=0.0)

    def frequency_at(self, t: float) -> float:
        """Frequency in Hz at *t* seconds after the tone starts."""
        return evaluate_automation(self.frequency, t)

    def gain_at(self, t: float) -> float:
        """Gain at *t* seconds after the tone starts."""
        return evaluate_automation(self.gain_envelope, t)


def evaluate_automation(points: Tuple[AutomationPoint, ...], t: float) -> float:
    """Evaluate an automation timeline at time *t*."""
    if not points:
        return 0.0

    value = points[0].value
    prev_time = points[0].time
    if t < prev_time:
        return value

    for point in points[1:]:
        if t < point.time:
            if point.ramp is RampKind.SET:
                return value
            span = point.time - prev_time
            fraction = (t - prev_time) / span if span > 0 else 1.0
            return _interpolate(value, point.value, fraction, point.ramp)
        value = point.value
        prev_time = point.time
    return value


def _interpolate(start: float, end: float, fraction: float, ramp: RampKind) -> float:
    if ramp is RampKind.EXPONENTIAL and start > 0 and end > 0:
        return start * (end / start) ** fraction
    # Exponential ramps touching zero degrade to linear.
    return start + (end - start) * fraction
