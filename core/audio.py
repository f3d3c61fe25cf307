"""
Audio cues for the Focus Flow timer.

Cues are synthesized, never loaded from files: each sound profile maps to
a deterministic schedule of ToneEvents which an AudioOutput renders.

Outputs:
    - WavAudioOutput: renders PCM in memory and plays it with the
      platform player (afplay, paplay/aplay, winsound)
    - NullAudioOutput: headless stub
"""

import io
import logging
import math
import os
import shutil
import struct
import subprocess
import sys
import tempfile
import time
import wave
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

from .models import (
    AutomationPoint, RampKind, SoundProfile, ToneEvent, Waveform
)

logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100

BASE_FREQUENCY = 523.25  # C5
DIGITAL_FREQUENCY = 880.0
NATURE_LOW = 1500.0
NATURE_HIGH = 2000.0

# Exponential ramps cannot reach zero; they settle on this fraction of
# full scale instead.
GAIN_FLOOR = 0.001


# ==================== Cue schedules ====================

def _bell(volume: float) -> Tuple[ToneEvent, ...]:
    floor = GAIN_FLOOR * volume
    primary = ToneEvent(
        waveform=Waveform.SINE,
        frequency=(
            AutomationPoint(0.0, BASE_FREQUENCY),
            AutomationPoint(2.0, BASE_FREQUENCY / 2, RampKind.EXPONENTIAL),
        ),
        start_offset=0.0,
        duration=2.5,
        gain_envelope=(
            AutomationPoint(0.0, 0.5 * volume),
            AutomationPoint(2.5, floor, RampKind.EXPONENTIAL),
        ),
    )
    overtone = ToneEvent(
        waveform=Waveform.TRIANGLE,
        frequency=(AutomationPoint(0.0, BASE_FREQUENCY * 1.5),),
        start_offset=0.0,
        duration=2.0,
        gain_envelope=(
            AutomationPoint(0.0, 0.1 * volume),
            AutomationPoint(1.5, floor, RampKind.EXPONENTIAL),
        ),
    )
    return (primary, overtone)


def _digital(volume: float) -> Tuple[ToneEvent, ...]:
    return (
        ToneEvent(
            waveform=Waveform.SQUARE,
            frequency=(
                AutomationPoint(0.0, DIGITAL_FREQUENCY),
                AutomationPoint(0.1, DIGITAL_FREQUENCY * 2),
            ),
            start_offset=0.0,
            duration=0.3,
            gain_envelope=(
                AutomationPoint(0.0, 0.1 * volume),
                AutomationPoint(0.1, 0.1 * volume),
                AutomationPoint(0.3, 0.0, RampKind.LINEAR),
            ),
        ),
    )


def _nature(volume: float) -> Tuple[ToneEvent, ...]:
    duration = 0.3
    return (
        ToneEvent(
            waveform=Waveform.SINE,
            frequency=(
                AutomationPoint(0.0, NATURE_LOW),
                AutomationPoint(duration / 2, NATURE_HIGH, RampKind.LINEAR),
                AutomationPoint(duration, NATURE_LOW, RampKind.LINEAR),
            ),
            start_offset=0.0,
            duration=duration,
            gain_envelope=(
                AutomationPoint(0.0, 0.0),
                AutomationPoint(duration / 3, 0.1 * volume, RampKind.LINEAR),
                AutomationPoint(duration, 0.0, RampKind.LINEAR),
            ),
        ),
    )


_PROFILES = {
    SoundProfile.BELL: _bell,
    SoundProfile.DIGITAL: _digital,
    SoundProfile.NATURE: _nature,
}


def build_cue(profile: SoundProfile, volume: float) -> Tuple[ToneEvent, ...]:
    """Return the tone schedule for *profile* at *volume* (clamped to 0..1)."""
    volume = min(1.0, max(0.0, float(volume)))
    return _PROFILES[SoundProfile.parse(profile)](volume)


# ==================== Sample rendering ====================

def _oscillator(waveform: Waveform, phase: float) -> float:
    s = math.sin(phase)
    if waveform is Waveform.SQUARE:
        return 1.0 if s >= 0 else -1.0
    if waveform is Waveform.TRIANGLE:
        return (2 / math.pi) * math.asin(s)
    return s


def render_samples(
    events: Sequence[ToneEvent],
    sample_rate: int = SAMPLE_RATE,
    delay: float = 0.0
) -> List[int]:
    """
    Mix *events* into signed 16-bit mono samples.

    All events share one timeline starting *delay* seconds into the
    buffer, so simultaneous tones stay phase-locked.
    """
    if not events:
        return []

    end = delay + max(e.end_offset for e in events)
    mix = [0.0] * int(math.ceil(end * sample_rate))

    for event in events:
        first = int(round((delay + event.start_offset) * sample_rate))
        count = int(round(event.duration * sample_rate))
        phase = 0.0
        for i in range(count):
            index = first + i
            if index >= len(mix):
                break
            t = i / sample_rate
            gain = event.gain_at(t)
            if gain:
                mix[index] += gain * _oscillator(event.waveform, phase)
            phase += 2 * math.pi * event.frequency_at(t) / sample_rate

    return [int(max(-1.0, min(1.0, v)) * 32767) for v in mix]


def samples_to_wav(samples: List[int], sample_rate: int = SAMPLE_RATE) -> bytes:
    """Wrap mono 16-bit samples in a WAV container."""
    buffer = io.BytesIO()
    with wave.open(buffer, 'wb') as wav:
        wav.setnchannels(1)  # Mono
        wav.setsampwidth(2)  # 16-bit
        wav.setframerate(sample_rate)
        wav.writeframes(struct.pack(f'<{len(samples)}h', *samples))
    return buffer.getvalue()


# ==================== Output ports ====================

class AudioOutput(ABC):
    """Abstract destination for rendered cues."""

    @abstractmethod
    def activate(self):
        """Prepare the backend; called from a user-initiated action."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        pass

    @abstractmethod
    def current_time(self) -> float:
        """Monotonic audio clock in seconds."""
        pass

    @abstractmethod
    def schedule(self, events: Sequence[ToneEvent], start_time: float):
        """Play *events* with offsets measured from *start_time*."""
        pass

    def prepare(self, events: Sequence[ToneEvent]):
        """Do any expensive rendering for *events* ahead of schedule()."""
        pass


class NullAudioOutput(AudioOutput):
    """Output for headless environments. Never available."""

    def activate(self):
        pass

    def is_available(self) -> bool:
        return False

    def current_time(self) -> float:
        return 0.0

    def schedule(self, events: Sequence[ToneEvent], start_time: float):
        pass


class WavAudioOutput(AudioOutput):
    """
    Cross-platform output.
    Renders each cue to a temporary WAV file and hands it to the
    platform's command-line player without waiting for playback.

    Cues passed to prepare() are rendered ahead of time, so scheduling
    them later only starts the player.
    """

    def __init__(self, sample_rate: int = SAMPLE_RATE):
        self.sample_rate = sample_rate
        self._epoch: Optional[float] = None
        self._files: Dict[Tuple[ToneEvent, ...], str] = {}
        self._delayed: List[str] = []

    def activate(self):
        if self._epoch is None:
            self._epoch = time.monotonic()
            logger.debug("Audio output activated")

    def is_available(self) -> bool:
        return self._epoch is not None and self._player_available()

    def current_time(self) -> float:
        if self._epoch is None:
            return 0.0
        return time.monotonic() - self._epoch

    def prepare(self, events: Sequence[ToneEvent]):
        events = tuple(events)
        if not events or events in self._files:
            return
        try:
            self._files[events] = self._write_wav(events, 0.0)
        except OSError as e:
            logger.warning("Could not pre-render sound: %s", e)
        else:
            logger.debug("Pre-rendered cue of %d tone(s)", len(events))

    def schedule(self, events: Sequence[ToneEvent], start_time: float):
        if not events:
            return
        delay = max(0.0, start_time - self.current_time())
        # A start less than one sample away plays immediately.
        if delay * self.sample_rate < 1:
            delay = 0.0
        try:
            self._play(self._wav_file(tuple(events), delay))
        except (OSError, RuntimeError, subprocess.SubprocessError) as e:
            logger.warning("Could not play sound: %s", e)

    def _wav_file(self, events: Tuple[ToneEvent, ...], delay: float) -> str:
        if delay > 0.0:
            path = self._write_wav(events, delay)
            self._delayed.append(path)
            return path
        # Cues are deterministic, so a rendered file can be replayed.
        if events not in self._files:
            self._files[events] = self._write_wav(events, 0.0)
        return self._files[events]

    def _write_wav(self, events: Tuple[ToneEvent, ...], delay: float) -> str:
        data = samples_to_wav(
            render_samples(events, self.sample_rate, delay), self.sample_rate
        )
        fd, path = tempfile.mkstemp(prefix='focus-flow-', suffix='.wav')
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
        return path

    @staticmethod
    def _player_available() -> bool:
        return sys.platform == 'win32' or find_player() is not None

    def _play(self, path: str):
        if sys.platform == 'win32':
            import winsound
            winsound.PlaySound(path, winsound.SND_FILENAME | winsound.SND_ASYNC)
            return

        player = find_player()
        if player is None:
            raise RuntimeError("no command-line audio player installed")
        # Fire and forget; the player outlives this call.
        subprocess.Popen(
            [player, path], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL
        )

    def cleanup(self):
        """Remove rendered temporary files."""
        for path in list(self._files.values()) + self._delayed:
            try:
                os.remove(path)
            except OSError:
                logger.debug("Temporary cue %s already removed", path)
        self._files.clear()
        self._delayed.clear()


# Command-line players in order of preference. Anything that is neither
# macOS nor Windows is treated as a PulseAudio/ALSA desktop.
PLAYERS = {
    'darwin': ('afplay',),
    'linux': ('paplay', 'aplay'),
}


def find_player() -> Optional[str]:
    """Return the first installed player for this platform, if any."""
    for name in PLAYERS.get(sys.platform, PLAYERS['linux']):
        if shutil.which(name):
            return name
    return None


def cue_length(events: Sequence[ToneEvent]) -> float:
    """Seconds from the first event's start until the last one ends."""
    return max((e.end_offset for e in events), default=0.0)


# ==================== Synthesizer ====================

class AudioSynthesizer:
    """
    Turns a sound profile into a cue and schedules it on an output.

    Rendering never raises for a missing or unavailable output: the cue
    is simply not produced.
    """

    def __init__(self, output: Optional[AudioOutput] = None):
        self.output = output

    def activate(self):
        if self.output is not None:
            self.output.activate()

    def prepare(self, profile: SoundProfile, volume: float, enabled: bool = True):
        """Render the cue for *profile* now so that playing it later is cheap."""
        if not enabled or self.output is None:
            return
        self.output.prepare(build_cue(profile, volume))

    def render_cue(
        self,
        profile: SoundProfile,
        volume: float,
        enabled: bool = True
    ) -> Tuple[ToneEvent, ...]:
        """
        Build and schedule the cue for *profile* at *volume*.

        Returns the scheduled events, or an empty tuple when sound is
        disabled or no output is available.
        """
        if not enabled or self.output is None or not self.output.is_available():
            return ()

        events = build_cue(profile, volume)
        # One reference instant for every event in the cue.
        start_time = self.output.current_time()
        self.output.schedule(events, start_time)
        return events
