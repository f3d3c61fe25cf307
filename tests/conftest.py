"""Shared fixtures and test doubles."""

from typing import List, Sequence, Tuple

import pytest
from PySide6.QtCore import QCoreApplication

from core.audio import AudioOutput, AudioSynthesizer
from core.clock import ManualClock
from core.models import TimerConfig, ToneEvent
from core.notifications import Notifier
from core.timer_engine import TimerEngine


@pytest.fixture(scope="session", autouse=True)
def qapp() -> QCoreApplication:
    """A single Qt application object for the whole run."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


class RecordingOutput(AudioOutput):
    """Audio output that remembers what it was asked to play."""

    def __init__(self, available: bool = True, now: float = 12.5) -> None:
        self.available = available
        self.now = now
        self.activations = 0
        self.scheduled: List[Tuple[Tuple[ToneEvent, ...], float]] = []
        self.prepared: List[Tuple[ToneEvent, ...]] = []

    def activate(self) -> None:
        self.activations += 1

    def is_available(self) -> bool:
        return self.available

    def current_time(self) -> float:
        return self.now

    def schedule(self, events: Sequence[ToneEvent], start_time: float) -> None:
        self.scheduled.append((tuple(events), start_time))

    def prepare(self, events: Sequence[ToneEvent]) -> None:
        self.prepared.append(tuple(events))


class RecordingNotifier(Notifier):
    """Notifier that records every alert."""

    def __init__(self, allowed: bool = True) -> None:
        self.allowed = allowed
        self.sent: List[Tuple[str, str]] = []

    def can_notify(self) -> bool:
        return self.allowed

    def notify(self, title: str, body: str) -> None:
        self.sent.append((title, body))


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture()
def output() -> RecordingOutput:
    return RecordingOutput()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def make_engine(clock, output, notifier):
    """Factory for engines wired to the recording doubles."""

    def _make(**config_values) -> TimerEngine:
        return TimerEngine(
            TimerConfig(**config_values),
            clock=clock,
            synthesizer=AudioSynthesizer(output),
            notifier=notifier,
        )

    return _make
