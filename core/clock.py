"""
Tick sources for the timer engine.

Implementations:
    - QtClock: one-second QTimer on the Qt event loop
    - ManualClock: simulated clock driven explicitly (tests, scripting)
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from PySide6.QtCore import QObject, Qt, QTimer

TICK_INTERVAL_MS = 1000


class Clock(ABC):
    """Abstract one-second cadence source."""

    def __init__(self):
        self._callback: Optional[Callable[[], None]] = None

    def set_callback(self, callback: Callable[[], None]):
        """Register the function invoked on every tick."""
        self._callback = callback

    @abstractmethod
    def start(self):
        """Begin delivering ticks."""
        pass

    @abstractmethod
    def stop(self):
        """Stop delivering ticks."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        pass

    def _fire(self):
        if self._callback is not None:
            self._callback()


class QtClock(Clock):
    """
    Wall-clock cadence using a precise QTimer.
    Ticks are delivered on the Qt event loop, so they never overlap.
    """

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__()
        self._timer = QTimer(parent)
        self._timer.setInterval(TICK_INTERVAL_MS)
        self._timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._timer.timeout.connect(self._fire)

    def start(self):
        if not self._timer.isActive():
            self._timer.start()

    def stop(self):
        self._timer.stop()

    def is_running(self) -> bool:
        return self._timer.isActive()


class ManualClock(Clock):
    """Simulated clock; ticks only when advanced."""

    def __init__(self):
        super().__init__()
        self._running = False
        self.ticks_delivered = 0

    def start(self):
        self._running = True

    def stop(self):
        self._running = False

    def is_running(self) -> bool:
        return self._running

    def advance(self, seconds: int = 1) -> int:
        """
        Deliver up to *seconds* ticks, one at a time.

        Stops early if the clock is stopped by a tick. Returns the number
        of ticks actually delivered.
        """
        delivered = 0
        for _ in range(seconds):
            if not self._running:
                break
            self._fire()
            delivered += 1
        self.ticks_delivered += delivered
        return delivered
