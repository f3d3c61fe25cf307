"""
Cycle tracking for the Focus Flow timer.
Decides which interval follows a completed one and keeps session stats.
"""

import logging
from dataclasses import dataclass

from .models import Mode, Stats, TimerConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    """Outcome of a completed interval."""
    next_mode: Mode
    auto_start: bool
    stats: Stats


class CycleTracker:
    """
    Derives the next mode and records completed-focus statistics.

    Stats are replaced, never mutated, and live only as long as the
    tracker does.
    """

    def __init__(self, stats: Stats = None):
        self._stats = stats if stats is not None else Stats()

    @property
    def stats(self) -> Stats:
        return self._stats

    def on_focus_completed(self, config: TimerConfig) -> Transition:
        """Count a finished focus interval and pick the following break."""
        cycles = self._stats.completed_cycles + 1
        self._stats = Stats(
            completed_cycles=cycles,
            total_focus_minutes=self._stats.total_focus_minutes + config.focus_minutes,
        )

        # The post-increment count decides: the Nth session earns the long break.
        if cycles % config.long_break_interval == 0:
            next_mode = Mode.LONG_BREAK
        else:
            next_mode = Mode.SHORT_BREAK

        logger.debug("Focus #%d completed, next: %s", cycles, next_mode.value)
        return Transition(next_mode, config.auto_start_breaks, self._stats)

    def on_break_completed(self, config: TimerConfig) -> Transition:
        """A break always leads back to focus."""
        return Transition(Mode.FOCUS, config.auto_start_focus, self._stats)

    def cycle_position(self, config: TimerConfig) -> int:
        """Completed sessions since the last long break."""
        return self._stats.completed_cycles % config.long_break_interval
