"""Tests for the interval dots shown under the timer controls."""

import pytest

from ui.timer_window import DOT_STYLES, interval_dots


class TestIntervalDots:
    def test_fresh_session(self) -> None:
        assert interval_dots(0, 4, focus_running=False) == ["pending"] * 4

    def test_running_focus_highlights_current_session(self) -> None:
        assert interval_dots(1, 4, focus_running=True) == [
            "done", "current", "pending", "pending",
        ]

    def test_no_highlight_outside_running_focus(self) -> None:
        assert interval_dots(2, 4, focus_running=False) == [
            "done", "done", "pending", "pending",
        ]

    @pytest.mark.parametrize("interval", [1, 3, 6])
    def test_one_dot_per_session(self, interval: int) -> None:
        assert len(interval_dots(0, interval, focus_running=True)) == interval

    def test_every_kind_has_a_style(self) -> None:
        kinds = set(interval_dots(1, 3, focus_running=True))
        assert kinds <= set(DOT_STYLES)


class TestDotsFollowEngine:
    def test_dots_track_completed_cycles(self, make_engine, clock) -> None:
        engine = make_engine(
            focus_minutes=1, short_break_minutes=1, long_break_interval=3,
            auto_start_breaks=True, auto_start_focus=True,
        )
        engine.start()
        clock.advance(60)
        state = engine.state
        assert state.mode.is_break
        dots = interval_dots(
            engine.tracker.cycle_position(engine.config),
            engine.config.long_break_interval,
            state.is_active and not state.mode.is_break,
        )
        assert dots == ["done", "pending", "pending"]

        clock.advance(60)
        state = engine.state
        dots = interval_dots(
            engine.tracker.cycle_position(engine.config),
            engine.config.long_break_interval,
            state.is_active and not state.mode.is_break,
        )
        assert dots == ["done", "current", "pending"]
