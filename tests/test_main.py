"""Tests for command-line handling in the application entry point."""

from unittest.mock import patch

import pytest

from core.models import SoundProfile, TimerConfig
from main import apply_overrides, main, parse_args


class TestOverrides:
    def test_no_flags_keeps_config(self) -> None:
        config = TimerConfig(focus_minutes=40)
        assert apply_overrides(config, parse_args([])) is config

    def test_flags_override_fields(self) -> None:
        args = parse_args([
            "--focus", "50", "--short-break", "10", "--long-break", "20",
            "--interval", "3", "--sound", "digital", "--volume", "0.2",
        ])
        config = apply_overrides(TimerConfig(), args)
        assert config == TimerConfig(
            focus_minutes=50, short_break_minutes=10, long_break_minutes=20,
            long_break_interval=3, sound_profile=SoundProfile.DIGITAL, volume=0.2,
        )

    def test_overrides_are_clamped(self) -> None:
        config = apply_overrides(TimerConfig(), parse_args(["--focus", "0"]))
        assert config.focus_minutes == 1

    def test_nan_volume_is_clamped(self) -> None:
        config = apply_overrides(TimerConfig(), parse_args(["--volume", "nan"]))
        assert config.volume == 0.0

    def test_unknown_profile_rejected(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["--sound", "gong"])


class TestPreview:
    def test_preview_exits_without_gui(self) -> None:
        with patch("main.ConfigStore") as mock_store, \
                patch("main.WavAudioOutput") as mock_output, \
                patch("main.QApplication") as mock_app, \
                patch("main.time.sleep"):
            mock_store.return_value.load.return_value = TimerConfig()
            mock_output.return_value.is_available.return_value = True
            mock_output.return_value.current_time.return_value = 0.0
            assert main(["--preview", "nature"]) == 0

        mock_output.return_value.activate.assert_called_once()
        mock_output.return_value.schedule.assert_called_once()
        mock_app.assert_not_called()
        mock_store.return_value.save.assert_not_called()

    def test_preview_waits_for_cue_to_finish(self) -> None:
        with patch("main.ConfigStore") as mock_store, \
                patch("main.WavAudioOutput") as mock_output, \
                patch("main.time.sleep") as mock_sleep:
            mock_store.return_value.load.return_value = TimerConfig()
            mock_output.return_value.is_available.return_value = True
            mock_output.return_value.current_time.return_value = 0.0
            main(["--preview", "bell"])

        mock_sleep.assert_called_once_with(pytest.approx(2.5))
        mock_output.return_value.cleanup.assert_called_once()

    def test_preview_without_output_does_not_wait(self) -> None:
        with patch("main.ConfigStore") as mock_store, \
                patch("main.WavAudioOutput") as mock_output, \
                patch("main.time.sleep") as mock_sleep:
            mock_store.return_value.load.return_value = TimerConfig()
            mock_output.return_value.is_available.return_value = False
            assert main(["--preview", "digital"]) == 0

        mock_sleep.assert_not_called()
