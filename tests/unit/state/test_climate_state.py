# tests/unit/state/test_climate_state.py
"""Unit tests for HVACMode, RunInterval, ClimateState and ClimateStatus."""

from datetime import datetime, timedelta

import pytest

from climate.exceptions import InvalidModeError
from climate.state.climate_state import ClimateState, HVACMode, RunInterval

NOW = datetime(2026, 1, 15, 8, 0, 0)


class TestHVACMode:
    """Test mode parsing."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("off", HVACMode.OFF),
            ("heat", HVACMode.HEAT),
            ("COOL", HVACMode.COOL),
            (" fan ", HVACMode.FAN),
            (HVACMode.HEAT, HVACMode.HEAT),
        ],
    )
    def test_parse_accepts_known_modes(self, raw, expected):
        assert HVACMode.parse(raw) is expected

    @pytest.mark.parametrize("raw", ["auto", "", None, 3, "heating"])
    def test_parse_rejects_unknown(self, raw):
        """Test anything outside off/heat/cool/fan is rejected.

        WHY: An unknown mode has no row in the control table.
        """
        with pytest.raises(InvalidModeError):
            HVACMode.parse(raw)

    def test_invalid_mode_is_value_error(self):
        with pytest.raises(ValueError):
            HVACMode.parse("dehumidify")


class TestRunInterval:
    """Test run interval bookkeeping."""

    def test_new_interval_inactive(self):
        run = RunInterval()
        assert not run.active
        assert run.mode is None

    def test_begin_sets_start_and_clears_log_time(self):
        """Test a new run has no periodic flush yet.

        WHY: The first periodic flush fires as soon as a minute has run.
        """
        run = RunInterval(last_energy_log_time=NOW - timedelta(hours=1))

        run.begin(HVACMode.HEAT, NOW)

        assert run.active
        assert run.start_time == NOW
        assert run.last_energy_log_time is None
        assert run.mode is HVACMode.HEAT

    def test_advance_keeps_partial_minute(self):
        run = RunInterval()
        run.begin(HVACMode.COOL, NOW)
        later = NOW + timedelta(minutes=2, seconds=40)

        run.advance(2, later)

        assert run.start_time == NOW + timedelta(minutes=2)
        assert run.last_energy_log_time == later
        assert run.mode is HVACMode.COOL

    def test_clear(self):
        run = RunInterval()
        run.begin(HVACMode.FAN, NOW)

        run.clear()

        assert not run.active
        assert run.last_energy_log_time is None
        assert run.mode is None


class TestSnapshot:
    """Test ClimateState.snapshot()."""

    def test_snapshot_copies_fields(self):
        state = ClimateState(
            mode=HVACMode.HEAT,
            target_temp=21.0,
            current_temp=19.5,
            is_running=True,
            eco_mode=True,
            last_update=NOW,
        )
        state.run.begin(HVACMode.HEAT, NOW)

        status = state.snapshot()

        assert status.mode is HVACMode.HEAT
        assert status.target_temp == 21.0
        assert status.current_temp == 19.5
        assert status.is_running is True
        assert status.eco_mode is True
        assert status.last_update == NOW
        assert status.run_started_at == NOW

    def test_snapshot_is_independent(self):
        """Test later mutations do not leak into an earlier snapshot."""
        state = ClimateState(last_update=NOW)
        status = state.snapshot()

        state.target_temp = 30.0

        assert status.target_temp == 22.0

    def test_off_never_reports_running(self):
        """Test Off reads as idle even before the pending final flush.

        WHY: Off de-energises the actuator immediately.
        """
        state = ClimateState(mode=HVACMode.OFF, is_running=True, last_update=NOW)
        state.run.begin(HVACMode.HEAT, NOW)

        status = state.snapshot()

        assert status.is_running is False
        assert status.run_started_at == NOW

    def test_to_dict(self):
        state = ClimateState(mode=HVACMode.COOL, last_update=NOW)

        data = state.snapshot().to_dict()

        assert data == {
            "mode": "cool",
            "target_temp": 22.0,
            "current_temp": 20.0,
            "is_running": False,
            "eco_mode": False,
            "last_update": "2026-01-15T08:00:00",
            "run_started_at": None,
        }
