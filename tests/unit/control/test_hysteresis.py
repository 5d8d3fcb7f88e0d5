# tests/unit/control/test_hysteresis.py
"""Unit tests for hysteresis bands and policy.

Thresholds are checked at and just past each boundary; comparisons are
strict, so a temperature exactly on a threshold never switches.
"""

import pytest

from climate.control.hysteresis import HysteresisBand, HysteresisPolicy
from climate.exceptions import ConfigurationError
from climate.state.climate_state import HVACMode

TARGET = 22.0


class TestStandardBands:
    """Test the standard (non-eco) table."""

    @pytest.fixture
    def policy(self):
        return HysteresisPolicy.default()

    @pytest.mark.parametrize(
        "current,expected",
        [(20.9, True), (21.0, False), (21.5, False)],
    )
    def test_heat_start(self, policy, current, expected):
        """Test heat starts strictly below target - 1.0."""
        band = policy.band_for(HVACMode.HEAT, eco_mode=False)
        assert band.should_start(HVACMode.HEAT, current, TARGET) is expected

    @pytest.mark.parametrize(
        "current,expected",
        [(22.6, True), (22.5, False), (22.0, False)],
    )
    def test_heat_stop(self, policy, current, expected):
        """Test heat stops strictly above target + 0.5."""
        band = policy.band_for(HVACMode.HEAT, eco_mode=False)
        assert band.should_stop(HVACMode.HEAT, current, TARGET) is expected

    @pytest.mark.parametrize(
        "current,expected",
        [(23.1, True), (23.0, False), (22.0, False)],
    )
    def test_cool_start(self, policy, current, expected):
        band = policy.band_for(HVACMode.COOL, eco_mode=False)
        assert band.should_start(HVACMode.COOL, current, TARGET) is expected

    @pytest.mark.parametrize(
        "current,expected",
        [(21.4, True), (21.5, False), (22.0, False)],
    )
    def test_cool_stop(self, policy, current, expected):
        band = policy.band_for(HVACMode.COOL, eco_mode=False)
        assert band.should_stop(HVACMode.COOL, current, TARGET) is expected

    def test_dead_band_neither_starts_nor_stops(self, policy):
        """Test temperatures inside the band hold the current state.

        WHY: That is what prevents short-cycling.
        """
        band = policy.band_for(HVACMode.HEAT, eco_mode=False)

        assert not band.should_start(HVACMode.HEAT, 21.8, TARGET)
        assert not band.should_stop(HVACMode.HEAT, 21.8, TARGET)


class TestEcoBands:
    """Test the widened eco table."""

    @pytest.fixture
    def policy(self):
        return HysteresisPolicy.default()

    def test_eco_heat_thresholds(self, policy):
        band = policy.band_for(HVACMode.HEAT, eco_mode=True)

        assert band.should_start(HVACMode.HEAT, 19.9, TARGET)
        assert not band.should_start(HVACMode.HEAT, 20.5, TARGET)
        assert band.should_stop(HVACMode.HEAT, 23.1, TARGET)
        assert not band.should_stop(HVACMode.HEAT, 22.8, TARGET)

    def test_eco_cool_thresholds(self, policy):
        band = policy.band_for(HVACMode.COOL, eco_mode=True)

        assert band.should_start(HVACMode.COOL, 24.1, TARGET)
        assert not band.should_start(HVACMode.COOL, 23.5, TARGET)
        assert band.should_stop(HVACMode.COOL, 20.9, TARGET)
        assert not band.should_stop(HVACMode.COOL, 21.2, TARGET)


class TestFanAndOff:
    def test_fan_always_starts_never_stops(self):
        """Test fan ignores temperature in both tables."""
        policy = HysteresisPolicy.default()
        for eco in (False, True):
            band = policy.band_for(HVACMode.FAN, eco)
            for current in (5.0, 22.0, 40.0):
                assert band.should_start(HVACMode.FAN, current, TARGET)
                assert not band.should_stop(HVACMode.FAN, current, TARGET)

    def test_off_never_starts(self):
        band = HysteresisPolicy.default().band_for(HVACMode.OFF, False)

        assert not band.should_start(HVACMode.OFF, 5.0, TARGET)
        assert band.should_stop(HVACMode.OFF, 22.0, TARGET)


class TestConfiguration:
    def test_negative_offset_rejected(self):
        with pytest.raises(ConfigurationError):
            HysteresisBand(start_offset=-1.0, stop_offset=0.5)

    def test_from_config_overrides_and_defaults(self):
        policy = HysteresisPolicy.from_config(
            {"eco": {"heat": {"start_offset": 3.0}}}
        )

        assert policy.eco[HVACMode.HEAT] == HysteresisBand(3.0, 1.0)
        assert policy.eco[HVACMode.COOL] == HysteresisBand(2.0, 1.0)
        assert policy.standard[HVACMode.HEAT] == HysteresisBand(1.0, 0.5)

    def test_from_empty_config_is_default(self):
        assert HysteresisPolicy.from_config({}) == HysteresisPolicy.default()
