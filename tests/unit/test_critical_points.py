"""Unit tests for critical point finders."""

import numpy as np
import pytest

from sprint_analyzer.analysis import (
    find_acceleration_critical_distance,
    find_acceleration_critical_time,
    find_max_power_distance,
    find_max_power_time,
    find_power_critical_distance,
    find_power_critical_time,
    find_velocity_critical_distance,
    find_velocity_critical_time,
)
from sprint_analyzer.exceptions import DomainError
from sprint_analyzer.kinematics import (
    predict_distance_at_time,
    predict_power_at_time,
    predict_velocity_at_time,
)

MSS, TAU = 10.0, 0.9


class TestVelocityCriticalPoints:
    """Test velocity threshold crossings."""

    def test_time_matches_closed_form(self):
        """v(t) = 0.95 MSS at t = TAU * ln(20)."""
        t = find_velocity_critical_time(MSS, TAU, percent=0.95)
        assert t == pytest.approx(TAU * np.log(20), abs=1e-6)
        assert predict_velocity_at_time(t, MSS, TAU) == pytest.approx(0.95 * MSS)

    def test_distance_matches_time(self):
        """The critical distance is the distance covered at the critical time."""
        t = find_velocity_critical_time(MSS, TAU, percent=0.95)
        d = find_velocity_critical_distance(MSS, TAU, percent=0.95)
        assert d == pytest.approx(predict_distance_at_time(t, MSS, TAU), abs=1e-5)
        assert d == pytest.approx(18.4116, abs=1e-3)

    def test_time_correction_shifts_crossing(self):
        """A positive time correction moves the crossing earlier on observed time."""
        base = find_velocity_critical_time(MSS, TAU, percent=0.9)
        shifted = find_velocity_critical_time(MSS, TAU, percent=0.9, time_correction=0.2)
        assert base - shifted == pytest.approx(0.2, abs=1e-6)

    @pytest.mark.parametrize("percent", [0.0, 1.0, 1.2, -0.1])
    def test_invalid_percent(self, percent):
        """Velocity never reaches MSS, so percent must lie in (0, 1)."""
        with pytest.raises(DomainError):
            find_velocity_critical_time(MSS, TAU, percent=percent)

    def test_crossing_beyond_horizon(self):
        """A crossing outside the search range is a domain error."""
        with pytest.raises(DomainError):
            find_velocity_critical_time(MSS, TAU, percent=0.999, horizon=2.0)


class TestAccelerationCriticalPoints:
    """Test acceleration threshold crossings."""

    def test_time_matches_closed_form(self):
        """a(t) = 0.9 MAC at t = TAU * ln(1 / 0.9)."""
        t = find_acceleration_critical_time(MSS, TAU, percent=0.9)
        assert t == pytest.approx(TAU * np.log(1 / 0.9), abs=1e-6)

    def test_distance_matches_time(self):
        """The critical distance is the distance covered at the critical time."""
        t = find_acceleration_critical_time(MSS, TAU, percent=0.5)
        d = find_acceleration_critical_distance(MSS, TAU, percent=0.5)
        assert d == pytest.approx(predict_distance_at_time(t, MSS, TAU), abs=1e-5)


class TestPowerCriticalPoints:
    """Test power maximum and power window."""

    def test_max_power_time(self):
        """Relative power peaks at TAU * ln 2 with value PMAX."""
        result = find_max_power_time(MSS, TAU)
        assert result["time"] == pytest.approx(TAU * np.log(2), abs=1e-5)
        assert result["max_power"] == pytest.approx(MSS * MSS / TAU / 4, rel=1e-8)

    def test_max_power_distance(self):
        """The distance of peak power is the distance at the peak time."""
        result = find_max_power_distance(MSS, TAU)
        expected = predict_distance_at_time(TAU * np.log(2), MSS, TAU)
        assert result["distance"] == pytest.approx(expected, abs=1e-4)

    def test_max_power_with_bodymass(self):
        """With body mass the peak is reported in watts."""
        result = find_max_power_time(MSS, TAU, bodymass=75)
        assert result["max_power"] > 75 * MSS * MSS / TAU / 4

    def test_power_window_brackets_peak(self):
        """Both bounds reach percent of peak power and bracket the peak."""
        peak = find_max_power_time(MSS, TAU)
        window = find_power_critical_time(MSS, TAU, percent=0.9)
        assert window["lower"] < peak["time"] < window["upper"]
        for bound in (window["lower"], window["upper"]):
            assert predict_power_at_time(bound, MSS, TAU) == pytest.approx(
                0.9 * peak["max_power"], rel=1e-6
            )

    def test_power_window_closed_form(self):
        """For relative power the window solves x(1 - x) = percent / 4."""
        window = find_power_critical_time(MSS, TAU, percent=0.9)
        x_low = (1 + np.sqrt(0.1)) / 2
        x_high = (1 - np.sqrt(0.1)) / 2
        assert window["lower"] == pytest.approx(-TAU * np.log(x_low), abs=1e-5)
        assert window["upper"] == pytest.approx(-TAU * np.log(x_high), abs=1e-5)

    def test_percent_one_returns_peak(self):
        """At 100% both bounds coincide with the peak."""
        peak = find_max_power_time(MSS, TAU)
        window = find_power_critical_time(MSS, TAU, percent=1.0)
        assert window["lower"] == pytest.approx(peak["time"])
        assert window["upper"] == pytest.approx(peak["time"])

    def test_power_window_distance(self):
        """The distance window brackets the distance of peak power."""
        peak = find_max_power_distance(MSS, TAU)
        window = find_power_critical_distance(MSS, TAU, percent=0.8)
        assert window["lower"] < peak["distance"] < window["upper"]

    def test_invalid_percent(self):
        """Percent above 1 is rejected."""
        with pytest.raises(DomainError):
            find_power_critical_time(MSS, TAU, percent=1.1)
