"""Unit tests for force-velocity profiling."""

import numpy as np
import pytest

from sprint_analyzer.analysis import make_fv_profile, simulate_sprint
from sprint_analyzer.exceptions import DomainError
from sprint_analyzer.models import Environment

MSS, TAU = 9.0, 1.0


class TestSimulateSprint:
    """Test the simulated kinematic/kinetic trace."""

    def test_columns_and_length(self):
        """The trace is sampled from 0 to max_time inclusive."""
        df = simulate_sprint(MSS, TAU, max_time=6, frequency=100)
        assert len(df) == 601
        assert df["time"].iloc[0] == 0
        assert df["time"].iloc[-1] == pytest.approx(6.0)
        for column in ["distance", "velocity", "acceleration", "force", "power", "RF"]:
            assert column in df.columns

    def test_ratio_of_force_bounds(self):
        """RF lies between 0 and 1 for a positive net force."""
        df = simulate_sprint(MSS, TAU)
        assert (df["RF"] > 0).all()
        assert (df["RF"] < 1).all()


class TestFVProfile:
    """Test the linear force-velocity profile."""

    def test_profile_close_to_kinematic_limits(self):
        """Without much drag F0 ~ m * MAC and V0 ~ MSS."""
        profile = make_fv_profile(MSS, TAU, bodymass=75, bodyheight=1.75)
        assert profile.F0_rel == pytest.approx(MSS / TAU, rel=0.1)
        assert profile.V0 == pytest.approx(MSS, rel=0.1)
        assert profile.V0 > MSS  # drag keeps force positive at MSS

    def test_derived_quantities(self):
        """Pmax, relative values and slope follow from F0 and V0."""
        profile = make_fv_profile(MSS, TAU, bodymass=80)
        assert profile.Pmax == pytest.approx(profile.F0 * profile.V0 / 4)
        assert profile.F0_rel == pytest.approx(profile.F0 / 80)
        assert profile.Pmax_rel == pytest.approx(profile.Pmax / 80)
        assert profile.FV_slope == pytest.approx(-profile.F0_rel / profile.V0)

    def test_ratio_of_force_decreases(self):
        """RF falls with velocity, so Drf is negative and RFmax positive."""
        profile = make_fv_profile(MSS, TAU)
        assert profile.Drf < 0
        assert 0 < profile.RFmax < 1
        assert profile.RSE_FV >= 0
        assert np.isfinite(profile.RSE_Drf)

    def test_headwind_increases_force(self):
        """A headwind adds drag and therefore horizontal force."""
        still = make_fv_profile(MSS, TAU)
        headwind = make_fv_profile(MSS, TAU, environment=Environment(wind_velocity=-3))
        assert headwind.F0 > still.F0

    def test_cutoff_must_precede_max_time(self):
        """The RF window must contain samples."""
        with pytest.raises(DomainError):
            make_fv_profile(MSS, TAU, max_time=1.0, RFmax_cutoff=1.0)

    def test_invalid_bodymass(self):
        """Body mass must be positive."""
        with pytest.raises(DomainError):
            make_fv_profile(MSS, TAU, bodymass=0)
