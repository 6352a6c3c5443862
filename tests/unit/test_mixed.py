"""Unit tests for the mixed-effects estimator and solver wiring."""

import numpy as np
import pandas as pd
import pytest

from sprint_analyzer.estimation import (
    MixedEffectsEstimator,
    fit_mixed_radar,
    fit_mixed_radar_with_time_correction,
    fit_mixed_splits,
    fit_mixed_splits_with_corrections,
    fit_mixed_splits_with_time_correction,
)
from sprint_analyzer.estimation.solvers import MixedSolverResult
from sprint_analyzer.exceptions import ConvergenceError, DegenerateFitError, InputError
from sprint_analyzer.kinematics import predict_time_at_distance, predict_velocity_at_time
from sprint_analyzer.models import Correction
from sprint_analyzer.settings import Settings, SolverConfig


def team_frame(
    athlete_parameters: pd.DataFrame,
    kind: str,
    time_correction,
    distance_correction: float = 0.0,
    noise: float = 5e-4,
    seed: int = 3,
) -> pd.DataFrame:
    """Simulate long-format team data with known corrections per athlete."""
    rng = np.random.default_rng(seed)
    tc = np.broadcast_to(time_correction, len(athlete_parameters))
    rows = []
    for athlete, correction in zip(athlete_parameters.itertuples(), tc):
        if kind == "splits":
            x = np.arange(5.0, 45.0, 5.0)
            y = predict_time_at_distance(
                x, athlete.MSS, athlete.TAU, correction, distance_correction
            )
            columns = ("distance", "time")
        else:
            x = np.linspace(0.0, 5.0, 26)
            y = predict_velocity_at_time(x, athlete.MSS, athlete.TAU, correction)
            columns = ("time", "velocity")
        y = y + rng.normal(0, noise, len(x))
        rows.append(
            pd.DataFrame({"athlete": athlete.athlete, columns[0]: x, columns[1]: y})
        )
    return pd.concat(rows, ignore_index=True)


class RecordingMixedSolver:
    """Mixed solver stub returning the start values and recording its inputs."""

    def __init__(self):
        self.random_index = None
        self.groups = None

    def solve(self, model, y, groups, start, random_index, weights=None):
        self.random_index = list(random_index)
        self.groups = np.asarray(groups)
        n_groups = int(self.groups.max()) + 1
        theta = np.tile(start, (len(y), 1))
        return MixedSolverResult(
            fixed=np.asarray(start, dtype=float),
            random=np.zeros((n_groups, len(random_index))),
            sigma=0.01,
            psi=np.eye(len(random_index)),
            fitted=model(theta),
            iterations=1,
        )


class TestFitMixedSplits:
    """Test mixed-effects split-time fits."""

    @pytest.fixture
    def result(self, team_splits: pd.DataFrame):
        """Fit the team once per test."""
        return fit_mixed_splits(team_splits)

    def test_fixed_effects(self, result, athlete_parameters: pd.DataFrame):
        """Fixed effects are close to the team average."""
        assert result.fixed.MSS == pytest.approx(athlete_parameters["MSS"].mean(), abs=0.3)
        assert result.fixed.TAU == pytest.approx(athlete_parameters["TAU"].mean(), abs=0.1)

    def test_athlete_parameters(self, result, athlete_parameters: pd.DataFrame):
        """Each athlete gets a full parameter set close to the truth."""
        assert sorted(result.random) == list(athlete_parameters["athlete"])
        for athlete in athlete_parameters.itertuples():
            params = result.random[athlete.athlete]
            assert params.MSS == pytest.approx(athlete.MSS, abs=0.3)
            assert params.TAU == pytest.approx(athlete.TAU, abs=0.15)
            assert params.MAC == pytest.approx(params.MSS / params.TAU)
            assert params.time_correction == 0.0

    def test_athletes_are_ranked(self, result, athlete_parameters: pd.DataFrame):
        """Estimated MSS preserves the ranking of the athletes."""
        estimated = [result.random[a].MSS for a in athlete_parameters["athlete"]]
        assert np.corrcoef(estimated, athlete_parameters["MSS"])[0, 1] > 0.95

    def test_model_fit(self, result):
        """Residual scale reflects the simulated timing noise."""
        assert 0.003 < result.model_fit.rse < 0.03
        assert result.model_fit.r_squared > 0.999
        assert result.random_effects == ["MSS", "TAU"]

    def test_result_tables(self, result):
        """Fixed and per-athlete parameters are available as DataFrames."""
        assert len(result.fixed_table) == 1
        assert list(result.random_table["athlete"]) == ["A", "B", "C", "D", "E", "F"]
        assert {"athlete", "pred_time"} <= set(result.data.columns)

    def test_predict(self, result):
        """Predictions use athlete parameters or the fixed effects."""
        params = result.random["C"]
        np.testing.assert_allclose(
            result.predict([10.0, 20.0], athlete="C"),
            predict_time_at_distance([10.0, 20.0], params.MSS, params.TAU),
        )
        fixed = result.fixed
        np.testing.assert_allclose(
            result.predict([10.0]),
            predict_time_at_distance([10.0], fixed.MSS, fixed.TAU),
        )

    def test_caller_data_not_mutated(self, team_splits: pd.DataFrame):
        """The input frame is left untouched."""
        before = team_splits.copy()
        fit_mixed_splits(team_splits)
        pd.testing.assert_frame_equal(team_splits, before)


class TestMixedVariants:
    """Test correction variants and radar mixed fits."""

    def test_time_correction_fixed_across_athletes(self, team_splits: pd.DataFrame):
        """A non-random time correction is shared by every athlete."""
        result = fit_mixed_splits_with_time_correction(team_splits)

        assert result.correction == Correction.TIME
        assert result.fixed.time_correction == pytest.approx(0.0, abs=0.1)
        for params in result.random.values():
            assert params.time_correction == result.fixed.time_correction

    def test_mixed_radar(self, team_radar: pd.DataFrame, athlete_parameters):
        """Mixed radar fits recover each athlete's MSS."""
        result = fit_mixed_radar(team_radar)

        assert result.kind == "radar"
        for athlete in athlete_parameters.itertuples():
            assert result.random[athlete.athlete].MSS == pytest.approx(
                athlete.MSS, abs=0.3
            )
        assert "pred_velocity" in result.data.columns


class TestMixedCorrections:
    """Test estimated corrections shared by, or varying between, athletes."""

    ATHLETE_TC = [0.15, 0.3, 0.2, 0.35, 0.25, 0.1]

    def test_splits_shared_corrections(self, athlete_parameters: pd.DataFrame):
        """Shared time and distance corrections are recovered as fixed effects."""
        data = team_frame(athlete_parameters, "splits", 0.3, distance_correction=0.5)
        result = fit_mixed_splits_with_corrections(data)

        assert result.correction == Correction.TIME_AND_DISTANCE
        assert result.random_effects == ["MSS", "TAU"]
        assert result.fixed.time_correction == pytest.approx(0.3, abs=0.05)
        assert result.fixed.distance_correction == pytest.approx(0.5, abs=0.3)
        for athlete in athlete_parameters.itertuples():
            params = result.random[athlete.athlete]
            assert params.MSS == pytest.approx(athlete.MSS, abs=0.1)
            assert params.time_correction == result.fixed.time_correction
            assert params.distance_correction == result.fixed.distance_correction

    def test_splits_athlete_time_corrections(self, athlete_parameters: pd.DataFrame):
        """Random time corrections follow each athlete's reaction delay."""
        data = team_frame(athlete_parameters, "splits", self.ATHLETE_TC)
        result = fit_mixed_splits_with_time_correction(
            data, corrections_as_random_effects=True
        )

        assert result.random_effects == ["MSS", "TAU", "time_correction"]
        estimated = [result.random[a].time_correction for a in athlete_parameters["athlete"]]
        np.testing.assert_allclose(estimated, self.ATHLETE_TC, atol=0.05)
        assert len(set(estimated)) == len(estimated)
        assert result.fixed.time_correction == pytest.approx(
            np.mean(self.ATHLETE_TC), abs=0.05
        )

    def test_radar_shared_time_correction(self, athlete_parameters: pd.DataFrame):
        """A shared radar time offset is a fixed effect for every athlete."""
        data = team_frame(athlete_parameters, "radar", 0.2, noise=0.02)
        result = fit_mixed_radar_with_time_correction(data)

        assert result.kind == "radar"
        assert result.random_effects == ["MSS", "TAU"]
        assert result.fixed.time_correction == pytest.approx(0.2, abs=0.05)
        for athlete in athlete_parameters.itertuples():
            params = result.random[athlete.athlete]
            assert params.MSS == pytest.approx(athlete.MSS, abs=0.1)
            assert params.time_correction == result.fixed.time_correction

    def test_radar_athlete_time_corrections(self, athlete_parameters: pd.DataFrame):
        """Random radar time offsets differ per athlete."""
        data = team_frame(athlete_parameters, "radar", self.ATHLETE_TC, noise=0.02)
        result = fit_mixed_radar_with_time_correction(
            data, corrections_as_random_effects=True
        )

        assert result.random_effects == ["MSS", "TAU", "time_correction"]
        for athlete, tc in zip(athlete_parameters["athlete"], self.ATHLETE_TC):
            params = result.random[athlete]
            assert params.time_correction == pytest.approx(tc, abs=0.05)
            assert params.time_correction != result.fixed.time_correction


class TestMixedFailures:
    """Test failures of the mixed-effects solver."""

    def test_identical_athletes_are_degenerate(self):
        """Without between-athlete variation the random effects collapse."""
        identical = pd.DataFrame(
            {
                "athlete": ["A", "B", "C", "D"],
                "MSS": [8.0] * 4,
                "TAU": [0.9] * 4,
            }
        )
        data = team_frame(identical, "splits", 0.0, noise=0.0)
        rng = np.random.default_rng(13)
        # Same noise for every athlete
        data["time"] += np.tile(rng.normal(0, 1e-3, 8), 4)

        with pytest.raises(DegenerateFitError):
            fit_mixed_splits(data)

    def test_iteration_limit(self, team_splits: pd.DataFrame):
        """Running out of outer iterations raises a ConvergenceError."""
        settings = Settings(solver=SolverConfig(mixed_max_iterations=1))

        with pytest.raises(ConvergenceError) as exc_info:
            fit_mixed_splits(team_splits, settings=settings)
        assert exc_info.value.reason == "maximum iterations reached"
        assert exc_info.value.last_iterate is not None


class TestMixedValidation:
    """Test input validation and random-effect resolution."""

    def test_single_athlete(self, team_splits: pd.DataFrame):
        """At least two athletes are required."""
        with pytest.raises(InputError):
            fit_mixed_splits(team_splits[team_splits["athlete"] == "A"])

    def test_missing_column(self, team_splits: pd.DataFrame):
        """Named columns must exist."""
        with pytest.raises(InputError):
            fit_mixed_splits(team_splits, athlete_col="subject")

    def test_random_effect_must_be_free(self, team_splits: pd.DataFrame):
        """Corrections can only be random when they are estimated."""
        with pytest.raises(InputError):
            fit_mixed_splits(team_splits, random_effects=["MSS", "time_correction"])

    def test_empty_random_effects(self, team_splits: pd.DataFrame):
        """At least one random effect is needed."""
        with pytest.raises(InputError):
            fit_mixed_splits(team_splits, random_effects=[])

    def test_corrections_as_random_effects(self, team_splits: pd.DataFrame):
        """Free corrections are appended to the random effects on request."""
        solver = RecordingMixedSolver()
        estimator = MixedEffectsEstimator("splits", solver=solver)
        result = estimator.fit(
            team_splits,
            "distance",
            "time",
            "athlete",
            correction=Correction.TIME_AND_DISTANCE,
            corrections_as_random_effects=True,
        )

        assert result.random_effects == [
            "MSS",
            "TAU",
            "time_correction",
            "distance_correction",
        ]
        assert solver.random_index == [0, 1, 2, 3]

    def test_single_random_effect(self, team_splits: pd.DataFrame):
        """A single random effect maps to its solver position."""
        solver = RecordingMixedSolver()
        estimator = MixedEffectsEstimator("splits", solver=solver)
        result = estimator.fit(
            team_splits, "distance", "time", "athlete", random_effects=["TAU"]
        )

        assert solver.random_index == [1]
        assert result.random["A"].MSS == result.fixed.MSS

    def test_athlete_codes(self, team_splits: pd.DataFrame):
        """Athletes are coded in sorted order."""
        solver = RecordingMixedSolver()
        shuffled = team_splits.sample(frac=1, random_state=0)
        MixedEffectsEstimator("splits", solver=solver).fit(
            shuffled, "distance", "time", "athlete"
        )

        expected = shuffled["athlete"].map({a: i for i, a in enumerate("ABCDEF")})
        np.testing.assert_array_equal(solver.groups, expected.to_numpy())
