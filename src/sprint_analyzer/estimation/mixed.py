"""
Mixed-effects estimator for multi-athlete data.

Fits population (fixed) parameters plus athlete-level random deviations to
long-format data holding one row per observation and an athlete column.
Each athlete's parameters are the fixed effects plus that athlete's random
deviation; parameters without a random effect equal the fixed value.
"""

import logging
from collections.abc import Mapping, Sequence

import numpy as np
import pandas as pd

from ..constants import Columns, ParameterNames
from ..data.observations import (
    ArrayLike,
    ObservationProcessor,
    ObservationProcessorProtocol,
    count_check,
)
from ..exceptions import DegenerateFitError, InputError
from ..models import Correction, MixedFitResult, ModelFit, ParameterSet
from ..settings import Settings
from .equations import ModelEquation
from .solvers import MixedSolverProtocol, PenalizedMixedSolver


class MixedEffectsEstimator:
    """Estimator for split or radar observations of several athletes."""

    def __init__(
        self,
        kind: str,
        settings: Settings | None = None,
        solver: MixedSolverProtocol | None = None,
    ):
        """
        Initialize the estimator.

        Args:
            kind: Either 'splits' or 'radar'
            settings: Application settings; loaded from the environment if omitted
            solver: Mixed-effects solver; defaults to penalized NLS
        """
        self.kind = kind
        self.settings = settings or Settings()
        self.solver = solver or PenalizedMixedSolver(self.settings.solver)
        self.processor: ObservationProcessorProtocol = ObservationProcessor(kind)
        self.logger = logging.getLogger(__name__)

    # pylint: disable=R0913,R0914
    def fit(
        self,
        data: pd.DataFrame,
        x_col: str,
        y_col: str,
        athlete_col: str,
        correction: Correction = Correction.NONE,
        time_correction: float | ArrayLike = 0.0,
        random_effects: Sequence[str] | None = None,
        corrections_as_random_effects: bool = False,
        weights: ArrayLike | None = None,
        start: Mapping[str, float] | None = None,
        na_rm: bool = False,
    ) -> MixedFitResult:
        """
        Fit the mixed-effects model.

        Args:
            data: Long-format observations
            x_col: Predictor column (distance for splits, time for radar)
            y_col: Target column (time for splits, velocity for radar)
            athlete_col: Athlete identifier column
            correction: Which corrections are free parameters
            time_correction: Fixed time correction, ignored when it is free
            random_effects: Parameters with athlete-level random effects;
                defaults to MSS and TAU
            corrections_as_random_effects: Add the free corrections to the
                random effects
            weights: Optional non-negative per-observation weights
            start: Start value overrides for the fixed effects
            na_rm: Drop rows with missing values instead of failing

        Returns:
            MixedFitResult

        Raises:
            InputError: If columns are missing, fewer than two athletes are
                present, or random effects are not free parameters
            ConvergenceError: If the solver does not converge
            DegenerateFitError: If the random-effects covariance is singular
                or an athlete ends up with non-positive MSS or TAU
        """
        equation = ModelEquation(self.kind, correction)
        random = self._random_effects(
            equation, random_effects, corrections_as_random_effects
        )
        missing = [c for c in (x_col, y_col, athlete_col) if c not in data.columns]
        if missing:
            raise InputError(f"Columns not found in data: {missing}")

        frame = self.processor.build(
            data[x_col],
            data[y_col],
            time_correction=time_correction,
            weights=weights,
            athlete=data[athlete_col].to_numpy(),
            na_rm=na_rm,
        )
        codes, athletes = pd.factorize(frame[Columns.ATHLETE].astype(str), sort=True)
        if len(athletes) < 2:
            raise InputError(
                f"Mixed-effects models need at least two athletes, got {len(athletes)}"
            )
        count_check(len(frame), len(equation.parameters) + len(random))
        start_vector = equation.start_vector(self.settings.start_values, start)

        x = frame[self.processor.predictor].to_numpy()
        y = frame[self.processor.target].to_numpy()
        tc = frame[Columns.TIME_CORRECTION].to_numpy()

        def model(theta: np.ndarray) -> np.ndarray:
            return equation.evaluate(theta, x, tc)

        self.logger.info(
            f"Fitting mixed {self.kind} model ({correction.value}) on "
            f"{len(frame)} observations from {len(athletes)} athletes, "
            f"random effects {random}"
        )
        random_index = [equation.parameters.index(name) for name in random]
        solution = self.solver.solve(
            model,
            y,
            codes,
            start_vector,
            random_index,
            weights=frame[Columns.WEIGHTS].to_numpy(),
        )
        fixed = equation.parameter_set(solution.fixed, tc)
        per_athlete = {
            str(athlete): self._athlete_parameters(
                equation,
                solution.fixed,
                solution.random[i],
                random_index,
                tc[codes == i],
                str(athlete),
            )
            for i, athlete in enumerate(athletes)
        }
        self.logger.info(
            f"Fitted mixed {self.kind} model in {solution.iterations} iterations: "
            f"MSS={fixed.MSS:.3f}, TAU={fixed.TAU:.3f}, sigma={solution.sigma:.4g}"
        )

        result_frame = frame.copy()
        if ParameterNames.TIME_CORRECTION in equation.parameters:
            result_frame = result_frame.drop(columns=Columns.TIME_CORRECTION)
        pred_col = (
            Columns.PRED_TIME if self.kind == "splits" else Columns.PRED_VELOCITY
        )
        result_frame[pred_col] = solution.fitted

        return MixedFitResult(
            fixed=fixed,
            random=per_athlete,
            random_effects=random,
            model_fit=ModelFit.from_predictions(y, solution.fitted, solution.sigma),
            data=result_frame,
            correction=correction,
            kind=self.kind,
            model=solution,
        )

    def _random_effects(
        self,
        equation: ModelEquation,
        random_effects: Sequence[str] | None,
        corrections_as_random_effects: bool,
    ) -> list[str]:
        if random_effects is None:
            random = list(ParameterNames.DEFAULT_RANDOM_EFFECTS)
        elif isinstance(random_effects, str):
            random = [random_effects]
        else:
            random = list(dict.fromkeys(random_effects))
        if corrections_as_random_effects:
            random += [
                name
                for name in equation.parameters
                if name in ParameterNames.CORRECTIONS and name not in random
            ]

        if not random:
            raise InputError("At least one random effect is required")
        not_free = [name for name in random if name not in equation.parameters]
        if not_free:
            raise InputError(
                f"Random effects must be free parameters {list(equation.parameters)}, "
                f"got {not_free}"
            )
        # Keep solver parameter order
        return [name for name in equation.parameters if name in random]

    def _athlete_parameters(
        self,
        equation: ModelEquation,
        fixed: np.ndarray,
        deviation: np.ndarray,
        random_index: list[int],
        time_correction: np.ndarray,
        athlete: str,
    ) -> ParameterSet:
        theta = fixed.copy()
        theta[random_index] += deviation
        if theta[0] <= 0 or theta[1] <= 0:
            raise DegenerateFitError(
                f"Athlete {athlete!r} has non-positive parameters: "
                f"MSS={theta[0]!r}, TAU={theta[1]!r}"
            )
        return equation.parameter_set(theta, time_correction)


def _mixed_fit(
    kind: str,
    correction: Correction,
    data: pd.DataFrame,
    x_col: str,
    y_col: str,
    athlete_col: str,
    settings: Settings | None,
    **kwargs,
) -> MixedFitResult:
    return MixedEffectsEstimator(kind, settings).fit(
        data, x_col, y_col, athlete_col, correction=correction, **kwargs
    )


def fit_mixed_splits(
    data: pd.DataFrame,
    distance_col: str = Columns.DISTANCE,
    time_col: str = Columns.TIME,
    athlete_col: str = Columns.ATHLETE,
    time_correction: float | ArrayLike = 0.0,
    random_effects: Sequence[str] | None = None,
    weights: ArrayLike | None = None,
    start: Mapping[str, float] | None = None,
    na_rm: bool = False,
    settings: Settings | None = None,
) -> MixedFitResult:
    """
    Fit a mixed-effects split-time model with a fixed time correction.

    Example:
        >>> result = fit_mixed_splits(df, athlete_col="athlete")
        >>> result.random_table
    """
    return _mixed_fit(
        "splits",
        Correction.NONE,
        data,
        distance_col,
        time_col,
        athlete_col,
        settings,
        time_correction=time_correction,
        random_effects=random_effects,
        weights=weights,
        start=start,
        na_rm=na_rm,
    )


def fit_mixed_splits_with_time_correction(
    data: pd.DataFrame,
    distance_col: str = Columns.DISTANCE,
    time_col: str = Columns.TIME,
    athlete_col: str = Columns.ATHLETE,
    random_effects: Sequence[str] | None = None,
    corrections_as_random_effects: bool = False,
    weights: ArrayLike | None = None,
    start: Mapping[str, float] | None = None,
    na_rm: bool = False,
    settings: Settings | None = None,
) -> MixedFitResult:
    """Fit a mixed-effects split-time model estimating the time correction."""
    return _mixed_fit(
        "splits",
        Correction.TIME,
        data,
        distance_col,
        time_col,
        athlete_col,
        settings,
        random_effects=random_effects,
        corrections_as_random_effects=corrections_as_random_effects,
        weights=weights,
        start=start,
        na_rm=na_rm,
    )


def fit_mixed_splits_with_corrections(
    data: pd.DataFrame,
    distance_col: str = Columns.DISTANCE,
    time_col: str = Columns.TIME,
    athlete_col: str = Columns.ATHLETE,
    random_effects: Sequence[str] | None = None,
    corrections_as_random_effects: bool = False,
    weights: ArrayLike | None = None,
    start: Mapping[str, float] | None = None,
    na_rm: bool = False,
    settings: Settings | None = None,
) -> MixedFitResult:
    """Fit a mixed-effects split-time model estimating both corrections."""
    return _mixed_fit(
        "splits",
        Correction.TIME_AND_DISTANCE,
        data,
        distance_col,
        time_col,
        athlete_col,
        settings,
        random_effects=random_effects,
        corrections_as_random_effects=corrections_as_random_effects,
        weights=weights,
        start=start,
        na_rm=na_rm,
    )


def fit_mixed_radar(
    data: pd.DataFrame,
    time_col: str = Columns.TIME,
    velocity_col: str = Columns.VELOCITY,
    athlete_col: str = Columns.ATHLETE,
    time_correction: float | ArrayLike = 0.0,
    random_effects: Sequence[str] | None = None,
    weights: ArrayLike | None = None,
    start: Mapping[str, float] | None = None,
    na_rm: bool = False,
    settings: Settings | None = None,
) -> MixedFitResult:
    """Fit a mixed-effects radar model with a fixed time correction."""
    return _mixed_fit(
        "radar",
        Correction.NONE,
        data,
        time_col,
        velocity_col,
        athlete_col,
        settings,
        time_correction=time_correction,
        random_effects=random_effects,
        weights=weights,
        start=start,
        na_rm=na_rm,
    )


def fit_mixed_radar_with_time_correction(
    data: pd.DataFrame,
    time_col: str = Columns.TIME,
    velocity_col: str = Columns.VELOCITY,
    athlete_col: str = Columns.ATHLETE,
    random_effects: Sequence[str] | None = None,
    corrections_as_random_effects: bool = False,
    weights: ArrayLike | None = None,
    start: Mapping[str, float] | None = None,
    na_rm: bool = False,
    settings: Settings | None = None,
) -> MixedFitResult:
    """Fit a mixed-effects radar model estimating the time correction."""
    return _mixed_fit(
        "radar",
        Correction.TIME,
        data,
        time_col,
        velocity_col,
        athlete_col,
        settings,
        random_effects=random_effects,
        corrections_as_random_effects=corrections_as_random_effects,
        weights=weights,
        start=start,
        na_rm=na_rm,
    )
