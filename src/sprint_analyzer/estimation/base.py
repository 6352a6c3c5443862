"""
Shared fitting machinery for individual split and radar estimators.

This module provides the abstract base class every individual estimator
inherits from. The base class owns the working frame construction, the
solver call, the model fit metrics and leave-one-out cross-validation so
that concrete estimators only select the observation kind and the
correction variant.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping

import numpy as np
import pandas as pd

from ..constants import Columns, ParameterNames
from ..data.observations import (
    ArrayLike,
    ObservationProcessor,
    ObservationProcessorProtocol,
    count_check,
)
from ..exceptions import FitError, LOOCVError
from ..models import Correction, FitResult, LOOCVResult, ModelFit, ParameterSet
from ..settings import Settings
from .equations import ModelEquation
from .solvers import LeastSquaresSolver, NonlinearSolverProtocol, SolverResult


class BaseEstimator(ABC):
    """
    Abstract base class for individual (single athlete) estimators.

    Subclasses set :attr:`kind` and expose one public method per correction
    variant, all delegating to :meth:`_fit`.
    """

    kind: str = ""

    def __init__(
        self,
        settings: Settings | None = None,
        solver: NonlinearSolverProtocol | None = None,
    ):
        """
        Initialize the estimator.

        Args:
            settings: Application settings; loaded from the environment if omitted
            solver: Nonlinear least squares solver; defaults to trust region
                least squares configured from ``settings.solver``
        """
        self.settings = settings or Settings()
        self.solver = solver or LeastSquaresSolver(self.settings.solver)
        self.processor: ObservationProcessorProtocol = ObservationProcessor(self.kind)
        self.logger = logging.getLogger(__name__)

    @property
    def prediction_column(self) -> str:
        """Name of the predicted target column in result frames."""
        if self.kind == "splits":
            return Columns.PRED_TIME
        return Columns.PRED_VELOCITY

    @abstractmethod
    def fit(self, x: ArrayLike, y: ArrayLike, **kwargs) -> FitResult:
        """Fit the model with a fixed (caller supplied) time correction."""

    # pylint: disable=R0913
    def _fit(
        self,
        x: ArrayLike,
        y: ArrayLike,
        correction: Correction,
        time_correction: float | ArrayLike = 0.0,
        weights: ArrayLike | None = None,
        start: Mapping[str, float] | None = None,
        na_rm: bool = False,
        LOOCV: bool = False,  # pylint: disable=C0103
    ) -> FitResult:
        """
        Validate observations, solve, and assemble the FitResult.

        Args:
            x: Predictor values (distance for splits, time for radar)
            y: Target values (time for splits, velocity for radar)
            correction: Which corrections are free parameters
            time_correction: Fixed time correction, ignored when it is free
            weights: Optional non-negative per-observation weights
            start: Start value overrides for the free parameters
            na_rm: Drop rows with missing values instead of failing
            LOOCV: Also run leave-one-out cross-validation

        Returns:
            FitResult with parameters, model fit and the working data

        Raises:
            InputError: If observations are invalid or too few
            ConvergenceError: If the solver does not converge
            LOOCVError: If any leave-one-out refit fails
        """
        equation = ModelEquation(self.kind, correction)
        frame = self.processor.build(
            x, y, time_correction=time_correction, weights=weights, na_rm=na_rm
        )
        count_check(len(frame), len(equation.parameters))
        start_vector = equation.start_vector(self.settings.start_values, start)
        if LOOCV:
            count_check(len(frame) - 1, len(equation.parameters))

        self.logger.info(
            f"Fitting {self.kind} model ({correction.value}) "
            f"on {len(frame)} observations"
        )
        theta, solution = self._solve(equation, frame, start_vector)
        parameters = equation.parameter_set(theta, frame[Columns.TIME_CORRECTION])

        predicted = self._predict_rows(equation, theta, frame)
        n, p = len(frame), len(equation.parameters)
        rse = float(np.sqrt(np.sum(solution.residuals**2) / (n - p)))
        model_fit = ModelFit.from_predictions(
            frame[self.processor.target].to_numpy(), predicted, rse
        )
        self.logger.info(
            f"Fitted {self.kind} model: MSS={parameters.MSS:.3f}, "
            f"TAU={parameters.TAU:.3f}, RSE={rse:.4g}"
        )

        loocv = None
        if LOOCV:
            loocv = self._loocv(equation, frame, start_vector)

        return FitResult(
            parameters=parameters,
            model_fit=model_fit,
            data=self._result_frame(equation, frame, predicted),
            correction=correction,
            kind=self.kind,
            model=solution,
            loocv=loocv,
        )

    def _solve(
        self, equation: ModelEquation, frame: pd.DataFrame, start: np.ndarray
    ) -> tuple[np.ndarray, SolverResult]:
        x = frame[self.processor.predictor].to_numpy()
        y = frame[self.processor.target].to_numpy()
        tc = frame[Columns.TIME_CORRECTION].to_numpy()
        sqrt_w = np.sqrt(frame[Columns.WEIGHTS].to_numpy())

        def residuals(theta: np.ndarray) -> np.ndarray:
            return (y - equation.evaluate(theta, x, tc)) * sqrt_w

        solution = self.solver.solve(residuals, start, equation.parameters)
        equation.check_solution(solution.x)
        return solution.x, solution

    def _predict_rows(
        self, equation: ModelEquation, theta: np.ndarray, frame: pd.DataFrame
    ) -> np.ndarray:
        return equation.evaluate(
            theta,
            frame[self.processor.predictor].to_numpy(),
            frame[Columns.TIME_CORRECTION].to_numpy(),
        )

    def _loocv(
        self, equation: ModelEquation, frame: pd.DataFrame, start: np.ndarray
    ) -> LOOCVResult:
        """
        Refit with each observation held out and predict the held-out row.

        Every refit reuses the start vector and variant of the full fit.
        """
        self.logger.info(f"Running LOOCV over {len(frame)} observations")
        parameters: list[ParameterSet] = []
        predictions = np.empty(len(frame))
        residuals = np.empty(len(frame))

        for i in range(len(frame)):
            train = frame.drop(index=i)
            held_out = frame.loc[[i]]
            try:
                theta, _ = self._solve(equation, train, start)
                parameters.append(
                    equation.parameter_set(theta, train[Columns.TIME_CORRECTION])
                )
            except FitError as e:
                raise LOOCVError(
                    f"LOOCV refit excluding observation {i} failed: {e}", index=i
                ) from e
            predictions[i] = self._predict_rows(equation, theta, held_out)[0]
            residuals[i] = (
                held_out[self.processor.target].iloc[0] - predictions[i]
            ) * np.sqrt(held_out[Columns.WEIGHTS].iloc[0])

        n, p = len(frame), len(equation.parameters)
        rse = float(np.sqrt(np.sum(residuals**2) / (n - p)))
        observed = frame[self.processor.target].to_numpy()
        data = frame[[self.processor.predictor, self.processor.target]].copy()
        data[self.prediction_column] = predictions

        return LOOCVResult(
            parameters=parameters,
            predictions=predictions,
            model_fit=ModelFit.from_predictions(observed, predictions, rse),
            data=data,
        )

    def _result_frame(
        self, equation: ModelEquation, frame: pd.DataFrame, predicted: np.ndarray
    ) -> pd.DataFrame:
        data = frame.copy()
        if ParameterNames.TIME_CORRECTION in equation.parameters:
            # Estimated corrections live in the ParameterSet
            data = data.drop(columns=Columns.TIME_CORRECTION)
        data[self.prediction_column] = predicted
        return data
