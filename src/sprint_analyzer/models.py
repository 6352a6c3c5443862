"""
Data models for the Sprint Analyzer package.

This module defines all the core data structures used throughout the application,
ensuring type safety and data validation using Pydantic models.
"""

import logging
from enum import Enum
from typing import Any

import numpy as np
from pandas import DataFrame
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from .constants import Columns, EnvironmentDefaults

logger = logging.getLogger(__name__)


class Correction(str, Enum):
    """Which start-bias corrections are estimated as free parameters."""

    NONE = "none"
    TIME = "time"
    TIME_AND_DISTANCE = "time_and_distance"


class Environment(BaseModel):
    """Environmental conditions used by the air resistance model."""

    model_config = ConfigDict(frozen=True)

    barometric_pressure: float = Field(
        EnvironmentDefaults.BAROMETRIC_PRESSURE,
        description="Barometric pressure in mmHg",
    )
    air_temperature: float = Field(
        EnvironmentDefaults.AIR_TEMPERATURE, description="Air temperature in deg C"
    )
    wind_velocity: float = Field(
        EnvironmentDefaults.WIND_VELOCITY,
        description="Wind velocity in m/s, positive for a tailwind",
    )

    @field_validator("barometric_pressure")
    @classmethod
    def check_pressure(cls, v: float) -> float:
        """Validate that pressure is positive."""
        if v <= 0:
            raise ValueError("Barometric pressure must be positive")
        return v

    @field_validator("air_temperature")
    @classmethod
    def check_temperature(cls, v: float) -> float:
        """Validate that temperature is above absolute zero."""
        if v <= -273:
            raise ValueError("Air temperature must be above absolute zero")
        return v


# pylint: disable=C0103  # MSS, TAU, MAC and PMAX are the domain names.
class ParameterSet(BaseModel):
    """Mono-exponential sprint parameters with derived quantities."""

    model_config = ConfigDict(frozen=True)

    MSS: float = Field(..., gt=0, description="Maximal sprinting speed in m/s")
    TAU: float = Field(..., gt=0, description="Relative acceleration time constant")
    time_correction: float = Field(0.0, description="Time correction in seconds")
    distance_correction: float = Field(0.0, description="Distance correction in m")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def MAC(self) -> float:
        """Maximal acceleration, MSS / TAU."""
        return self.MSS / self.TAU

    @computed_field  # type: ignore[prop-decorator]
    @property
    def PMAX(self) -> float:
        """Maximal relative power, MSS * MAC / 4."""
        return self.MSS * self.MAC / 4


class ModelFit(BaseModel):
    """Goodness-of-fit metrics of an estimated model."""

    rse: float = Field(..., description="Residual standard error")
    r_squared: float = Field(..., description="Squared correlation observed/predicted")
    min_error: float = Field(..., description="Minimum of predicted - observed")
    max_error: float = Field(..., description="Maximum of predicted - observed")
    rmse: float = Field(..., description="Root mean squared error")

    @classmethod
    def from_predictions(
        cls, observed: np.ndarray, predicted: np.ndarray, rse: float
    ) -> "ModelFit":
        """
        Compute model fit metrics from observed and predicted values.

        Args:
            observed: Observed target values
            predicted: Predicted target values aligned with ``observed``
            rse: Residual standard error reported by the solver

        Returns:
            ModelFit instance
        """
        observed = np.asarray(observed, dtype=float)
        predicted = np.asarray(predicted, dtype=float)
        error = predicted - observed

        if len(observed) > 1 and np.std(observed) > 0 and np.std(predicted) > 0:
            r_squared = float(np.corrcoef(observed, predicted)[0, 1] ** 2)
        else:
            r_squared = float("nan")

        return cls(
            rse=float(rse),
            r_squared=r_squared,
            min_error=float(error.min()),
            max_error=float(error.max()),
            rmse=float(np.sqrt(np.mean(error**2))),
        )


class LOOCVResult(BaseModel):
    """Leave-one-out cross-validation of an individual model."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True, frozen=True, protected_namespaces=()
    )

    parameters: list[ParameterSet] = Field(
        ..., description="Parameters estimated with each observation held out"
    )
    predictions: np.ndarray = Field(
        ..., description="Held-out prediction of each excluded observation"
    )
    model_fit: ModelFit = Field(..., description="Fit metrics on held-out predictions")
    data: DataFrame = Field(..., description="Observations with held-out predictions")

    @property
    def parameters_table(self) -> DataFrame:
        """Return LOOCV parameters as a DataFrame, one row per excluded index."""
        return DataFrame([p.model_dump() for p in self.parameters])


class FitResult(BaseModel):
    """Result of fitting an individual split or radar model."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True, frozen=True, protected_namespaces=()
    )

    parameters: ParameterSet = Field(..., description="Estimated parameters")
    model_fit: ModelFit = Field(..., description="Model fit metrics")
    data: DataFrame = Field(..., description="Working observations with predictions")
    correction: Correction = Field(..., description="Estimated correction variant")
    kind: str = Field(..., description="'splits' or 'radar'")
    model: Any = Field(None, description="Solver state of the final fit")
    loocv: LOOCVResult | None = Field(None, description="LOOCV results if requested")

    def predict(
        self,
        x: np.ndarray | list[float] | float,
        time_correction: np.ndarray | list[float] | float | None = None,
    ) -> np.ndarray:
        """
        Predict the target variable at new predictor values.

        For split models ``x`` are distances and time is returned; for radar
        models ``x`` are times and velocity is returned.

        Args:
            x: Predictor values
            time_correction: Time correction for ``x``; defaults to the
                recorded ``parameters.time_correction``. A fit with a
                per-observation correction records only its mean, so pass the
                per-observation values to reproduce the fitted predictions.
        """
        return _predict(self.kind, self.parameters, self.data, x, time_correction)


class MixedFitResult(BaseModel):
    """Result of fitting a mixed-effects split or radar model."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True, frozen=True, protected_namespaces=()
    )

    fixed: ParameterSet = Field(..., description="Fixed-effect parameters")
    random: dict[str, ParameterSet] = Field(
        ..., description="Per-athlete parameters (fixed + random deviation)"
    )
    random_effects: list[str] = Field(
        ..., description="Parameters modeled with athlete-level random effects"
    )
    model_fit: ModelFit = Field(..., description="Model fit metrics")
    data: DataFrame = Field(..., description="Working observations with predictions")
    correction: Correction = Field(..., description="Estimated correction variant")
    kind: str = Field(..., description="'splits' or 'radar'")
    model: Any = Field(None, description="Mixed solver state")

    @property
    def fixed_table(self) -> DataFrame:
        """Return fixed effects as a one-row DataFrame."""
        return DataFrame([self.fixed.model_dump()])

    @property
    def random_table(self) -> DataFrame:
        """Return per-athlete parameters as a DataFrame."""
        rows = [{"athlete": k, **v.model_dump()} for k, v in self.random.items()]
        return DataFrame(rows)

    def predict(
        self,
        x: np.ndarray | list[float] | float,
        athlete: str | None = None,
        time_correction: np.ndarray | list[float] | float | None = None,
    ) -> np.ndarray:
        """
        Predict at new predictor values for one athlete or the population.

        Args:
            x: Distances (splits) or times (radar)
            athlete: Athlete id; ``None`` uses the fixed effects
            time_correction: Overrides the recorded mean time correction

        Returns:
            Predicted times (splits) or velocities (radar)
        """
        if athlete is None:
            return _predict(self.kind, self.fixed, self.data, x, time_correction)
        athlete = str(athlete)
        rows = self.data[self.data[Columns.ATHLETE].astype(str) == athlete]
        return _predict(self.kind, self.random[athlete], rows, x, time_correction)


def _predict(
    kind: str,
    p: ParameterSet,
    data: DataFrame,
    x: np.ndarray | list[float] | float,
    time_correction: np.ndarray | list[float] | float | None,
) -> np.ndarray:
    from .kinematics.model import (
        predict_time_at_distance,
        predict_velocity_at_time,
    )

    if time_correction is None:
        time_correction = p.time_correction
        if Columns.TIME_CORRECTION in data.columns and data[
            Columns.TIME_CORRECTION
        ].nunique() > 1:
            logger.warning(
                "Fit used a per-observation time correction; predicting with "
                f"its mean {p.time_correction:.4g}"
            )
    else:
        time_correction = np.asarray(time_correction, dtype=float)
    if kind == "splits":
        return predict_time_at_distance(
            x, p.MSS, p.TAU, time_correction, p.distance_correction
        )
    return predict_velocity_at_time(
        x, p.MSS, p.TAU, time_correction, p.distance_correction
    )


class FVProfile(BaseModel):
    """Linear force-velocity profile derived from MSS and TAU."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    bodymass: float = Field(..., description="Body mass in kg")
    F0: float = Field(..., description="Theoretical maximal horizontal force in N")
    F0_rel: float = Field(..., description="F0 per kg body mass")
    V0: float = Field(..., description="Theoretical maximal velocity in m/s")
    Pmax: float = Field(..., description="Maximal power, F0 * V0 / 4, in W")
    Pmax_rel: float = Field(..., description="Pmax per kg body mass")
    FV_slope: float = Field(..., description="Slope of the force-velocity line")
    RFmax: float = Field(..., description="Maximal ratio of force")
    RFmax_cutoff: float = Field(..., description="Time cutoff for the RF fit in s")
    Drf: float = Field(..., description="Decrease in ratio of force per m/s")
    RSE_FV: float = Field(..., description="Residual standard error of FV fit")
    RSE_Drf: float = Field(..., description="Residual standard error of RF fit")
    data: DataFrame = Field(..., description="Simulated kinematic/kinetic trace")
