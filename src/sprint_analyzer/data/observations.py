"""
Observation validation and working frame construction.

Estimators never mutate caller data. Observations are copied into a working
DataFrame, validated and cleaned here before any solver is invoked.
"""

import logging
from typing import Protocol, runtime_checkable

import numpy as np
import pandas as pd

from ..constants import Columns
from ..exceptions import InputError

logger = logging.getLogger(__name__)

ArrayLike = np.ndarray | pd.Series | list[float]


@runtime_checkable
class ObservationProcessorProtocol(Protocol):
    """Protocol for observation processors."""

    predictor: str
    target: str

    def build(
        self,
        x: ArrayLike,
        y: ArrayLike,
        time_correction: float | ArrayLike = 0.0,
        weights: ArrayLike | None = None,
        athlete: ArrayLike | None = None,
        na_rm: bool = False,
    ) -> pd.DataFrame:
        """Build a validated working frame."""
        ...


class ObservationProcessor:
    """
    Builds validated working frames for split-time or radar observations.

    Split frames hold ``distance`` (predictor) and ``time`` (target) columns,
    radar frames hold ``time`` (predictor) and ``velocity`` (target) columns.
    Both carry per-observation ``time_correction`` and ``weights`` columns,
    plus ``athlete`` for long-format multi-athlete data.
    """

    def __init__(self, kind: str):
        """
        Initialize the processor.

        Args:
            kind: Either 'splits' or 'radar'
        """
        if kind == "splits":
            self.predictor, self.target = Columns.DISTANCE, Columns.TIME
        elif kind == "radar":
            self.predictor, self.target = Columns.TIME, Columns.VELOCITY
        else:
            raise ValueError(f"Unknown observation kind: {kind!r}")
        self.kind = kind
        self.logger = logging.getLogger(__name__)

    def build(
        self,
        x: ArrayLike,
        y: ArrayLike,
        time_correction: float | ArrayLike = 0.0,
        weights: ArrayLike | None = None,
        athlete: ArrayLike | None = None,
        na_rm: bool = False,
    ) -> pd.DataFrame:
        """
        Build a working frame from predictor and target vectors.

        Args:
            x: Predictor values (distance for splits, time for radar)
            y: Target values (time for splits, velocity for radar)
            time_correction: Scalar or per-observation time correction
            weights: Optional non-negative per-observation weights
            athlete: Optional per-observation athlete ids
            na_rm: Drop rows containing missing values instead of failing

        Returns:
            Validated working DataFrame with a fresh RangeIndex

        Raises:
            InputError: If vectors are mismatched or values are invalid
        """
        x_arr = self._vector(x, self.predictor)
        y_arr = self._vector(y, self.target)
        n = len(x_arr)
        if len(y_arr) != n:
            raise InputError(
                f"{self.predictor} and {self.target} must have equal length, "
                f"got {n} and {len(y_arr)}"
            )

        df = pd.DataFrame(
            {
                self.predictor: x_arr,
                self.target: y_arr,
                Columns.TIME_CORRECTION: self._broadcast(
                    time_correction, n, Columns.TIME_CORRECTION
                ),
                Columns.WEIGHTS: (
                    np.ones(n)
                    if weights is None
                    else self._broadcast(weights, n, Columns.WEIGHTS)
                ),
            }
        )
        if athlete is not None:
            athlete_arr = np.asarray(athlete)
            if athlete_arr.ndim != 1 or len(athlete_arr) != n:
                raise InputError("athlete must be a vector matching the observations")
            df.insert(0, Columns.ATHLETE, athlete_arr)

        df = self._handle_missing(df, na_rm)
        self._validate_values(df)
        if self.kind == "splits":
            df = self._drop_start_rows(df)
            self._validate_unique_distances(df)

        return df.reset_index(drop=True)

    def _vector(self, values: ArrayLike, name: str) -> np.ndarray:
        try:
            array = np.asarray(values, dtype=float)
        except (TypeError, ValueError) as e:
            raise InputError(f"{name} must be numeric: {e}") from e
        if array.ndim != 1:
            raise InputError(f"{name} must be a one-dimensional vector")
        if len(array) == 0:
            raise InputError(f"{name} must not be empty")
        return array

    def _broadcast(self, values: float | ArrayLike, n: int, name: str) -> np.ndarray:
        array = np.asarray(values, dtype=float)
        if array.ndim == 0:
            return np.full(n, float(array))
        if array.ndim != 1 or len(array) != n:
            raise InputError(
                f"{name} must be a scalar or a vector of length {n}, "
                f"got shape {array.shape}"
            )
        return array.copy()

    def _handle_missing(self, df: pd.DataFrame, na_rm: bool) -> pd.DataFrame:
        """Drop or reject rows containing NaN."""
        missing = df.isna().any(axis=1)
        if not missing.any():
            return df
        if not na_rm:
            raise InputError(
                f"{int(missing.sum())} observation(s) contain missing values; "
                "pass na_rm=True to drop them"
            )
        self.logger.warning(f"Dropping {int(missing.sum())} row(s) with missing values")
        df = df[~missing]
        if df.empty:
            raise InputError("No observations left after removing missing values")
        return df

    def _validate_values(self, df: pd.DataFrame) -> None:
        numeric = df[
            [self.predictor, self.target, Columns.TIME_CORRECTION, Columns.WEIGHTS]
        ]
        if not np.all(np.isfinite(numeric.to_numpy())):
            raise InputError("Observations must be finite")
        if (df[self.predictor] < 0).any():
            raise InputError(f"{self.predictor} must be non-negative")
        if self.kind == "splits" and (df[self.target] < 0).any():
            raise InputError(f"{self.target} must be non-negative")
        if (df[Columns.WEIGHTS] < 0).any():
            raise InputError("weights must be non-negative")

    def _drop_start_rows(self, df: pd.DataFrame) -> pd.DataFrame:
        """Remove zero-distance rows, which carry no information on the curve."""
        start = df[Columns.DISTANCE] == 0
        if start.any():
            self.logger.warning(f"Dropping {int(start.sum())} zero-distance row(s)")
            df = df[~start]
        if (df[Columns.TIME] <= 0).any():
            raise InputError("Split times at positive distances must be positive")
        return df

    def _validate_unique_distances(self, df: pd.DataFrame) -> None:
        keys = [Columns.DISTANCE]
        if Columns.ATHLETE in df.columns:
            keys = [Columns.ATHLETE, Columns.DISTANCE]
        if df.duplicated(subset=keys).any():
            raise InputError("Split distances must be unique per athlete")


def count_check(n_observations: int, n_parameters: int) -> None:
    """
    Require more observations than free parameters.

    Raises:
        InputError: If ``n_observations <= n_parameters``
    """
    if n_observations <= n_parameters:
        raise InputError(
            f"Need at least {n_parameters + 1} observations to estimate "
            f"{n_parameters} parameters, got {n_observations}"
        )
