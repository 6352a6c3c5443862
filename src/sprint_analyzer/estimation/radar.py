"""
Radar (velocity trace) estimator.

Estimates MSS and TAU from instantaneous velocity sampled over time, with
``velocity = v(time + time_correction)``. A distance correction is not
identifiable from a velocity trace, so only the fixed and estimated time
correction variants exist.
"""

from collections.abc import Mapping

from ..data.observations import ArrayLike
from ..models import Correction, FitResult
from ..settings import Settings
from .base import BaseEstimator


class RadarEstimator(BaseEstimator):
    """Estimator for radar or laser velocity traces."""

    kind = "radar"

    def fit(  # pylint: disable=arguments-differ
        self,
        time: ArrayLike,
        velocity: ArrayLike,
        time_correction: float | ArrayLike = 0.0,
        weights: ArrayLike | None = None,
        start: Mapping[str, float] | None = None,
        na_rm: bool = False,
        LOOCV: bool = False,  # pylint: disable=C0103
    ) -> FitResult:
        """
        Estimate MSS and TAU with a fixed time correction.

        Args:
            time: Sample times in s
            velocity: Velocities in m/s
            time_correction: Scalar or per-sample correction added to times
            weights: Optional per-sample weights
            start: Start value overrides for MSS and TAU
            na_rm: Drop samples with missing values instead of failing
            LOOCV: Also run leave-one-out cross-validation

        Returns:
            FitResult
        """
        return self._fit(
            time,
            velocity,
            Correction.NONE,
            time_correction=time_correction,
            weights=weights,
            start=start,
            na_rm=na_rm,
            LOOCV=LOOCV,
        )

    def fit_with_time_correction(
        self,
        time: ArrayLike,
        velocity: ArrayLike,
        weights: ArrayLike | None = None,
        start: Mapping[str, float] | None = None,
        na_rm: bool = False,
        LOOCV: bool = False,  # pylint: disable=C0103
    ) -> FitResult:
        """Estimate MSS, TAU and the time correction."""
        return self._fit(
            time,
            velocity,
            Correction.TIME,
            weights=weights,
            start=start,
            na_rm=na_rm,
            LOOCV=LOOCV,
        )


# pylint: disable=C0103
def fit_radar(
    time: ArrayLike,
    velocity: ArrayLike,
    time_correction: float | ArrayLike = 0.0,
    LOOCV: bool = False,
    weights: ArrayLike | None = None,
    start: Mapping[str, float] | None = None,
    na_rm: bool = False,
    settings: Settings | None = None,
) -> FitResult:
    """Estimate MSS and TAU from a velocity trace with a fixed time correction."""
    return RadarEstimator(settings).fit(
        time,
        velocity,
        time_correction=time_correction,
        weights=weights,
        start=start,
        na_rm=na_rm,
        LOOCV=LOOCV,
    )


def fit_radar_with_time_correction(
    time: ArrayLike,
    velocity: ArrayLike,
    LOOCV: bool = False,
    weights: ArrayLike | None = None,
    start: Mapping[str, float] | None = None,
    na_rm: bool = False,
    settings: Settings | None = None,
) -> FitResult:
    """Estimate MSS, TAU and the time correction from a velocity trace."""
    return RadarEstimator(settings).fit_with_time_correction(
        time, velocity, weights=weights, start=start, na_rm=na_rm, LOOCV=LOOCV
    )
