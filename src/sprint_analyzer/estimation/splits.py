"""
Split-time estimator.

Estimates MSS and TAU from timing-gate splits (distance, time). Three
variants are available, in increasing parameter count:

- ``fit_splits``: caller supplied time correction, estimates MSS and TAU
- ``fit_splits_with_time_correction``: also estimates the time correction
- ``fit_splits_with_corrections``: also estimates time and distance corrections

Convergence of the nonlinear solver is sensitive to the start values
(MSS=7, TAU=0.8 and zero corrections by default); override them via
``start`` or the ``start_values`` settings group.
"""

from collections.abc import Mapping

from ..data.observations import ArrayLike
from ..models import Correction, FitResult
from ..settings import Settings
from .base import BaseEstimator


class SplitTimeEstimator(BaseEstimator):
    """Estimator for split times measured at known distances."""

    kind = "splits"

    def fit(  # pylint: disable=arguments-differ
        self,
        distance: ArrayLike,
        time: ArrayLike,
        time_correction: float | ArrayLike = 0.0,
        weights: ArrayLike | None = None,
        start: Mapping[str, float] | None = None,
        na_rm: bool = False,
        LOOCV: bool = False,  # pylint: disable=C0103
    ) -> FitResult:
        """
        Estimate MSS and TAU with a fixed time correction.

        The model fitted is ``time = t(distance) - time_correction``.

        Args:
            distance: Split distances in m
            time: Split times in s
            time_correction: Scalar or per-split correction added to times
            weights: Optional per-split weights
            start: Start value overrides for MSS and TAU
            na_rm: Drop splits with missing values instead of failing
            LOOCV: Also run leave-one-out cross-validation

        Returns:
            FitResult
        """
        return self._fit(
            distance,
            time,
            Correction.NONE,
            time_correction=time_correction,
            weights=weights,
            start=start,
            na_rm=na_rm,
            LOOCV=LOOCV,
        )

    def fit_with_time_correction(
        self,
        distance: ArrayLike,
        time: ArrayLike,
        weights: ArrayLike | None = None,
        start: Mapping[str, float] | None = None,
        na_rm: bool = False,
        LOOCV: bool = False,  # pylint: disable=C0103
    ) -> FitResult:
        """Estimate MSS, TAU and the time correction."""
        return self._fit(
            distance,
            time,
            Correction.TIME,
            weights=weights,
            start=start,
            na_rm=na_rm,
            LOOCV=LOOCV,
        )

    def fit_with_corrections(
        self,
        distance: ArrayLike,
        time: ArrayLike,
        weights: ArrayLike | None = None,
        start: Mapping[str, float] | None = None,
        na_rm: bool = False,
        LOOCV: bool = False,  # pylint: disable=C0103
    ) -> FitResult:
        """Estimate MSS, TAU, the time correction and the distance correction."""
        return self._fit(
            distance,
            time,
            Correction.TIME_AND_DISTANCE,
            weights=weights,
            start=start,
            na_rm=na_rm,
            LOOCV=LOOCV,
        )


# pylint: disable=C0103
def fit_splits(
    distance: ArrayLike,
    time: ArrayLike,
    time_correction: float | ArrayLike = 0.0,
    LOOCV: bool = False,
    weights: ArrayLike | None = None,
    start: Mapping[str, float] | None = None,
    na_rm: bool = False,
    settings: Settings | None = None,
) -> FitResult:
    """
    Estimate MSS and TAU from split times with a fixed time correction.

    Example:
        >>> result = fit_splits([5, 10, 20, 30, 40], [1.2, 1.9, 3.1, 4.2, 5.3])
        >>> result.parameters.MSS
    """
    return SplitTimeEstimator(settings).fit(
        distance,
        time,
        time_correction=time_correction,
        weights=weights,
        start=start,
        na_rm=na_rm,
        LOOCV=LOOCV,
    )


def fit_splits_with_time_correction(
    distance: ArrayLike,
    time: ArrayLike,
    LOOCV: bool = False,
    weights: ArrayLike | None = None,
    start: Mapping[str, float] | None = None,
    na_rm: bool = False,
    settings: Settings | None = None,
) -> FitResult:
    """Estimate MSS, TAU and the time correction from split times."""
    return SplitTimeEstimator(settings).fit_with_time_correction(
        distance, time, weights=weights, start=start, na_rm=na_rm, LOOCV=LOOCV
    )


def fit_splits_with_corrections(
    distance: ArrayLike,
    time: ArrayLike,
    LOOCV: bool = False,
    weights: ArrayLike | None = None,
    start: Mapping[str, float] | None = None,
    na_rm: bool = False,
    settings: Settings | None = None,
) -> FitResult:
    """Estimate MSS, TAU and both corrections from split times."""
    return SplitTimeEstimator(settings).fit_with_corrections(
        distance, time, weights=weights, start=start, na_rm=na_rm, LOOCV=LOOCV
    )
