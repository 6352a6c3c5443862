"""
Equation templates handed to the solvers.

One template covers every model variant. The ``Correction`` tag selects which
parameters are free and the observation kind selects the target:

    splits: time = t(distance + distance_correction) - time_correction
    radar:  velocity = v(time + time_correction)

A correction that is not free is taken from the working frame (time) or is
zero (distance).
"""

from collections.abc import Mapping
from dataclasses import dataclass

import numpy as np

from ..constants import ParameterNames
from ..exceptions import ConvergenceError, InputError
from ..kinematics.model import mono_exponential_time, mono_exponential_velocity
from ..models import Correction, ParameterSet
from ..settings import StartValues

FREE_PARAMETERS: dict[Correction, tuple[str, ...]] = {
    Correction.NONE: (ParameterNames.MSS, ParameterNames.TAU),
    Correction.TIME: (
        ParameterNames.MSS,
        ParameterNames.TAU,
        ParameterNames.TIME_CORRECTION,
    ),
    Correction.TIME_AND_DISTANCE: (
        ParameterNames.MSS,
        ParameterNames.TAU,
        ParameterNames.TIME_CORRECTION,
        ParameterNames.DISTANCE_CORRECTION,
    ),
}


@dataclass(frozen=True)
class ModelEquation:
    """Mono-exponential equation template for one kind and correction variant."""

    kind: str
    correction: Correction

    def __post_init__(self) -> None:
        if self.kind not in ("splits", "radar"):
            raise ValueError(f"Unknown model kind: {self.kind!r}")
        if self.kind == "radar" and self.correction is Correction.TIME_AND_DISTANCE:
            raise InputError(
                "Radar models cannot estimate a distance correction: velocity "
                "over time does not depend on it"
            )

    @property
    def parameters(self) -> tuple[str, ...]:
        """Names of the free parameters, in solver order."""
        return FREE_PARAMETERS[self.correction]

    def start_vector(
        self, defaults: StartValues, overrides: Mapping[str, float] | None = None
    ) -> np.ndarray:
        """
        Build the solver start vector.

        Args:
            defaults: Configured start values
            overrides: Per-call start values for any subset of free parameters

        Returns:
            Start vector ordered as :attr:`parameters`
        """
        overrides = dict(overrides or {})
        unknown = set(overrides) - set(self.parameters)
        if unknown:
            raise InputError(
                f"Start values given for non-free parameters: {sorted(unknown)}"
            )
        start = {name: getattr(defaults, name) for name in self.parameters}
        start.update(overrides)
        vector = np.array([float(start[name]) for name in self.parameters])
        if vector[0] <= 0 or vector[1] <= 0:
            raise InputError("MSS and TAU start values must be positive")
        return vector

    def evaluate(
        self,
        theta: np.ndarray,
        x: np.ndarray,
        time_correction: np.ndarray | float = 0.0,
    ) -> np.ndarray:
        """
        Evaluate the template.

        Args:
            theta: Free parameters, shape (p,) or (n, p) for per-row parameters
            x: Predictor values (distance for splits, time for radar)
            time_correction: Fixed time correction, used when it is not free

        Returns:
            Predicted target values; NaN where the parameters are infeasible
        """
        theta = np.asarray(theta, dtype=float)
        x = np.asarray(x, dtype=float)
        values = {name: theta[..., i] for i, name in enumerate(self.parameters)}
        mss = values[ParameterNames.MSS]
        tau = values[ParameterNames.TAU]
        tc = values.get(ParameterNames.TIME_CORRECTION, time_correction)

        with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
            if self.kind == "splits":
                dc = values.get(ParameterNames.DISTANCE_CORRECTION, 0.0)
                return mono_exponential_time(x + dc, mss, tau) - tc
            return mono_exponential_velocity(x + tc, mss, tau)

    def parameter_set(
        self, theta: np.ndarray, time_correction: np.ndarray | float = 0.0
    ) -> ParameterSet:
        """
        Convert a solution vector into a ParameterSet.

        When the time correction is not free, the fixed correction is recorded;
        a per-observation correction is summarized by its mean.

        Raises:
            ConvergenceError: If MSS or TAU is not positive and finite
        """
        values = dict(zip(self.parameters, np.asarray(theta, dtype=float)))
        self.check_solution(np.asarray(theta, dtype=float))
        values.setdefault(
            ParameterNames.TIME_CORRECTION, float(np.mean(time_correction))
        )
        return ParameterSet(**{k: float(v) for k, v in values.items()})

    def check_solution(self, theta: np.ndarray) -> None:
        """Reject solutions with non-finite values or non-positive MSS/TAU."""
        if not np.all(np.isfinite(theta)):
            raise ConvergenceError(
                "Solver returned non-finite parameters",
                last_iterate=theta,
                reason="non-finite",
            )
        if theta[0] <= 0 or theta[1] <= 0:
            raise ConvergenceError(
                f"Degenerate fit: MSS={theta[0]!r}, TAU={theta[1]!r} must be positive",
                last_iterate=theta,
                reason="non-positive MSS or TAU",
            )
