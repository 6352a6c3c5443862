"""
Numerical solvers behind the estimators.

Two narrow interfaces are defined:
- NonlinearSolverProtocol: nonlinear least squares over a residual function
- MixedSolverProtocol: hierarchical nonlinear least squares with one level of
  grouping (fixed effects plus per-group random deviations)

The default implementations build on ``scipy.optimize.least_squares``. The
mixed solver is a penalized nonlinear least squares (PNLS) fitter: it
alternates a joint PNLS step over fixed and random effects with an EM update
of the random-effects covariance and the residual variance, computed from the
model linearized around the current random effects.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

import numpy as np
from scipy.optimize import OptimizeResult, least_squares

from ..constants import SolverDefaults
from ..exceptions import ConvergenceError, DegenerateFitError
from ..settings import SolverConfig

logger = logging.getLogger(__name__)

ResidualFunction = Callable[[np.ndarray], np.ndarray]
ModelFunction = Callable[[np.ndarray], np.ndarray]


@dataclass
class SolverResult:
    """Point estimates and diagnostics of a nonlinear least squares fit."""

    x: np.ndarray
    residuals: np.ndarray
    cost: float
    nfev: int
    status: int
    message: str
    optimize_result: OptimizeResult


@dataclass
class MixedSolverResult:
    """Estimates and diagnostics of a mixed-effects fit."""

    fixed: np.ndarray
    random: np.ndarray
    sigma: float
    psi: np.ndarray
    fitted: np.ndarray
    iterations: int


class NonlinearSolverProtocol(Protocol):
    """Protocol for nonlinear least squares solvers."""

    def solve(
        self,
        residuals: ResidualFunction,
        start: np.ndarray,
        names: Sequence[str] | None = None,
    ) -> SolverResult:
        """Minimize the sum of squared residuals starting from ``start``."""
        ...


class MixedSolverProtocol(Protocol):
    """Protocol for hierarchical nonlinear least squares solvers."""

    def solve(
        self,
        model: ModelFunction,
        y: np.ndarray,
        groups: np.ndarray,
        start: np.ndarray,
        random_index: Sequence[int],
        weights: np.ndarray | None = None,
    ) -> MixedSolverResult:
        """Fit fixed effects and per-group random deviations."""
        ...


class LeastSquaresSolver:
    """
    Trust region reflective least squares.

    Non-finite residuals at trial points shrink the trust region, which keeps
    iterates inside the feasible parameter space of the model.
    """

    def __init__(self, config: SolverConfig | None = None):
        """
        Initialize the solver.

        Args:
            config: Convergence controls; defaults are used when omitted
        """
        self.config = config or SolverConfig()

    def solve(
        self,
        residuals: ResidualFunction,
        start: np.ndarray,
        names: Sequence[str] | None = None,
    ) -> SolverResult:
        """
        Minimize ``sum(residuals(x) ** 2)``.

        Args:
            residuals: Residual function of the parameter vector
            start: Starting values
            names: Parameter names used in diagnostics

        Returns:
            SolverResult of the converged fit

        Raises:
            ConvergenceError: If scipy rejects the problem or the evaluation
                budget is exhausted before convergence
        """
        start = np.asarray(start, dtype=float)
        label = ", ".join(names) if names else f"{len(start)} parameters"
        tol = self.config.tolerance
        try:
            result = least_squares(
                residuals,
                start,
                method="trf",
                x_scale="jac",
                ftol=tol,
                xtol=tol,
                gtol=tol,
                max_nfev=self.config.max_iterations,
            )
        except ValueError as e:
            raise ConvergenceError(
                f"Least squares failed for {label}: {e}",
                last_iterate=start,
                reason=str(e),
            ) from e

        logger.debug(
            f"least_squares [{label}]: status={result.status}, "
            f"nfev={result.nfev}, cost={result.cost:.3e}"
        )
        if not result.success:
            raise ConvergenceError(
                f"Least squares did not converge for {label}: {result.message}",
                last_iterate=result.x,
                reason=result.message,
            )

        return SolverResult(
            x=result.x,
            residuals=result.fun,
            cost=float(result.cost),
            nfev=int(result.nfev),
            status=int(result.status),
            message=str(result.message),
            optimize_result=result,
        )


class PenalizedMixedSolver:
    """
    Penalized nonlinear least squares for one-level nonlinear mixed models.

    The model is ``y_ij = f(beta + b_i) + e_ij`` with ``b_i ~ N(0, Psi)`` on
    the random subset of parameters and ``e_ij ~ N(0, sigma^2)``.
    """

    def __init__(
        self,
        config: SolverConfig | None = None,
        nls_solver: NonlinearSolverProtocol | None = None,
    ):
        """
        Initialize the solver.

        Args:
            config: Convergence controls; defaults are used when omitted
            nls_solver: Inner least squares solver
        """
        self.config = config or SolverConfig()
        self.nls_solver = nls_solver or LeastSquaresSolver(self.config)
        self.logger = logging.getLogger(__name__)

    # pylint: disable=R0913,R0914
    def solve(
        self,
        model: ModelFunction,
        y: np.ndarray,
        groups: np.ndarray,
        start: np.ndarray,
        random_index: Sequence[int],
        weights: np.ndarray | None = None,
    ) -> MixedSolverResult:
        """
        Fit fixed effects and per-group random deviations.

        Args:
            model: Maps per-row parameters of shape (n, p) to predictions (n,)
            y: Observed targets
            groups: Integer group codes 0..M-1 per observation
            start: Fixed-effect starting values
            random_index: Positions of parameters carrying random effects
            weights: Optional non-negative observation weights

        Returns:
            MixedSolverResult

        Raises:
            ConvergenceError: If the inner or outer iterations do not converge
            DegenerateFitError: If the random-effects covariance becomes singular
        """
        y = np.asarray(y, dtype=float)
        groups = np.asarray(groups, dtype=int)
        random_index = list(random_index)
        n_groups = int(groups.max()) + 1
        sqrt_w = np.sqrt(np.ones_like(y) if weights is None else weights)
        p, q = len(start), len(random_index)

        def expand(beta: np.ndarray, b: np.ndarray) -> np.ndarray:
            theta = np.tile(beta, (len(y), 1))
            theta[:, random_index] += b[groups]
            return theta

        # Population fit without random effects gives the starting point
        pooled = self.nls_solver.solve(
            lambda beta: (y - model(expand(beta, np.zeros((n_groups, q))))) * sqrt_w,
            start,
        )
        beta = pooled.x
        b = np.zeros((n_groups, q))
        sigma2 = max(2 * pooled.cost / max(len(y) - p, 1), _VARIANCE_FLOOR)
        scale = np.maximum(np.abs(beta[random_index]), 0.1)
        psi = np.diag((0.1 * scale) ** 2)

        for iteration in range(1, self.config.mixed_max_iterations + 1):
            delta = self._precision_factor(psi, sigma2)
            beta_new, b_new, data_residuals = self._pnls(
                model, y, sqrt_w, expand, beta, b, delta
            )
            psi_new, sigma2_new = self._update_variances(
                model,
                sqrt_w,
                groups,
                expand(beta_new, b_new),
                random_index,
                b_new,
                delta,
                data_residuals,
                sigma2,
            )
            self._check_covariance(psi_new, beta_new[random_index])

            change = max(
                np.max(np.abs(beta_new - beta) / (1 + np.abs(beta))),
                np.max(
                    np.abs(np.sqrt(np.diag(psi_new)) - np.sqrt(np.diag(psi)))
                    / np.sqrt(np.diag(psi))
                ),
                abs(np.sqrt(sigma2_new) - np.sqrt(sigma2)) / np.sqrt(sigma2),
            )
            beta, b, psi, sigma2 = beta_new, b_new, psi_new, sigma2_new
            self.logger.debug(f"PNLS iteration {iteration}: change={change:.3e}")

            if change < self.config.mixed_tolerance:
                return MixedSolverResult(
                    fixed=beta,
                    random=b,
                    sigma=float(np.sqrt(sigma2)),
                    psi=psi,
                    fitted=model(expand(beta, b)),
                    iterations=iteration,
                )

        raise ConvergenceError(
            "Mixed-effects fit did not converge in "
            f"{self.config.mixed_max_iterations} iterations",
            last_iterate=beta,
            reason="maximum iterations reached",
        )

    def _pnls(
        self,
        model: ModelFunction,
        y: np.ndarray,
        sqrt_w: np.ndarray,
        expand: Callable[[np.ndarray, np.ndarray], np.ndarray],
        beta: np.ndarray,
        b: np.ndarray,
        delta: np.ndarray,
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Jointly minimize data residuals plus the random-effects penalty."""
        p = len(beta)
        n_groups, q = b.shape

        def residuals(z: np.ndarray) -> np.ndarray:
            beta_z = z[:p]
            b_z = z[p:].reshape(n_groups, q)
            data = (y - model(expand(beta_z, b_z))) * sqrt_w
            penalty = (b_z @ delta.T).ravel()
            return np.concatenate([data, penalty])

        result = self.nls_solver.solve(residuals, np.concatenate([beta, b.ravel()]))
        beta_new = result.x[:p]
        b_new = result.x[p:].reshape(n_groups, q)
        return beta_new, b_new, result.residuals[: len(y)]

    def _update_variances(
        self,
        model: ModelFunction,
        sqrt_w: np.ndarray,
        groups: np.ndarray,
        theta: np.ndarray,
        random_index: list[int],
        b: np.ndarray,
        delta: np.ndarray,
        data_residuals: np.ndarray,
        sigma2: float,
    ) -> tuple[np.ndarray, float]:
        """EM update of Psi and sigma^2 from the linearized model."""
        n_groups, q = b.shape
        z_full = _random_jacobian(model, theta, random_index) * sqrt_w[:, None]
        penalty = delta.T @ delta

        psi_sum = np.zeros((q, q))
        trace_sum = 0.0
        for i in range(n_groups):
            z = z_full[groups == i]
            conditional = sigma2 * np.linalg.inv(z.T @ z + penalty)
            psi_sum += np.outer(b[i], b[i]) + conditional
            trace_sum += float(np.trace(z @ conditional @ z.T))

        psi_new = psi_sum / n_groups
        sigma2_new = (float(data_residuals @ data_residuals) + trace_sum) / len(
            data_residuals
        )
        return psi_new, max(sigma2_new, _VARIANCE_FLOOR)

    def _precision_factor(self, psi: np.ndarray, sigma2: float) -> np.ndarray:
        """Return Delta with ``Delta.T @ Delta == sigma2 * inv(Psi)``."""
        try:
            lower = np.linalg.cholesky(sigma2 * np.linalg.inv(psi))
        except np.linalg.LinAlgError as e:
            raise DegenerateFitError(
                f"Random-effects covariance is not positive definite: {e}"
            ) from e
        return lower.T

    def _check_covariance(self, psi: np.ndarray, random_fixed: np.ndarray) -> None:
        if not np.all(np.isfinite(psi)):
            raise DegenerateFitError("Random-effects covariance is not finite")
        eigenvalues = np.linalg.eigvalsh(psi)
        if eigenvalues.min() <= SolverDefaults.SINGULARITY_THRESHOLD * max(
            eigenvalues.max(), _VARIANCE_FLOOR
        ):
            raise DegenerateFitError(
                "Random-effects covariance is singular "
                f"(eigenvalues {eigenvalues.tolist()}); consider fewer random effects"
            )
        sd = np.sqrt(np.diag(psi))
        collapsed = sd < SolverDefaults.COLLAPSE_THRESHOLD * np.maximum(
            np.abs(random_fixed), 0.1
        )
        if np.any(collapsed):
            raise DegenerateFitError(
                "Random-effects variance collapsed towards zero "
                f"(standard deviations {sd.tolist()}); the data show no "
                "between-athlete variation for these effects"
            )


_VARIANCE_FLOOR = 1e-16


def _random_jacobian(
    model: ModelFunction, theta: np.ndarray, random_index: list[int]
) -> np.ndarray:
    """Central difference derivatives of predictions w.r.t. random parameters."""
    columns = []
    for j in random_index:
        step = SolverDefaults.JACOBIAN_STEP * max(1.0, float(np.max(np.abs(theta[:, j]))))
        up = theta.copy()
        down = theta.copy()
        up[:, j] += step
        down[:, j] -= step
        columns.append((model(up) - model(down)) / (2 * step))
    return np.column_stack(columns)
