"""
Lambert-W evaluation on the principal branch.

Inverting the mono-exponential distance-time relation requires W0 on the
interval [-1/e, 0], where it is real valued and ranges over [-1, 0].
"""

import numpy as np
from scipy.special import lambertw

from ..exceptions import DomainError

BRANCH_POINT = -np.exp(-1.0)


def lambert_w0(x: np.ndarray | float) -> np.ndarray:
    """
    Evaluate the principal branch of the Lambert-W function.

    Args:
        x: Argument(s) in [-1/e, 0]

    Returns:
        Real values of W0(x), same shape as ``x``

    Raises:
        DomainError: If any argument lies outside [-1/e, 0] or is not finite
    """
    x = np.asarray(x, dtype=float)
    if not np.all(np.isfinite(x)):
        raise DomainError("Lambert-W argument must be finite")
    if np.any(x < BRANCH_POINT) or np.any(x > 0):
        raise DomainError(
            f"Lambert-W argument outside [-1/e, 0]: min={x.min()!r}, max={x.max()!r}"
        )
    return _real_w0(x)


def lambert_w0_or_nan(x: np.ndarray | float) -> np.ndarray:
    """Evaluate W0 and return NaN where ``x`` lies below the branch point."""
    x = np.asarray(x, dtype=float)
    valid = np.isfinite(x) & (x >= BRANCH_POINT) & (x <= 0)
    w = _real_w0(np.where(valid, x, 0.0))
    return np.where(valid, w, np.nan)


def _real_w0(x: np.ndarray) -> np.ndarray:
    # scipy returns a complex result with a vanishing imaginary part on this domain.
    # Tighter tolerances than the default make Halley iteration fail near -1/e.
    w = lambertw(x, k=0).real
    # W0(-1/e) = -1 exactly; lambertw can overshoot by rounding at the branch point
    return np.where(x == BRANCH_POINT, -1.0, w)
