"""
Spline basis and roughness penalty over a fixed knot sequence.

For k knots z_1..z_k the basis has q = k + 2 columns:

    [1, x, R(x, z_1), ..., R(x, z_k)]

and the penalty S is zero except for the k × k block R(z_a, z_b), so the
intercept and linear columns are unpenalized.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pymixed.core.exceptions import InvalidKnotSequenceError, ValidationError
from pymixed.core.validation import check_array
from pymixed.smoothing._kernel import spline_kernel


def validate_knots(knots: ArrayLike) -> NDArray:
    """Check a knot sequence and return it as a float array.

    Raises:
        InvalidKnotSequenceError: If the sequence is empty, non-finite,
            contains duplicates, or leaves the open interval (0, 1).
    """
    try:
        z = check_array(knots, 'knots').ravel()
    except ValidationError as e:
        raise InvalidKnotSequenceError(str(e), knots=knots, reason='non_numeric') from e

    if z.size == 0:
        raise InvalidKnotSequenceError(
            "knots: at least one knot required", knots=knots, reason='empty'
        )
    if not np.all(np.isfinite(z)):
        raise InvalidKnotSequenceError(
            f"knots: contains non-finite values {z.tolist()}",
            knots=knots, reason='non_finite',
        )
    outside = z[(z <= 0.0) | (z >= 1.0)]
    if outside.size > 0:
        raise InvalidKnotSequenceError(
            f"knots: values must lie strictly inside (0, 1), got {outside.tolist()}",
            knots=knots, reason='out_of_domain',
        )
    uniq, counts = np.unique(z, return_counts=True)
    if np.any(counts > 1):
        raise InvalidKnotSequenceError(
            f"knots: duplicate values {uniq[counts > 1].tolist()}",
            knots=knots, reason='duplicate',
        )
    return z


def default_knots(k: int) -> NDArray:
    """Evenly spaced interior knots j/(k+1), j = 1..k."""
    if k < 1:
        raise InvalidKnotSequenceError(
            f"k: need at least one knot, got {k}", reason='empty'
        )
    return np.arange(1, k + 1, dtype=np.float64) / (k + 1)


def rescale_unit(x: ArrayLike) -> NDArray:
    """Map a covariate affinely onto [0, 1] (min → 0, max → 1).

    Raises:
        ValidationError: If x is constant.
    """
    x = check_array(x, 'x').ravel()
    lo, hi = float(np.min(x)), float(np.max(x))
    if hi <= lo:
        raise ValidationError(f"x: constant covariate ({lo}) cannot be rescaled")
    return (x - lo) / (hi - lo)


def spline_design(x: ArrayLike, knots: ArrayLike) -> NDArray:
    """Build the n × (k+2) spline design matrix.

    Args:
        x: Covariate values (n,), expected in [0, 1].
        knots: Knot sequence (k,).

    Returns:
        Design matrix with columns [1, x, R(x, z_1), ..., R(x, z_k)].
    """
    z = validate_knots(knots)
    x = check_array(x, 'x').ravel()
    n, k = x.shape[0], z.shape[0]

    X = np.empty((n, k + 2), dtype=np.float64)
    X[:, 0] = 1.0
    X[:, 1] = x
    X[:, 2:] = spline_kernel(x[:, np.newaxis], z[np.newaxis, :])
    return X


def penalty_matrix(knots: ArrayLike) -> NDArray:
    """Build the (k+2) × (k+2) roughness penalty S.

    S[2:, 2:] = R(z_a, z_b); everything else is zero.
    """
    z = validate_knots(knots)
    k = z.shape[0]

    S = np.zeros((k + 2, k + 2), dtype=np.float64)
    block = spline_kernel(z[:, np.newaxis], z[np.newaxis, :])
    S[2:, 2:] = 0.5 * (block + block.T)
    return S
