"""
Design validation for the penalized cubic regression spline.

SplineDesign validates the covariate, response and knot sequence once
and carries the spline basis X and the roughness penalty S built from
them, so the direct and mixed-model fitting paths share one validated
problem.
"""

from __future__ import annotations

from dataclasses import dataclass
import numpy as np
from numpy.typing import NDArray, ArrayLike

from pymixed.core.validation import (
    check_array, check_finite, check_1d, check_consistent_length,
    check_min_samples,
)
from pymixed.smoothing._basis import validate_knots, spline_design, penalty_matrix


@dataclass(frozen=True)
class SplineDesign:
    """Validated spline problem.

    Attributes:
        x: Covariate (n,), on the unit interval.
        y: Response (n,).
        knots: Knot sequence (k,).
        X: Spline basis (n, k + 2).
        S: Roughness penalty (k + 2, k + 2).
        n: Number of observations.
        q: Basis dimension k + 2.
    """
    x: NDArray
    y: NDArray
    knots: NDArray
    X: NDArray
    S: NDArray
    n: int
    q: int

    @staticmethod
    def validate(x: ArrayLike, y: ArrayLike, knots: ArrayLike) -> 'SplineDesign':
        """Validate inputs and build the basis and penalty.

        Knots are checked before anything else is built.

        Raises:
            InvalidKnotSequenceError: On a bad knot sequence.
            ValidationError: On non-numeric or non-finite data.
            DimensionError: If x and y differ in length or are not 1-D.
        """
        z = validate_knots(knots)

        x = check_array(x, 'x')
        if x.ndim == 2 and x.shape[1] == 1:
            x = x.ravel()
        check_1d(x, 'x')
        check_finite(x, 'x')

        y = check_array(y, 'y')
        if y.ndim == 2 and y.shape[1] == 1:
            y = y.ravel()
        check_1d(y, 'y')
        check_finite(y, 'y')

        check_consistent_length(x, y, names=('x', 'y'))
        check_min_samples(y, 3, 'y')

        X = spline_design(x, z)
        S = penalty_matrix(z)

        return SplineDesign(
            x=x, y=y, knots=z, X=X, S=S,
            n=y.shape[0], q=X.shape[1],
        )
