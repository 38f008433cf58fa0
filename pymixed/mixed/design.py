"""
Design validation for the single-factor mixed model.

MixedDesign validates and organizes the inputs: the response y, the fixed
effects matrix X, and the random-effects design Z. Z comes either from a
vector of group labels (one-hot grouping design) or is supplied directly
(e.g. the penalized block of a re-parameterized spline).
"""

from __future__ import annotations

from dataclasses import dataclass
import numpy as np
from numpy.typing import NDArray, ArrayLike

from pymixed.core.exceptions import ValidationError
from pymixed.core.validation import (
    check_array, check_finite, check_1d, check_2d,
    check_consistent_length, check_min_samples, check_column_rank,
)
from pymixed.mixed._random_effects import build_grouping


@dataclass(frozen=True)
class MixedDesign:
    """Validated design for a mixed model.

    Attributes:
        y: Response vector (n,).
        X: Fixed effects design matrix (n, p).
        Z: Random effects design matrix (n, m).
        group_levels: Sorted group labels when Z was built from labels,
            else None.
        group_name: Label used in summaries for the random term.
        n: Number of observations.
        p: Number of fixed effect columns.
        m: Number of random effect columns.
    """
    y: NDArray
    X: NDArray
    Z: NDArray
    group_levels: NDArray | None
    group_name: str
    n: int
    p: int
    m: int

    @property
    def is_grouping(self) -> bool:
        """True if Z is a one-hot grouping design built from labels."""
        return self.group_levels is not None

    @staticmethod
    def validate(
        y: ArrayLike,
        X: ArrayLike,
        groups: ArrayLike | None = None,
        Z: ArrayLike | None = None,
        group_name: str = 'group',
    ) -> 'MixedDesign':
        """Validate inputs and create a MixedDesign.

        Exactly one of ``groups`` and ``Z`` must be given.

        Args:
            y: Response vector.
            X: Fixed effects design matrix. If 1-D, treated as a single
               column (include an intercept column explicitly).
            groups: Group label per observation.
            Z: Random effects design matrix.
            group_name: Name of the random term, used in summaries.

        Returns:
            Validated MixedDesign.

        Raises:
            ValidationError: On invalid inputs.
            DimensionError: On inconsistent shapes.
            RankDeficientDesignError: If X is column-rank-deficient.
        """
        y = check_array(y, 'y')
        if y.ndim == 2 and y.shape[1] == 1:
            y = y.ravel()
        check_1d(y, 'y')
        check_finite(y, 'y')
        check_min_samples(y, 3, 'y')
        n = y.shape[0]

        X = check_array(X, 'X')
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        check_2d(X, 'X')
        check_finite(X, 'X')
        check_consistent_length(y, X, names=('y', 'X'))

        if (groups is None) == (Z is None):
            raise ValidationError(
                "Specify exactly one of groups (labels) or Z (design matrix)"
            )

        if groups is not None:
            grouping = build_grouping(groups)
            Z_arr = grouping.Z
            levels = grouping.levels
        else:
            Z_arr = check_array(Z, 'Z')
            if Z_arr.ndim == 1:
                Z_arr = Z_arr.reshape(-1, 1)
            check_2d(Z_arr, 'Z')
            check_finite(Z_arr, 'Z')
            levels = None
        check_consistent_length(y, Z_arr, names=('y', 'Z'))

        p = X.shape[1]
        if n <= p:
            raise ValidationError(
                f"Need more observations than fixed effects: n={n}, p={p}"
            )
        check_column_rank(X, 'X')

        return MixedDesign(
            y=y,
            X=X,
            Z=Z_arr,
            group_levels=levels,
            group_name=group_name,
            n=n,
            p=p,
            m=Z_arr.shape[1],
        )
