"""
Random-effects design construction and best linear unbiased prediction.

This module handles:
1. Mapping group labels to the one-hot grouping design Z
2. Computing BLUPs of the random effects once the variance components
   have converged

For a single grouping factor with m clusters, Z is n × m with exactly one
1 per row. The random effects are g ~ N(0, τ²I_m), independent of the
residuals ε ~ N(0, σ²I_n).
"""

from __future__ import annotations

from dataclasses import dataclass
import numpy as np
from numpy.typing import NDArray, ArrayLike

from pymixed.core.exceptions import ValidationError
from pymixed.core.compute.linalg import cho_solve_spd


@dataclass(frozen=True)
class GroupingFactor:
    """One grouping factor turned into an indicator design.

    Attributes:
        levels: Sorted unique group labels (m,).
        group_ids: 0-indexed cluster index for every observation (n,).
        Z: One-hot indicator matrix (n, m).
        n_groups: Number of clusters m.
    """
    levels: NDArray
    group_ids: NDArray
    Z: NDArray
    n_groups: int

    @property
    def sizes(self) -> NDArray:
        """Number of observations per cluster (m,)."""
        return np.bincount(self.group_ids, minlength=self.n_groups)


def build_grouping(labels: ArrayLike) -> GroupingFactor:
    """Build the indicator design for one grouping factor.

    Labels may be of any sortable dtype; clusters are ordered by their
    sorted label.

    Args:
        labels: Group label for every observation (n,).

    Returns:
        GroupingFactor with Z of shape (n, m).

    Raises:
        ValidationError: If labels is not 1-D or has fewer than 2 levels.
    """
    labels = np.asarray(labels)
    if labels.ndim != 1:
        raise ValidationError(
            f"groups: expected 1D array of labels, got shape {labels.shape}"
        )

    levels, group_ids = np.unique(labels, return_inverse=True)
    group_ids = group_ids.ravel()
    m = len(levels)
    if m < 2:
        raise ValidationError(
            f"groups: has only {m} level(s), need at least 2"
        )

    n = labels.shape[0]
    Z = np.zeros((n, m), dtype=np.float64)
    Z[np.arange(n), group_ids] = 1.0

    return GroupingFactor(levels=levels, group_ids=group_ids, Z=Z, n_groups=m)


def predict_random_effects(
    tau: float,
    sigma: float,
    Z: NDArray,
    residuals: NDArray,
) -> NDArray:
    """Best linear unbiased predictor of the random effects.

        ĝ = (τ²/σ²) Z' Σ̃⁻¹ r,    Σ̃ = (τ²/σ²) ZZ' + I

    where r = y − Xb are the residuals from the fixed-effects part of the
    converged fit. Σ̃ is the marginal covariance divided by σ², so it is
    always positive definite and the solve goes through its Cholesky
    factor.

    Args:
        tau: Converged random-effect standard deviation (natural scale).
        sigma: Converged residual standard deviation (natural scale).
        Z: Random-effects design (n, m).
        residuals: Fixed-effect residuals y − Xb (n,).

    Returns:
        BLUP vector ĝ (m,).
    """
    ratio = (tau / sigma) ** 2
    n = Z.shape[0]
    Sigma_rel = ratio * (Z @ Z.T) + np.eye(n)
    w = cho_solve_spd(Sigma_rel, residuals, matrix_name='Sigma_rel')
    return ratio * (Z.T @ w)
