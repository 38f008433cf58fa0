"""
Marginal covariance of the response.

Integrating the random effects out of y = Xb + Zg + ε with
g ~ N(0, τ²I) and ε ~ N(0, σ²I) gives

    y ~ N(Xb, Σ),    Σ = τ² ZZ' + σ² I.

Σ is a positive combination of a PSD and a PD matrix, so it is positive
definite for every (τ, σ) with σ > 0.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


def marginal_covariance(Z: NDArray, tau: float, sigma: float) -> NDArray:
    """Form Σ = τ²ZZ' + σ²I from scratch.

    Args:
        Z: Random-effects design (n, m).
        tau: Random-effect standard deviation (natural scale).
        sigma: Residual standard deviation (natural scale).

    Returns:
        Σ, shape (n, n).
    """
    n = Z.shape[0]
    Sigma = (tau * tau) * (Z @ Z.T)
    Sigma[np.diag_indices(n)] += sigma * sigma
    return Sigma


def unpack_theta(theta: NDArray) -> tuple[float, float]:
    """Map log-scale (log τ, log σ) to natural-scale (τ, σ)."""
    theta = np.asarray(theta, dtype=np.float64)
    if theta.shape != (2,):
        raise ValueError(
            f"theta: expected (log tau, log sigma) of shape (2,), got {theta.shape}"
        )
    return float(np.exp(theta[0])), float(np.exp(theta[1]))
