"""
Common data types for the penalized spline.
"""

from dataclasses import dataclass

from numpy.typing import NDArray


@dataclass(frozen=True)
class SplineParams:
    """
    Parameter payload for a fitted penalized spline.
    """
    # Coefficients on the original basis [1, x, R(x, z_1), ...]
    coefficients: NDArray              # β̂ (k + 2,)
    knots: NDArray

    # Smoothing
    lam: float                         # λ, given or estimated as σ²/τ²
    edf: float                         # trace of the influence matrix
    gcv: float
    rss: float
    sigma: float                       # sqrt(rss / (n - edf))

    # Predictions
    fitted_values: NDArray
    residuals: NDArray

    n_obs: int
    method: str                        # 'penalized_ls', 'mixed_ml' or 'gcv'
    converged: bool
