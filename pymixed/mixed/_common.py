"""
Common data types for the mixed model.

Frozen parameter payloads that go inside Result[P] envelopes. Each
payload is a pure data container: no methods, no computation.
"""

from dataclasses import dataclass

from numpy.typing import NDArray


@dataclass(frozen=True)
class VarCompSummary:
    """Variance component summary for one source of variation.

    Attributes:
        group: Term name ('group', 'spline', ...) or 'Residual'.
        variance: Estimated variance.
        std_dev: Standard deviation (sqrt of variance).
    """
    group: str
    variance: float
    std_dev: float


@dataclass(frozen=True)
class LMMParams:
    """
    Parameter payload for a fitted mixed model.
    """
    # Fixed effects
    coefficients: NDArray              # b̂ (p,)
    coefficient_names: tuple[str, ...]

    # Variance components (natural scale)
    tau: float                         # random-effect SD
    sigma: float                       # residual SD
    var_components: tuple[VarCompSummary, ...]

    # Model fit
    negloglik: float
    log_likelihood: float
    aic: float
    bic: float
    n_obs: int
    n_random: int                      # columns of Z
    group_levels: NDArray | None

    # Convergence
    converged: bool
    n_iter: int

    # Random effects (BLUPs)
    random_effects: NDArray            # ĝ (m,)

    # Predictions
    fitted_values: NDArray             # Xb̂ + Zĝ (n,)
    residuals: NDArray                 # y - fitted (n,)
    fixed_residuals: NDArray           # y - Xb̂ (n,)

    # Internal
    theta: NDArray                     # converged (log τ, log σ)
