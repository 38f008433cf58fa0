"""
Penalized least squares for the regression spline.

For a fixed smoothing parameter λ the coefficients minimize

    ‖y − Xβ‖² + λ β'Sβ

With S = U D U' and β' = U'β the penalty is λ Σ D_j β'_j², so the
problem is ordinary least squares on the augmented system

    [ X U            ]         [ y ]
    [ 0 | √(λ D_pos) ] β'  ≈   [ 0 ]

solved via QR, never forming X'X + λS. The null-space columns of the
penalty rows are exactly zero, and the columns are scaled to unit norm
before the QR, so a very large λ does not swamp the unpenalized columns
in the rank check. With A = QR the influence matrix is Q₁Q₁' (Q₁ the
first n rows of Q), so the effective degrees of freedom are the sum of
squares of Q₁.

References:
    Wood, S. N. (2017). Generalized Additive Models: An Introduction
    with R (2nd ed.), Sections 4.2-4.3.
"""

from __future__ import annotations

from dataclasses import dataclass
import numpy as np
from numpy.typing import NDArray

from pymixed.core.exceptions import ValidationError
from pymixed.core.compute.linalg import qr_cpu, qr_solve_cpu
from pymixed.smoothing._reparam import mixed_split


@dataclass(frozen=True)
class PLSResult:
    """Result from a penalized least squares solve.

    Attributes:
        beta: Coefficients (q,).
        fitted: Xβ (n,).
        residuals: y − Xβ (n,).
        rss: Residual sum of squares (penalty excluded).
        edf: Effective degrees of freedom, tr(X(X'X + λS)⁻¹X').
        gcv: Generalized cross-validation score n·rss / (n − edf)².
    """
    beta: NDArray
    fitted: NDArray
    residuals: NDArray
    rss: float
    edf: float
    gcv: float


def check_lambda(lam: float) -> float:
    """Return λ as a float, rejecting negative or non-finite values."""
    try:
        lam = float(lam)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"lam: expected a number, got {lam!r}") from e
    if not np.isfinite(lam) or lam < 0:
        raise ValidationError(f"lam: must be finite and >= 0, got {lam}")
    return lam


def gcv_score(n: int, rss: float, edf: float) -> float:
    """GCV score n·rss / (n − edf)², infinite when edf ≥ n."""
    denom = n - edf
    return float(n * rss / denom ** 2) if denom > 0 else float(np.inf)


def _unit_columns(A: NDArray) -> tuple[NDArray, NDArray]:
    """Scale the columns of A to unit norm; all-zero columns are left as is."""
    scale = np.linalg.norm(A, axis=0)
    scale[scale == 0.0] = 1.0
    return A / scale, scale


def _hat_trace(A: NDArray, n: int) -> float:
    """tr(Q₁Q₁') for the QR of an augmented system with n data rows."""
    Q1 = qr_cpu(A, mode='reduced').Q[:n]
    return float(np.sum(Q1 ** 2))


def solve_pls(X: NDArray, y: NDArray, S: NDArray, lam: float) -> PLSResult:
    """Solve the penalized least squares problem for one λ.

    Args:
        X: Spline basis (n, q).
        y: Response (n,).
        S: Penalty matrix (q, q).
        lam: Smoothing parameter λ ≥ 0.

    Returns:
        PLSResult.

    Raises:
        RankDeficientDesignError: If the augmented system is
            rank-deficient (e.g. λ = 0 with fewer distinct covariate
            values than basis columns).
    """
    lam = check_lambda(lam)
    n, q = X.shape

    split = mixed_split(S)
    r = split.n_random
    penalty_rows = np.zeros((r, q), dtype=np.float64)
    penalty_rows[:, :r] = np.diag(np.sqrt(lam * split.D_random))

    A, scale = _unit_columns(np.vstack([X @ split.U, penalty_rows]))
    rhs = np.concatenate([y, np.zeros(r)])

    coef = qr_solve_cpu(A, rhs, matrix_name='augmented spline design') / scale
    beta = split.U @ coef
    edf = _hat_trace(A, n)

    fitted = X @ beta
    residuals = y - fitted
    rss = float(residuals @ residuals)

    return PLSResult(
        beta=beta,
        fitted=fitted,
        residuals=residuals,
        rss=rss,
        edf=edf,
        gcv=gcv_score(n, rss, edf),
    )


def mixed_edf(X_F: NDArray, Z: NDArray, ratio: float) -> float:
    """Effective degrees of freedom of the mixed-model fit X_F b + Z ĝ.

    With g = √ρ·u and ρ = τ²/σ² the fit is least squares on
    [X_F, √ρ Z] with a unit ridge on u, so the trace is taken from the
    augmented system in ρ rather than λ = 1/ρ. ρ = 0 (τ → 0) is the
    unpenalized null-space fit and gives edf = number of columns of X_F.

    Args:
        X_F: Fixed-effects design (n, p), full column rank.
        Z: Random-effects design (n, m).
        ratio: Variance ratio ρ = τ²/σ² ≥ 0.

    Returns:
        tr of the BLUP influence matrix.
    """
    n, p = X_F.shape
    m = Z.shape[1]
    top = np.hstack([X_F, np.sqrt(ratio) * Z])
    bottom = np.hstack([np.zeros((m, p)), np.eye(m)])
    A, _ = _unit_columns(np.vstack([top, bottom]))
    return _hat_trace(A, n)
