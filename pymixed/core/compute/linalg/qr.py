"""
QR decomposition and least squares.

All fixed-effect coefficient fits (plain OLS, OLS on whitened data, and the
augmented penalized spline system) go through qr_solve_cpu so the rank
check is applied identically everywhere.
"""

from dataclasses import dataclass
from typing import Literal, Any
import numpy as np
from numpy.typing import NDArray
from scipy.linalg import solve_triangular

from pymixed.core.exceptions import RankDeficientDesignError
from pymixed.core.compute.tolerances import RANK_RTOL


@dataclass(frozen=True)
class QRResult:
    """
    Result of QR decomposition.

    Attributes:
        Q: Orthogonal matrix (n x k where k = min(n, p) for reduced mode)
        R: Upper triangular matrix (k x p)
        rank: Numerical rank determined from R diagonal
    """
    Q: NDArray[np.floating[Any]]
    R: NDArray[np.floating[Any]]
    rank: int


def qr_cpu(
    X: NDArray[np.floating[Any]],
    mode: Literal['reduced', 'complete'] = 'reduced'
) -> QRResult:
    """
    QR decomposition using LAPACK (via NumPy).

    Computes X = QR where Q is orthogonal and R is upper triangular.

    Args:
        X: Matrix to decompose (n x p)
        mode: 'reduced' for economy QR, 'complete' for full QR

    Returns:
        QRResult with Q, R, and numerical rank
    """
    Q, R = np.linalg.qr(X, mode=mode)

    diag_R = np.abs(np.diag(R))
    if len(diag_R) > 0 and diag_R[0] > 0:
        tol = max(X.shape) * RANK_RTOL * np.max(diag_R)
        rank = int(np.sum(diag_R > tol))
    else:
        rank = 0

    return QRResult(Q=Q, R=R, rank=rank)


def qr_solve_cpu(
    X: NDArray[np.floating[Any]],
    y: NDArray[np.floating[Any]],
    check_rank: bool = True,
    matrix_name: str = 'X',
) -> NDArray[np.floating[Any]]:
    """
    Solve least squares via QR decomposition.

    Solves: min_β ||y - Xβ||² via X = QR, β = R⁻¹ Q'y.

    Args:
        X: Design matrix (n x p), must have n >= p
        y: Response vector (n,)
        check_rank: If True, raise on rank-deficient X
        matrix_name: Name used in the error message

    Returns:
        Coefficient vector β (p,)

    Raises:
        RankDeficientDesignError: If X is rank-deficient and check_rank=True
    """
    n, p = X.shape
    if n < p:
        raise RankDeficientDesignError(
            f"{matrix_name} has more columns ({p}) than rows ({n})",
            matrix_name=matrix_name,
            rank=n,
            expected_rank=p,
        )

    qr_result = qr_cpu(X, mode='reduced')

    if check_rank and qr_result.rank < p:
        raise RankDeficientDesignError(
            f"{matrix_name} is rank-deficient: rank={qr_result.rank}, expected={p}. "
            f"This indicates perfect multicollinearity.",
            matrix_name=matrix_name,
            rank=qr_result.rank,
            expected_rank=p
        )

    Qty = qr_result.Q.T @ y
    beta = solve_triangular(qr_result.R[:p, :p], Qty[:p], lower=False)

    return beta
