"""
Cholesky factorization and whitening.

The factorization is recomputed on every call: covariance parameters
change between optimizer iterations, so nothing is cached.
"""

from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy import linalg as sla

from pymixed.core.exceptions import NotPositiveDefiniteError


def cholesky_lower(
    A: NDArray[np.floating[Any]],
    matrix_name: str = 'A',
) -> NDArray[np.floating[Any]]:
    """
    Lower-triangular Cholesky factor L with A = LL'.

    Raises:
        NotPositiveDefiniteError: If A is not (numerically) positive definite
    """
    try:
        return sla.cholesky(A, lower=True, check_finite=False)
    except sla.LinAlgError as e:
        min_eig = None
        if np.all(np.isfinite(A)):
            min_eig = float(np.min(np.linalg.eigvalsh(A)))
        raise NotPositiveDefiniteError(
            f"{matrix_name} is not positive definite: {e}",
            matrix_name=matrix_name,
            min_eigenvalue=min_eig,
        ) from e


def whiten(
    L: NDArray[np.floating[Any]],
    B: NDArray[np.floating[Any]],
) -> NDArray[np.floating[Any]]:
    """
    Compute L⁻¹B by forward substitution.

    If A = LL' is the covariance of the rows of B, the result has
    identity covariance.
    """
    return sla.solve_triangular(L, B, lower=True, check_finite=False)


def cho_solve_spd(
    A: NDArray[np.floating[Any]],
    B: NDArray[np.floating[Any]],
    matrix_name: str = 'A',
) -> NDArray[np.floating[Any]]:
    """Solve AX = B for symmetric positive definite A via its Cholesky factor."""
    L = cholesky_lower(A, matrix_name=matrix_name)
    tmp = sla.solve_triangular(L, B, lower=True, check_finite=False)
    return sla.solve_triangular(L.T, tmp, lower=False, check_finite=False)
