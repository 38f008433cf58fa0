"""
Symmetric eigendecomposition.
"""

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy import linalg as sla

from pymixed.core.exceptions import DimensionError


@dataclass(frozen=True)
class EigenResult:
    """
    Eigendecomposition A = U diag(values) U'.

    Attributes:
        values: Eigenvalues in decreasing order (q,)
        vectors: Orthogonal matrix whose columns are the matching
                 eigenvectors (q x q)
    """
    values: NDArray[np.floating[Any]]
    vectors: NDArray[np.floating[Any]]

    def reconstruct(self) -> NDArray[np.floating[Any]]:
        """Return U diag(values) U'."""
        return (self.vectors * self.values) @ self.vectors.T


def eigh_sym(A: NDArray[np.floating[Any]]) -> EigenResult:
    """
    Eigendecomposition of a symmetric matrix, sorted by decreasing eigenvalue.

    Only the lower triangle is referenced by LAPACK, so A is symmetrized
    first to keep rounding asymmetry from leaking into the result.

    Raises:
        DimensionError: If A is not square
    """
    A = np.asarray(A, dtype=np.float64)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise DimensionError(f"A: expected square matrix, got shape {A.shape}")

    A_sym = 0.5 * (A + A.T)
    values, vectors = sla.eigh(A_sym)

    order = np.argsort(values)[::-1]
    return EigenResult(values=values[order], vectors=vectors[:, order])
