"""
Mixed-model representation of a penalized spline.

With S = UDU' (eigenvalues decreasing) and β' = U'β, the fit Xβ becomes
XUβ'. Columns of U with zero eigenvalue span the unpenalized (fixed)
space; the rest are penalized. Writing g = D₊^{1/2} β'_R turns the
penalty λβ'Sβ into λ‖g‖², so

    Xβ = X_F β_F + Z g,    X_F = X U_F,   Z = X U_R D₊^{-1/2},

and the penalized least squares fit is the BLUP of a mixed model with
g ~ N(0, (σ²/λ) I), i.e. λ = σ²/τ².

Which eigenvalues count as zero is decided by NULL_EIGENVALUE_RTOL
relative to the largest eigenvalue; the null dimension is measured, not
assumed.
"""

from __future__ import annotations

from dataclasses import dataclass
import numpy as np
from numpy.typing import NDArray

from pymixed.core.exceptions import DimensionError, ValidationError
from pymixed.core.compute.linalg import eigh_sym
from pymixed.core.compute.tolerances import NULL_EIGENVALUE_RTOL


@dataclass(frozen=True)
class MixedSplit:
    """Eigen-split of a penalty matrix into fixed and random blocks.

    Attributes:
        U: Orthogonal eigenvector matrix, columns ordered by decreasing
           eigenvalue (q, q).
        D: Eigenvalues, decreasing (q,). Null eigenvalues are kept as
           computed, not zeroed.
        n_random: Number of positive (penalized) eigenvalues.
        tol: Absolute threshold used for the split.
    """
    U: NDArray
    D: NDArray
    n_random: int
    tol: float

    @property
    def n_fixed(self) -> int:
        """Dimension of the null space of S."""
        return self.U.shape[1] - self.n_random

    @property
    def U_random(self) -> NDArray:
        return self.U[:, :self.n_random]

    @property
    def U_fixed(self) -> NDArray:
        return self.U[:, self.n_random:]

    @property
    def D_random(self) -> NDArray:
        return self.D[:self.n_random]

    def to_original(self, beta_fixed: NDArray, g: NDArray) -> NDArray:
        """Map (β_F, g) back to coefficients β of the original basis."""
        beta_R = g / np.sqrt(self.D_random)
        return self.U_fixed @ beta_fixed + self.U_random @ beta_R


def mixed_split(S: NDArray, rtol: float = NULL_EIGENVALUE_RTOL) -> MixedSplit:
    """Eigendecompose S and partition into null and penalized blocks.

    Args:
        S: Symmetric PSD penalty matrix (q, q).
        rtol: Eigenvalues ≤ rtol · max(eigenvalue) are treated as zero.

    Returns:
        MixedSplit.

    Raises:
        DimensionError: If S is not square.
        ValidationError: If S has no positive eigenvalue.
    """
    eig = eigh_sym(S)
    top = float(eig.values[0]) if eig.values.size else 0.0
    if top <= 0.0:
        raise ValidationError(
            "S: no positive eigenvalue, nothing is penalized"
        )

    tol = rtol * top
    n_random = int(np.sum(eig.values > tol))

    return MixedSplit(U=eig.vectors, D=eig.values, n_random=n_random, tol=tol)


def mixed_model_matrices(
    X: NDArray,
    split: MixedSplit,
) -> tuple[NDArray, NDArray, NDArray]:
    """Form X_F, X_R and Z from a spline design and a penalty split.

    Args:
        X: Spline design (n, q).
        split: Output of mixed_split for the matching penalty.

    Returns:
        (X_F, X_R, Z) with shapes (n, q − r), (n, r), (n, r).
    """
    q = split.U.shape[0]
    if X.ndim != 2 or X.shape[1] != q:
        raise DimensionError(
            f"X: expected {q} columns to match the penalty, got shape {X.shape}"
        )

    X_F = X @ split.U_fixed
    X_R = X @ split.U_random
    Z = X_R / np.sqrt(split.D_random)
    return X_F, X_R, Z
