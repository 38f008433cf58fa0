"""
Dense linear algebra kernels for PyMixed.

All functions follow these conventions:
    - NumPy/SciPy (LAPACK under the hood), float64 throughout
    - Decompositions return structured frozen dataclasses
    - Failures raise PyMixed exceptions with diagnostics attached

Submodules:
    qr: QR decomposition and least squares
    cholesky: Cholesky factorization, whitening and SPD solves
    eigen: Symmetric eigendecomposition
"""

from pymixed.core.compute.linalg.qr import (
    QRResult,
    qr_cpu,
    qr_solve_cpu,
)
from pymixed.core.compute.linalg.cholesky import (
    cholesky_lower,
    whiten,
    cho_solve_spd,
)
from pymixed.core.compute.linalg.eigen import (
    EigenResult,
    eigh_sym,
)

__all__ = [
    # QR decomposition
    "QRResult",
    "qr_cpu",
    "qr_solve_cpu",
    # Cholesky
    "cholesky_lower",
    "whiten",
    "cho_solve_spd",
    # Eigen
    "EigenResult",
    "eigh_sym",
]
