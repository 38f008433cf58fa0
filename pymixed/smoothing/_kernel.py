"""
Reproducing kernel of the cubic smoothing spline on [0, 1].

    R(x, z) = [(z − ½)² − 1/12]·[(x − ½)² − 1/12] / 4
              − [(|x − z| − ½)⁴ − (|x − z| − ½)²/2 + 7/240] / 24

References:
    Gu, C. (2002). Smoothing Spline ANOVA Models. Springer.
    Wood, S. N. (2017). Generalized Additive Models: An Introduction
    with R (2nd ed.), Section 4.2.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray


def spline_kernel(x: ArrayLike, z: ArrayLike) -> NDArray:
    """Evaluate R(x, z) with NumPy broadcasting.

    Symmetric in its arguments. Values outside [0, 1] are valid inputs
    and extrapolate.

    Examples:
        >>> spline_kernel(x[:, None], knots[None, :])   # (n, k) block
    """
    x = np.asarray(x, dtype=np.float64)
    z = np.asarray(z, dtype=np.float64)
    d = np.abs(x - z) - 0.5
    smooth = ((z - 0.5) ** 2 - 1.0 / 12.0) * ((x - 0.5) ** 2 - 1.0 / 12.0) / 4.0
    rough = (d ** 4 - d ** 2 / 2.0 + 7.0 / 240.0) / 24.0
    return smooth - rough
