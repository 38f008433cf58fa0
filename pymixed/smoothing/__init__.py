"""
Smoothing: penalized cubic regression spline on [0, 1].

Public API:
    pspline()          — fit at a given smoothing parameter λ
    pspline_mixed()    — λ estimated by ML through the mixed model form
    gcv_search()       — λ chosen on a grid by GCV
    SplineSolution     — result wrapper
    spline_kernel()    — reproducing kernel R(x, z)
    spline_design()    — basis matrix [1, x, R(x, knots)]
    penalty_matrix()   — roughness penalty S
    mixed_split()      — eigen-split of S into fixed and random blocks
    mixed_model_matrices() — X_F, X_R and Z for the mixed model form
    rescale_unit()     — map a covariate onto [0, 1]
    default_knots()    — evenly spaced interior knots
"""

from pymixed.smoothing.solvers import pspline, pspline_mixed, gcv_search
from pymixed.smoothing.solution import SplineSolution
from pymixed.smoothing.design import SplineDesign
from pymixed.smoothing._kernel import spline_kernel
from pymixed.smoothing._basis import (
    validate_knots, default_knots, rescale_unit,
    spline_design, penalty_matrix,
)
from pymixed.smoothing._reparam import (
    MixedSplit, mixed_split, mixed_model_matrices,
)
from pymixed.smoothing._pls import PLSResult, solve_pls, mixed_edf

__all__ = [
    "pspline",
    "pspline_mixed",
    "gcv_search",
    "SplineSolution",
    "SplineDesign",
    "spline_kernel",
    "validate_knots",
    "default_knots",
    "rescale_unit",
    "spline_design",
    "penalty_matrix",
    "MixedSplit",
    "mixed_split",
    "mixed_model_matrices",
    "PLSResult",
    "solve_pls",
    "mixed_edf",
]
