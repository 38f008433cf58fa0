"""
Core infrastructure for PyMixed.

Shared abstractions used by the mixed-model and smoothing subpackages.

Key components:
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing, tolerances and dense linear algebra kernels
"""

from pymixed.core.result import Result
from pymixed.core.exceptions import (
    PyMixedError,
    ValidationError,
    DimensionError,
    InvalidKnotSequenceError,
    NumericalError,
    SingularMatrixError,
    RankDeficientDesignError,
    NotPositiveDefiniteError,
    InvalidCovarianceError,
    ConvergenceError,
    NonConvergenceWarning,
)

__all__ = [
    # Result
    "Result",
    # Exceptions
    "PyMixedError",
    "ValidationError",
    "DimensionError",
    "InvalidKnotSequenceError",
    "NumericalError",
    "SingularMatrixError",
    "RankDeficientDesignError",
    "NotPositiveDefiniteError",
    "InvalidCovarianceError",
    "ConvergenceError",
    "NonConvergenceWarning",
]
