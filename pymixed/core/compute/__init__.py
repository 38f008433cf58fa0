"""
Shared compute infrastructure for PyMixed.

Submodules:
    timing: Execution timing utilities
    tolerances: Numerical thresholds and comparison tiers
    linalg: Linear algebra kernels (QR, Cholesky, symmetric eigen)
"""

from pymixed.core.compute.timing import Timer, timed

__all__ = [
    "Timer",
    "timed",
]
