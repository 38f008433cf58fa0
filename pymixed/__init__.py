"""
PyMixed: maximum likelihood mixed models and penalized regression splines.

Submodules:
    mixed: Gaussian linear mixed model with one random term, fit by ML
    smoothing: Penalized cubic regression spline and its mixed model form
    datasets: Reference datasets (sleepstudy, engine)
"""

__version__ = "0.1.0"

from pymixed import mixed
from pymixed import smoothing

__all__ = [
    "__version__",
    "mixed",
    "smoothing",
]
