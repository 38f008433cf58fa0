"""
Generic result container for all PyMixed fits.

Every fit entry point returns its domain payload inside a Result envelope
so timing, optimizer diagnostics and warnings are reported the same way
for mixed models and splines.

Design decisions:
    - Generic over parameter payload P
    - info dict for optimizer metadata (converged, iterations, rejected points)
    - timing is optional (direct penalized fits may skip it)
    - Immutable (frozen=True)
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for a model fit.

    Attributes:
        params: Model-specific payload (LMMParams, SplineParams)
        info: Fit metadata (route, optimizer, convergence, evaluation counts)
        timing: Per-phase timings from Timer, or None if not measured
        backend_name: Identifier of the code path that produced this result
        warnings: Non-fatal issues encountered during the fit

    Examples:
        >>> Result(
        ...     params=spline_params,
        ...     info={'method': 'penalized_ls', 'lam': 1e-4},
        ...     timing=None,
        ...     backend_name='cpu_pspline'
        ... )

        >>> Result(
        ...     params=lmm_params,
        ...     info={'method': 'ML', 'route': 'whitened', 'converged': True,
        ...           'n_iter': 87, 'n_rejected': 0},
        ...     timing={'total_seconds': 0.2, 'optimization': 0.19},
        ...     backend_name='cpu_lmm'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
