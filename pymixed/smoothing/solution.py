"""
Solution wrapper for the penalized spline.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pymixed.core.result import Result
from pymixed.mixed.solution import LMMSolution
from pymixed.smoothing._basis import spline_design
from pymixed.smoothing._common import SplineParams


class SplineSolution:
    """Solution wrapper for a fitted penalized cubic regression spline.

    Coefficients are always on the original basis
    [1, x, R(x, z_1), ..., R(x, z_k)], whichever path produced them.
    """

    def __init__(
        self,
        _result: Result[SplineParams],
        _lmm: LMMSolution | None = None,
    ):
        self._result = _result
        self._lmm = _lmm

    @property
    def params(self) -> SplineParams:
        return self._result.params

    @property
    def result(self) -> Result[SplineParams]:
        return self._result

    @property
    def info(self) -> dict:
        return self._result.info

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    @property
    def coefficients(self) -> NDArray:
        return self.params.coefficients

    @property
    def knots(self) -> NDArray:
        return self.params.knots

    @property
    def lam(self) -> float:
        """Smoothing parameter λ."""
        return self.params.lam

    @property
    def edf(self) -> float:
        """Effective degrees of freedom (trace of the influence matrix)."""
        return self.params.edf

    @property
    def gcv(self) -> float:
        return self.params.gcv

    @property
    def rss(self) -> float:
        return self.params.rss

    @property
    def sigma(self) -> float:
        """Residual scale sqrt(rss / (n − edf))."""
        return self.params.sigma

    @property
    def fitted_values(self) -> NDArray:
        return self.params.fitted_values

    @property
    def residuals(self) -> NDArray:
        return self.params.residuals

    @property
    def converged(self) -> bool:
        return self.params.converged

    @property
    def lmm(self) -> LMMSolution:
        """The mixed model behind a pspline_mixed fit."""
        if self._lmm is None:
            raise AttributeError(
                f"no mixed model for a '{self.params.method}' fit; "
                f"use pspline_mixed()"
            )
        return self._lmm

    def predict(self, x_new: ArrayLike) -> NDArray:
        """Evaluate the fitted curve at new covariate values.

        x_new must be on the same unit scale as the training covariate;
        values outside [0, 1] extrapolate.
        """
        x_new = np.atleast_1d(np.asarray(x_new, dtype=np.float64))
        return spline_design(x_new, self.params.knots) @ self.params.coefficients

    def summary(self) -> str:
        """Text summary of the fit."""
        params = self.params

        lines = []
        lines.append("Penalized cubic regression spline")
        lines.append("")
        lines.append(f"Method: {params.method}")
        lines.append(f"Knots: {len(params.knots)}  "
                     f"Basis dimension: {len(params.coefficients)}")
        lines.append(f"Observations: {params.n_obs}")
        lines.append("")
        lines.append(f" {'lambda':>12s} {'edf':>8s} {'GCV':>12s} "
                     f"{'RSS':>12s} {'sigma':>10s}")
        lines.append(f" {params.lam:12.4g} {params.edf:8.3f} {params.gcv:12.5g} "
                     f"{params.rss:12.5g} {params.sigma:10.4f}")

        if self._lmm is not None:
            lines.append("")
            lines.append(f"Variance components: tau = {self._lmm.tau:.5g}, "
                         f"sigma = {self._lmm.sigma:.5g} "
                         f"(lambda = sigma^2/tau^2)")
            lines.append(f"logLik: {self._lmm.log_likelihood:.4f}")

        if not params.converged:
            lines.append("")
            lines.append("WARNING: Model did not converge")

        return '\n'.join(lines)

    def __repr__(self) -> str:
        return (
            f"SplineSolution({self.params.method}, "
            f"n={self.params.n_obs}, knots={len(self.params.knots)}, "
            f"lam={self.params.lam:.4g}, edf={self.params.edf:.3f})"
        )
