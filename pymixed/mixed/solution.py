"""
Solution wrapper for the mixed model.

LMMSolution wraps Result[LMMParams] and provides an lme4-style summary,
property accessors for common quantities, and likelihood-ratio model
comparison.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy import stats

from pymixed.core.result import Result
from pymixed.mixed._common import LMMParams, VarCompSummary


def _format_pvalue(p: float) -> str:
    """Format p-value like R."""
    if p < 2e-16:
        return '< 2e-16'
    elif p < 0.001:
        return f'{p:.2e}'
    else:
        return f'{p:.4f}'


class LMMSolution:
    """Solution wrapper for a fitted mixed model.

    Provides fixed effects, variance components on the natural scale,
    BLUPs, ICC, the implied smoothing parameter λ = σ²/τ², and
    model comparison via likelihood ratio test.
    """

    def __init__(self, _result: Result[LMMParams]):
        self._result = _result

    @property
    def params(self) -> LMMParams:
        return self._result.params

    @property
    def result(self) -> Result[LMMParams]:
        return self._result

    @property
    def info(self) -> dict:
        return self._result.info

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Fixed effects ---

    @property
    def coefficients(self) -> NDArray:
        """Fixed effect estimates b̂."""
        return self.params.coefficients

    @property
    def fixef(self) -> dict[str, float]:
        """Fixed effects as name → value dict."""
        return dict(zip(self.params.coefficient_names, self.params.coefficients))

    # --- Variance components ---

    @property
    def tau(self) -> float:
        """Random-effect standard deviation τ̂."""
        return self.params.tau

    @property
    def sigma(self) -> float:
        """Residual standard deviation σ̂."""
        return self.params.sigma

    @property
    def var_components(self) -> tuple[VarCompSummary, ...]:
        return self.params.var_components

    @property
    def lam(self) -> float:
        """Smoothing parameter implied by the variance ratio, σ²/τ².

        Infinite when τ has underflowed to zero.
        """
        with np.errstate(divide='ignore', over='ignore'):
            ratio = np.float64(self.params.sigma) / np.float64(self.params.tau)
            return float(ratio * ratio)

    @property
    def icc(self) -> float:
        """Intraclass correlation τ² / (τ² + σ²)."""
        t2 = self.params.tau ** 2
        return t2 / (t2 + self.params.sigma ** 2)

    # --- Random effects ---

    @property
    def ranef(self) -> NDArray:
        """Random effects (BLUPs), one per column of Z."""
        return self.params.random_effects

    @property
    def ranef_by_group(self) -> dict:
        """BLUPs keyed by group label (grouping designs only)."""
        if self.params.group_levels is None:
            raise AttributeError(
                "ranef_by_group needs a model fit with group labels, "
                "not an explicit Z matrix"
            )
        return {
            level.item() if hasattr(level, 'item') else level: float(g)
            for level, g in zip(self.params.group_levels, self.params.random_effects)
        }

    # --- Model fit ---

    @property
    def negloglik(self) -> float:
        """Negative log-likelihood at convergence."""
        return self.params.negloglik

    @property
    def log_likelihood(self) -> float:
        return self.params.log_likelihood

    @property
    def aic(self) -> float:
        return self.params.aic

    @property
    def bic(self) -> float:
        return self.params.bic

    @property
    def fitted_values(self) -> NDArray:
        """Conditional fitted values Xb̂ + Zĝ."""
        return self.params.fitted_values

    @property
    def residuals(self) -> NDArray:
        return self.params.residuals

    @property
    def converged(self) -> bool:
        return self.params.converged

    @property
    def theta(self) -> NDArray:
        """Converged (log τ, log σ)."""
        return self.params.theta

    # --- Model comparison ---

    def compare(self, other: 'LMMSolution') -> str:
        """Likelihood ratio test between two nested ML fits.

        Args:
            other: The other model to compare against.

        Returns:
            Formatted LRT summary string.
        """
        n_params_self = len(self.params.coefficients) + 2
        n_params_other = len(other.params.coefficients) + 2

        if n_params_self >= n_params_other:
            full, reduced = self, other
            n_full, n_reduced = n_params_self, n_params_other
        else:
            full, reduced = other, self
            n_full, n_reduced = n_params_other, n_params_self

        chi_sq = -2.0 * (reduced.log_likelihood - full.log_likelihood)
        chi_sq = max(chi_sq, 0.0)
        df = n_full - n_reduced
        if df <= 0:
            df = 1
        p_value = float(stats.chi2.sf(chi_sq, df))

        lines = [
            "Likelihood Ratio Test",
            "=" * 50,
            f"  Reduced model logLik: {reduced.log_likelihood:.4f}  "
            f"(df = {n_reduced})",
            f"  Full model logLik:    {full.log_likelihood:.4f}  "
            f"(df = {n_full})",
            f"  Chi-squared: {chi_sq:.4f}  on {df} df",
            f"  p-value: {_format_pvalue(p_value)}",
        ]
        return '\n'.join(lines)

    # --- Summary ---

    def summary(self) -> str:
        """lme4-style summary of an ML fit."""
        params = self.params

        lines = []
        lines.append("Linear mixed model fit by maximum likelihood")
        lines.append("")
        lines.append(
            f" {'AIC':>10s} {'BIC':>10s} {'logLik':>10s} {'deviance':>10s}"
        )
        lines.append(
            f" {params.aic:10.1f} {params.bic:10.1f} "
            f"{params.log_likelihood:10.1f} {-2 * params.log_likelihood:10.1f}"
        )
        lines.append("")

        lines.append("Random effects:")
        lines.append(f" {'Groups':<12s} {'Variance':>12s} {'Std.Dev.':>10s}")
        for vc in params.var_components:
            lines.append(
                f" {vc.group:<12s} {vc.variance:12.4f} {vc.std_dev:10.4f}"
            )
        n_groups = (len(params.group_levels)
                    if params.group_levels is not None else params.n_random)
        lines.append(
            f"Number of obs: {params.n_obs}, random effects: {n_groups}"
        )
        lines.append("")

        lines.append("Fixed effects:")
        lines.append(f" {'':>15s} {'Estimate':>12s}")
        for name, coef in zip(params.coefficient_names, params.coefficients):
            lines.append(f" {name:>15s} {coef:12.4f}")

        if not params.converged:
            lines.append("")
            lines.append("WARNING: Model did not converge")

        return '\n'.join(lines)

    def __repr__(self) -> str:
        return (
            f"LMMSolution(ML, "
            f"n={self.params.n_obs}, "
            f"fixed={len(self.params.coefficients)}, "
            f"tau={self.params.tau:.4g}, sigma={self.params.sigma:.4g})"
        )
