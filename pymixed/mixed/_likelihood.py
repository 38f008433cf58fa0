"""
Gaussian log-likelihood of the single-factor mixed model.

For θ = (log τ, log σ) the model is y ~ N(Xb, Σ) with Σ = τ²ZZ' + σ²I.
The fixed effects b are profiled out by least squares, leaving the
negative log-likelihood as a function of θ only.

Two routes evaluate the same quantity:

    whitened:  Σ = LL', ỹ = L⁻¹y, X̃ = L⁻¹X, b = OLS(ỹ on X̃)
               nll = n/2·log(2π) + Σ log diag(L) + ‖ỹ − X̃b‖²/2

    direct:    b by least squares, then
               nll = −log φ_n(y; Xb, Σ) via scipy.stats.multivariate_normal

They share nothing past Σ itself, so agreement between them is a check
on both.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal

import numpy as np
from numpy.typing import NDArray
from scipy import linalg as sla
from scipy import stats

from pymixed.core.exceptions import (
    InvalidCovarianceError, NotPositiveDefiniteError,
)
from pymixed.core.validation import check_column_rank
from pymixed.core.compute.linalg import cholesky_lower, whiten, qr_solve_cpu
from pymixed.mixed._covariance import marginal_covariance, unpack_theta


LikelihoodRoute = Literal['whitened', 'direct']
BetaMethod = Literal['gls', 'ols']

_LOG_2PI = float(np.log(2.0 * np.pi))


@dataclass(frozen=True)
class LikelihoodEval:
    """One evaluation of the profiled likelihood.

    Attributes:
        nll: Negative log-likelihood at θ with b profiled out.
        beta: Fixed effects b used in the evaluation (p,).
        residuals: y − Xb (n,).
        tau: Random-effect standard deviation (natural scale).
        sigma: Residual standard deviation (natural scale).
    """
    nll: float
    beta: NDArray
    residuals: NDArray
    tau: float
    sigma: float


def _covariance_at(theta: NDArray, Z: NDArray) -> tuple[float, float, NDArray]:
    tau, sigma = unpack_theta(theta)
    if not (np.isfinite(tau) and np.isfinite(sigma)):
        raise InvalidCovarianceError(
            f"Variance components overflowed at theta={np.asarray(theta).tolist()}",
            tau=tau, sigma=sigma,
        )
    return tau, sigma, marginal_covariance(Z, tau, sigma)


def negloglik_whitened(
    theta: NDArray,
    X: NDArray,
    Z: NDArray,
    y: NDArray,
) -> LikelihoodEval:
    """Negative log-likelihood via the whitening transform.

    Args:
        theta: (log τ, log σ).
        X: Fixed-effects design (n, p).
        Z: Random-effects design (n, m).
        y: Response (n,).

    Returns:
        LikelihoodEval with the GLS fixed effects.

    Raises:
        InvalidCovarianceError: If Σ has no Cholesky factor.
        RankDeficientDesignError: If the whitened X is rank-deficient.
    """
    tau, sigma, Sigma = _covariance_at(theta, Z)
    n = y.shape[0]

    try:
        L = cholesky_lower(Sigma, matrix_name='Sigma')
    except NotPositiveDefiniteError as e:
        raise InvalidCovarianceError(
            f"Marginal covariance not positive definite at tau={tau:.6g}, "
            f"sigma={sigma:.6g}",
            tau=tau, sigma=sigma, min_eigenvalue=e.min_eigenvalue,
        ) from e

    diag_L = np.diag(L)
    if not np.all(np.isfinite(diag_L)) or np.any(diag_L <= 0.0):
        raise InvalidCovarianceError(
            f"Cholesky factor of Sigma degenerate at tau={tau:.6g}, sigma={sigma:.6g}",
            tau=tau, sigma=sigma,
        )

    y_w = whiten(L, y)
    X_w = whiten(L, X)
    beta = qr_solve_cpu(X_w, y_w, matrix_name='X')
    r_w = y_w - X_w @ beta

    nll = 0.5 * n * _LOG_2PI + float(np.sum(np.log(diag_L))) + 0.5 * float(r_w @ r_w)

    return LikelihoodEval(
        nll=nll,
        beta=beta,
        residuals=y - X @ beta,
        tau=tau,
        sigma=sigma,
    )


def negloglik_direct(
    theta: NDArray,
    X: NDArray,
    Z: NDArray,
    y: NDArray,
    beta_method: BetaMethod = 'gls',
) -> LikelihoodEval:
    """Negative log-likelihood via the multivariate normal density.

    Args:
        theta: (log τ, log σ).
        X: Fixed-effects design (n, p).
        Z: Random-effects design (n, m).
        y: Response (n,).
        beta_method: 'gls' solves X'Σ⁻¹X b = X'Σ⁻¹y, which agrees with the
            whitened route for every design. 'ols' regresses raw y on raw
            X; the two estimators coincide only when Σ maps the column
            space of X into itself (e.g. balanced clusters with a
            cluster-invariant covariate pattern).

    Returns:
        LikelihoodEval.

    Raises:
        InvalidCovarianceError: If Σ is not positive definite.
        RankDeficientDesignError: If X is rank-deficient.
    """
    tau, sigma, Sigma = _covariance_at(theta, Z)

    if beta_method == 'ols':
        beta = qr_solve_cpu(X, y, matrix_name='X')
    elif beta_method == 'gls':
        check_column_rank(X, 'X')
        rhs = np.column_stack([X, y])
        try:
            Sinv_rhs = sla.solve(Sigma, rhs, assume_a='pos', check_finite=False)
        except sla.LinAlgError as e:
            raise InvalidCovarianceError(
                f"Marginal covariance not positive definite at tau={tau:.6g}, "
                f"sigma={sigma:.6g}",
                tau=tau, sigma=sigma,
            ) from e
        p = X.shape[1]
        XtSX = X.T @ Sinv_rhs[:, :p]
        XtSy = X.T @ Sinv_rhs[:, p]
        beta = sla.solve(XtSX, XtSy, assume_a='pos', check_finite=False)
    else:
        raise ValueError(
            f"Unknown beta_method: {beta_method!r}. Use 'gls' or 'ols'."
        )

    mean = X @ beta
    try:
        logpdf = stats.multivariate_normal.logpdf(y, mean=mean, cov=Sigma)
    except (np.linalg.LinAlgError, ValueError) as e:
        raise InvalidCovarianceError(
            f"Multivariate normal density undefined at tau={tau:.6g}, "
            f"sigma={sigma:.6g}: {e}",
            tau=tau, sigma=sigma,
        ) from e

    return LikelihoodEval(
        nll=-float(logpdf),
        beta=beta,
        residuals=y - mean,
        tau=tau,
        sigma=sigma,
    )


def get_route(route: LikelihoodRoute) -> Callable[..., LikelihoodEval]:
    """Look up a likelihood route by name."""
    if route == 'whitened':
        return negloglik_whitened
    if route == 'direct':
        return negloglik_direct
    raise ValueError(
        f"Unknown likelihood route: {route!r}. Use 'whitened' or 'direct'."
    )
