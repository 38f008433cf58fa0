"""
Optimizer driver for the variance components.

Minimizes the profiled negative log-likelihood over θ = (log τ, log σ)
with scipy.optimize.minimize. The log scale keeps both standard
deviations positive without bounds, so any unconstrained method works.

Candidate points whose marginal covariance fails its Cholesky
factorization are rejected by returning +inf; the search continues from
the remaining simplex / line-search points.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import numpy as np
from numpy.typing import NDArray, ArrayLike
from scipy.optimize import minimize

from pymixed.core.exceptions import (
    InvalidCovarianceError, ConvergenceError, ValidationError,
)
from pymixed.core.compute.tolerances import OPTIMIZER_RTOL
from pymixed.core.compute.linalg import qr_solve_cpu
from pymixed.mixed._likelihood import get_route, LikelihoodRoute


OptimizerChoice = Literal['Nelder-Mead', 'L-BFGS-B', 'BFGS']


@dataclass(frozen=True)
class OptimizeOutcome:
    """Outcome of one variance-component search.

    Attributes:
        theta: Best θ found, log scale (2,).
        nll: Negative log-likelihood at theta.
        converged: True only if the optimizer met its tolerance.
        n_iter: Optimizer iterations.
        n_eval: Objective evaluations (including rejected ones).
        n_rejected: Evaluations rejected for an invalid covariance.
        message: Optimizer termination message.
        optimizer: Method name passed to scipy.optimize.minimize.
    """
    theta: NDArray
    nll: float
    converged: bool
    n_iter: int
    n_eval: int
    n_rejected: int
    message: str
    optimizer: str


def minimize_negloglik(
    X: NDArray,
    Z: NDArray,
    y: NDArray,
    theta0: ArrayLike | None = None,
    *,
    route: LikelihoodRoute = 'whitened',
    optimizer: OptimizerChoice = 'Nelder-Mead',
    tol: float = OPTIMIZER_RTOL,
    max_iter: int = 2000,
) -> OptimizeOutcome:
    """Minimize the negative log-likelihood over (log τ, log σ).

    Args:
        X: Fixed-effects design (n, p).
        Z: Random-effects design (n, m).
        y: Response (n,).
        theta0: Starting point on the log scale. Default (0, 0).
        route: Likelihood route, 'whitened' or 'direct'.
        optimizer: 'Nelder-Mead' (default, derivative-free), 'L-BFGS-B'
            or 'BFGS'.
        tol: Relative convergence tolerance on the objective. For
            Nelder-Mead the absolute function tolerance is
            tol·max(1, |f(theta0)|) and the simplex-size tolerance is
            sqrt(tol).
        max_iter: Iteration budget.

    Returns:
        OptimizeOutcome. ``converged`` is False when the budget ran out.

    Raises:
        ConvergenceError: If no evaluated point had a finite objective.
    """
    evaluate = get_route(route)

    if theta0 is None:
        theta0 = np.zeros(2, dtype=np.float64)
    theta0 = np.asarray(theta0, dtype=np.float64).ravel()
    if theta0.shape != (2,) or not np.all(np.isfinite(theta0)):
        raise ValidationError(
            f"theta0: expected 2 finite log-scale values, got {theta0.tolist()}"
        )
    if tol <= 0:
        raise ValidationError(f"tol: must be positive, got {tol}")
    if max_iter < 1:
        raise ValidationError(f"max_iter: must be >= 1, got {max_iter}")

    counts = {'n_eval': 0, 'n_rejected': 0}

    def objective(theta: NDArray) -> float:
        counts['n_eval'] += 1
        try:
            nll = evaluate(theta, X, Z, y).nll
        except InvalidCovarianceError:
            counts['n_rejected'] += 1
            return np.inf
        return nll if np.isfinite(nll) else np.inf

    if optimizer == 'Nelder-Mead':
        f0 = objective(theta0)
        scale = abs(f0) if np.isfinite(f0) else 1.0
        simplex = np.vstack([theta0, theta0 + np.eye(2)])
        options = {
            'maxiter': max_iter,
            'xatol': float(np.sqrt(tol)),
            'fatol': tol * max(1.0, scale),
            'initial_simplex': simplex,
        }
    elif optimizer == 'L-BFGS-B':
        options = {'maxiter': max_iter, 'ftol': tol, 'gtol': tol * 10}
    elif optimizer == 'BFGS':
        options = {'maxiter': max_iter, 'gtol': float(np.sqrt(tol))}
    else:
        raise ValueError(
            f"Unknown optimizer: {optimizer!r}. "
            f"Use 'Nelder-Mead', 'L-BFGS-B' or 'BFGS'."
        )

    res = minimize(objective, theta0, method=optimizer, options=options)

    if not np.isfinite(res.fun):
        raise ConvergenceError(
            f"{optimizer} found no parameter value with a valid marginal "
            f"covariance ({counts['n_rejected']} of {counts['n_eval']} "
            f"evaluations rejected)",
            iterations=int(getattr(res, 'nit', 0)),
            reason='no_finite_point',
            threshold=tol,
        )

    return OptimizeOutcome(
        theta=np.asarray(res.x, dtype=np.float64),
        nll=float(res.fun),
        converged=bool(res.success),
        n_iter=int(getattr(res, 'nit', 0)),
        n_eval=counts['n_eval'],
        n_rejected=counts['n_rejected'],
        message=str(res.message),
        optimizer=optimizer,
    )


def theta_start_grid(
    X: NDArray,
    Z: NDArray,
    y: NDArray,
    *,
    tau_offsets: NDArray | None = None,
    sigma_offsets: NDArray | None = None,
) -> NDArray:
    """Pick a starting θ by scanning a coarse log-scale grid.

    The likelihood in (log τ, log σ) can hold a shallow boundary basin
    (τ → 0) next to the interior optimum, and which one a local search
    reaches depends on the start. The grid is centred on log σ₀, the
    residual standard deviation of the OLS fit of y on X, and log τ
    is scanned over ``log σ₀ + tau_offsets``.

    Args:
        X: Fixed-effects design (n, p).
        Z: Random-effects design (n, m).
        y: Response (n,).
        tau_offsets: Offsets of log τ from log σ₀. Default -4..12 by 1.
        sigma_offsets: Offsets of log σ from log σ₀. Default -2..1 by 0.25.

    Returns:
        Grid point with the smallest whitened negative log-likelihood.

    Raises:
        ConvergenceError: If every grid point has an invalid covariance.
    """
    if tau_offsets is None:
        tau_offsets = np.arange(-4.0, 13.0)
    if sigma_offsets is None:
        sigma_offsets = np.arange(-2.0, 1.25, 0.25)

    n, p = X.shape
    beta = qr_solve_cpu(X, y)
    rss = float(np.sum((y - X @ beta) ** 2))
    sd0 = np.sqrt(rss / max(n - p, 1))
    log_sd0 = float(np.log(sd0)) if sd0 > 0 else 0.0

    evaluate = get_route('whitened')
    best_theta = None
    best_nll = np.inf
    for dt in tau_offsets:
        for ds in sigma_offsets:
            theta = np.array([log_sd0 + dt, log_sd0 + ds])
            try:
                nll = evaluate(theta, X, Z, y).nll
            except InvalidCovarianceError:
                continue
            if np.isfinite(nll) and nll < best_nll:
                best_theta, best_nll = theta, nll

    if best_theta is None:
        raise ConvergenceError(
            "No grid point has a valid marginal covariance",
            iterations=0,
            reason='no_finite_point',
        )
    return best_theta
