"""
Solver dispatch for the mixed model.

Public API:
    lmm() — fit y = Xb + Zg + ε, g ~ N(0, τ²I), ε ~ N(0, σ²I) by ML
"""

from __future__ import annotations

import warnings
import numpy as np
from numpy.typing import ArrayLike

from pymixed.core.result import Result
from pymixed.core.exceptions import NonConvergenceWarning
from pymixed.core.compute.timing import Timer
from pymixed.core.compute.tolerances import OPTIMIZER_RTOL

from pymixed.mixed._common import LMMParams, VarCompSummary
from pymixed.mixed._likelihood import get_route, LikelihoodRoute
from pymixed.mixed._optimize import minimize_negloglik, OptimizerChoice
from pymixed.mixed._random_effects import predict_random_effects
from pymixed.mixed.design import MixedDesign
from pymixed.mixed.solution import LMMSolution


def lmm(
    y: ArrayLike,
    X: ArrayLike,
    groups: ArrayLike | None = None,
    *,
    Z: ArrayLike | None = None,
    theta0: ArrayLike | None = None,
    method: LikelihoodRoute = 'whitened',
    optimizer: OptimizerChoice = 'Nelder-Mead',
    tol: float = OPTIMIZER_RTOL,
    max_iter: int = 2000,
    group_name: str = 'group',
    coefficient_names: list[str] | None = None,
    verbose: bool = False,
) -> LMMSolution:
    """Fit a single-factor linear mixed model by maximum likelihood.

    The variance components τ (random effect) and σ (residual) are
    estimated on the log scale by minimizing the profiled negative
    log-likelihood; the fixed effects are the GLS estimates at the
    optimum and the random effects are their BLUPs.

    Args:
        y: Response vector (n,).
        X: Fixed effects design matrix (n, p). Include an intercept
            column if desired.
        groups: Group label per observation. Builds the one-hot grouping
            design. Mutually exclusive with Z.
        Z: Random effects design matrix (n, m), used as given.
        theta0: Starting (log τ, log σ). Default (0, 0).
        method: Likelihood route, 'whitened' (default) or 'direct'.
        optimizer: 'Nelder-Mead' (default), 'L-BFGS-B' or 'BFGS'.
        tol: Relative convergence tolerance. Default 1e-10.
        max_iter: Maximum optimizer iterations. Default 2000.
        group_name: Name of the random term in summaries.
        coefficient_names: Names for the columns of X.
        verbose: Print progress information.

    Returns:
        LMMSolution with fixed effects, variance components, BLUPs,
        log-likelihood and convergence diagnostics.

    Raises:
        RankDeficientDesignError: If X is column-rank-deficient.
        ConvergenceError: If no valid parameter value was ever found.

    Examples:
        >>> from pymixed.datasets import sleepstudy
        >>> X = np.column_stack([np.ones(180), sleepstudy['days']])
        >>> fit = lmm(sleepstudy['reaction'], X, groups=sleepstudy['subject'])
        >>> fit.tau, fit.sigma
    """
    timer = Timer()
    timer.start()

    design = MixedDesign.validate(y, X, groups=groups, Z=Z, group_name=group_name)

    if coefficient_names is None:
        coef_names = _make_coef_names(design.p)
    else:
        coef_names = list(coefficient_names)
        if len(coef_names) != design.p:
            raise ValueError(
                f"coefficient_names has {len(coef_names)} entries, "
                f"expected {design.p}"
            )

    if verbose:
        print(f"LMM (ML): n={design.n}, p={design.p}, m={design.m}, "
              f"route={method}, optimizer={optimizer}")

    with timer.section('optimization'):
        outcome = minimize_negloglik(
            design.X, design.Z, design.y, theta0,
            route=method, optimizer=optimizer, tol=tol, max_iter=max_iter,
        )

    if verbose:
        print(f"Converged: {outcome.converged} "
              f"(iterations: {outcome.n_iter}, evaluations: {outcome.n_eval}, "
              f"rejected: {outcome.n_rejected}, nll: {outcome.nll:.6f})")

    warn_list = []
    if not outcome.converged:
        msg = (f"{optimizer} did not converge after {outcome.n_iter} "
               f"iterations: {outcome.message}")
        warnings.warn(msg, NonConvergenceWarning, stacklevel=2)
        warn_list.append(msg)

    # Final evaluation at the optimum
    with timer.section('final_solve'):
        final = get_route(method)(outcome.theta, design.X, design.Z, design.y)

    with timer.section('blups'):
        g_hat = predict_random_effects(
            final.tau, final.sigma, design.Z, final.residuals
        )
        fitted = design.X @ final.beta + design.Z @ g_hat

    with timer.section('model_fit'):
        ll = -final.nll
        n_params = design.p + 2
        aic = -2.0 * ll + 2.0 * n_params
        bic = -2.0 * ll + np.log(design.n) * n_params
        var_comps = (
            VarCompSummary(design.group_name, final.tau ** 2, final.tau),
            VarCompSummary('Residual', final.sigma ** 2, final.sigma),
        )

    timer.stop()

    params = LMMParams(
        coefficients=final.beta,
        coefficient_names=tuple(coef_names),
        tau=final.tau,
        sigma=final.sigma,
        var_components=var_comps,
        negloglik=final.nll,
        log_likelihood=ll,
        aic=float(aic),
        bic=float(bic),
        n_obs=design.n,
        n_random=design.m,
        group_levels=design.group_levels,
        converged=outcome.converged,
        n_iter=outcome.n_iter,
        random_effects=g_hat,
        fitted_values=fitted,
        residuals=design.y - fitted,
        fixed_residuals=final.residuals,
        theta=outcome.theta,
    )

    result = Result(
        params=params,
        info={
            'method': 'ML',
            'route': method,
            'optimizer': optimizer,
            'converged': outcome.converged,
            'n_iter': outcome.n_iter,
            'n_eval': outcome.n_eval,
            'n_rejected': outcome.n_rejected,
            'message': outcome.message,
            'tol': tol,
        },
        timing=timer.result(),
        backend_name='cpu_lmm',
        warnings=tuple(warn_list),
    )

    return LMMSolution(_result=result)


def _make_coef_names(p: int) -> list[str]:
    """Generate default coefficient names."""
    names = ['(Intercept)']
    for i in range(1, p):
        names.append(f'X{i}')
    return names
