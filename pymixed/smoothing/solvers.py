"""
Solver dispatch for the penalized cubic regression spline.

Public API:
    pspline()       — penalized least squares at a given λ
    pspline_mixed() — λ estimated as σ²/τ² by fitting the spline as a
                      mixed model with lmm()
    gcv_search()    — λ chosen from a grid by generalized cross-validation
"""

from __future__ import annotations

import warnings
import numpy as np
from numpy.typing import ArrayLike

from pymixed.core.result import Result
from pymixed.core.exceptions import ValidationError, NonConvergenceWarning
from pymixed.core.compute.timing import Timer
from pymixed.core.compute.tolerances import OPTIMIZER_RTOL, NULL_EIGENVALUE_RTOL
from pymixed.mixed import lmm
from pymixed.mixed._likelihood import LikelihoodRoute
from pymixed.mixed._optimize import OptimizerChoice, theta_start_grid
from pymixed.smoothing._common import SplineParams
from pymixed.smoothing._pls import (
    PLSResult, solve_pls, mixed_edf, check_lambda, gcv_score,
)
from pymixed.smoothing._reparam import mixed_split, mixed_model_matrices
from pymixed.smoothing.design import SplineDesign
from pymixed.smoothing.solution import SplineSolution


def pspline(
    x: ArrayLike,
    y: ArrayLike,
    knots: ArrayLike,
    lam: float,
) -> SplineSolution:
    """Fit a penalized cubic regression spline at a fixed λ.

    Minimizes ‖y − Xβ‖² + λβ'Sβ over the basis
    [1, x, R(x, z_1), ..., R(x, z_k)].

    Args:
        x: Covariate (n,), on the unit interval (see rescale_unit).
        y: Response (n,).
        knots: Distinct knots strictly inside (0, 1).
        lam: Smoothing parameter λ ≥ 0. Large λ approaches the
            straight-line fit; λ → 0 approaches the unpenalized fit.

    Returns:
        SplineSolution.

    Raises:
        InvalidKnotSequenceError: On a bad knot sequence.
        ValidationError: On invalid data or λ.
        RankDeficientDesignError: If λ = 0 and the basis is
            rank-deficient for this x.

    Examples:
        >>> from pymixed.datasets import engine
        >>> x = rescale_unit(engine['size'])
        >>> fit = pspline(x, engine['wear'], default_knots(7), lam=1e-4)
        >>> fit.predict([0.0, 0.5, 1.0])
    """
    timer = Timer()
    timer.start()

    lam = check_lambda(lam)
    design = SplineDesign.validate(x, y, knots)

    with timer.section('penalized_ls'):
        pls = solve_pls(design.X, design.y, design.S, lam)

    timer.stop()

    result = Result(
        params=_make_params(design, pls, lam, method='penalized_ls', converged=True),
        info={'method': 'penalized_ls', 'lam': lam},
        timing=timer.result(),
        backend_name='cpu_pspline',
    )
    return SplineSolution(_result=result)


def pspline_mixed(
    x: ArrayLike,
    y: ArrayLike,
    knots: ArrayLike,
    *,
    theta0: ArrayLike | None = None,
    method: LikelihoodRoute = 'whitened',
    optimizer: OptimizerChoice = 'Nelder-Mead',
    tol: float = OPTIMIZER_RTOL,
    max_iter: int = 2000,
    null_rtol: float = NULL_EIGENVALUE_RTOL,
    verbose: bool = False,
) -> SplineSolution:
    """Fit a penalized spline with λ estimated by maximum likelihood.

    The penalty is eigen-split into its null space (intercept and linear
    term, fixed effects X_F) and its penalized space (random effects
    with design Z = X_R·D^{-1/2}). lmm() then estimates τ and σ, and
    λ = σ²/τ². The coefficients on the original basis are recovered
    from the fixed effects and the BLUPs.

    Args:
        x: Covariate (n,), on the unit interval.
        y: Response (n,).
        knots: Distinct knots strictly inside (0, 1).
        theta0: Starting (log τ, log σ). Default: best point of a
            coarse likelihood grid (see theta_start_grid).
        method: Likelihood route, 'whitened' (default) or 'direct'.
        optimizer: 'Nelder-Mead' (default), 'L-BFGS-B' or 'BFGS'.
        tol: Relative convergence tolerance. Default 1e-10.
        max_iter: Maximum optimizer iterations. Default 2000.
        null_rtol: Relative tolerance below which a penalty eigenvalue
            counts as zero.
        verbose: Print progress information.

    Returns:
        SplineSolution; the fitted mixed model is available as ``.lmm``.

    Raises:
        InvalidKnotSequenceError: On a bad knot sequence.
        ConvergenceError: If no valid variance components were found.
    """
    timer = Timer()
    timer.start()

    design = SplineDesign.validate(x, y, knots)

    with timer.section('reparameterize'):
        split = mixed_split(design.S, rtol=null_rtol)
        X_F, _, Z = mixed_model_matrices(design.X, split)

    if verbose:
        print(f"Spline mixed model: n={design.n}, q={design.q}, "
              f"fixed={split.n_fixed}, random={split.n_random}")

    if theta0 is None:
        with timer.section('start_grid'):
            theta0 = theta_start_grid(X_F, Z, design.y)

    with timer.section('lmm'):
        # re-warned below so the warning points at the pspline_mixed caller
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', NonConvergenceWarning)
            fit = lmm(
                design.y, X_F, Z=Z,
                theta0=theta0, method=method, optimizer=optimizer,
                tol=tol, max_iter=max_iter, group_name='spline',
                coefficient_names=[f'F{j + 1}' for j in range(split.n_fixed)],
                verbose=verbose,
            )
    for msg in fit.warnings:
        warnings.warn(msg, NonConvergenceWarning, stacklevel=2)

    lam = fit.lam
    with timer.section('back_transform'):
        beta = split.to_original(fit.coefficients, fit.ranef)
        fitted = design.X @ beta
        residuals = design.y - fitted
        edf = mixed_edf(X_F, Z, (fit.tau / fit.sigma) ** 2)

    timer.stop()

    rss = float(residuals @ residuals)
    pls = PLSResult(
        beta=beta,
        fitted=fitted,
        residuals=residuals,
        rss=rss,
        edf=edf,
        gcv=gcv_score(design.n, rss, edf),
    )

    result = Result(
        params=_make_params(design, pls, lam, method='mixed_ml',
                            converged=fit.converged),
        info={
            'method': 'mixed_ml',
            'lam': lam,
            'route': method,
            'optimizer': optimizer,
            'converged': fit.converged,
            'n_fixed': split.n_fixed,
            'n_random': split.n_random,
            'theta0': np.asarray(theta0, dtype=np.float64),
        },
        timing=timer.result(),
        backend_name='cpu_pspline_mixed',
        warnings=fit.warnings,
    )
    return SplineSolution(_result=result, _lmm=fit)


def gcv_search(
    x: ArrayLike,
    y: ArrayLike,
    knots: ArrayLike,
    lams: ArrayLike | None = None,
) -> SplineSolution:
    """Choose λ from a grid by minimizing the GCV score.

    Args:
        x: Covariate (n,), on the unit interval.
        y: Response (n,).
        knots: Distinct knots strictly inside (0, 1).
        lams: Candidate λ values (all ≥ 0). Default 10^-10 .. 10^2,
            four per decade.

    Returns:
        SplineSolution at the best λ. ``info['lams']`` and
        ``info['gcv_path']`` hold the full search.
    """
    timer = Timer()
    timer.start()

    if lams is None:
        lams = np.logspace(-10, 2, 49)
    lams = np.atleast_1d(np.asarray(lams, dtype=np.float64))
    if lams.size == 0:
        raise ValidationError("lams: at least one candidate required")
    for lam in lams:
        check_lambda(lam)

    design = SplineDesign.validate(x, y, knots)

    fits = []
    with timer.section('search'):
        for lam in lams:
            fits.append(solve_pls(design.X, design.y, design.S, lam))

    scores = np.array([f.gcv for f in fits])
    best = int(np.argmin(scores))

    timer.stop()

    result = Result(
        params=_make_params(design, fits[best], float(lams[best]),
                            method='gcv', converged=True),
        info={
            'method': 'gcv',
            'lam': float(lams[best]),
            'lams': lams,
            'gcv_path': scores,
        },
        timing=timer.result(),
        backend_name='cpu_pspline',
    )
    return SplineSolution(_result=result)


def _make_params(
    design: SplineDesign,
    pls: PLSResult,
    lam: float,
    method: str,
    converged: bool,
) -> SplineParams:
    dof = design.n - pls.edf
    sigma = float(np.sqrt(pls.rss / dof)) if dof > 0 else float('nan')
    return SplineParams(
        coefficients=pls.beta,
        knots=design.knots,
        lam=float(lam),
        edf=pls.edf,
        gcv=pls.gcv,
        rss=pls.rss,
        sigma=sigma,
        fitted_values=pls.fitted,
        residuals=pls.residuals,
        n_obs=design.n,
        method=method,
        converged=converged,
    )
