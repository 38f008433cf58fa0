"""
Mixed models: Gaussian linear mixed model with one random term, fit by ML.

Public API:
    lmm()                    — fit the model (optimizer over log τ, log σ)
    LMMSolution              — result wrapper
    marginal_covariance()    — Σ = τ²ZZ' + σ²I
    negloglik_whitened()     — likelihood via Cholesky whitening + OLS
    negloglik_direct()       — likelihood via the multivariate normal density
    minimize_negloglik()     — optimizer driver
    theta_start_grid()       — coarse grid search for a starting θ
    predict_random_effects() — BLUPs of the random effects
    build_grouping()         — one-hot grouping design from labels
"""

from pymixed.mixed.solvers import lmm
from pymixed.mixed.solution import LMMSolution
from pymixed.mixed._covariance import marginal_covariance
from pymixed.mixed._likelihood import (
    LikelihoodEval, negloglik_whitened, negloglik_direct,
)
from pymixed.mixed._optimize import (
    OptimizeOutcome, minimize_negloglik, theta_start_grid,
)
from pymixed.mixed._random_effects import (
    GroupingFactor, build_grouping, predict_random_effects,
)

__all__ = [
    "lmm",
    "LMMSolution",
    "marginal_covariance",
    "LikelihoodEval",
    "negloglik_whitened",
    "negloglik_direct",
    "OptimizeOutcome",
    "minimize_negloglik",
    "theta_start_grid",
    "GroupingFactor",
    "build_grouping",
    "predict_random_effects",
]
