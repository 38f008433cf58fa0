"""Tests for the variance-component optimizer driver."""

import warnings

import numpy as np
import pytest

from pymixed.core.exceptions import (
    ConvergenceError, InvalidCovarianceError, NonConvergenceWarning,
    ValidationError,
)
from pymixed.mixed import (
    build_grouping, lmm, minimize_negloglik, negloglik_whitened, theta_start_grid,
)
from pymixed.mixed import _optimize


@pytest.fixture
def sleep_design(sleepstudy):
    d = sleepstudy
    return d['X'], build_grouping(d['subject']).Z, d['y']


class TestNelderMead:

    def test_converges_on_sleepstudy(self, sleep_design):
        X, Z, y = sleep_design
        out = minimize_negloglik(X, Z, y)
        assert out.converged
        assert out.optimizer == 'Nelder-Mead'
        assert out.n_eval >= out.n_iter
        assert out.n_rejected == 0
        np.testing.assert_allclose(np.exp(out.theta), [36.01, 30.90], atol=0.1)

    def test_reported_nll_matches_route(self, sleep_design):
        X, Z, y = sleep_design
        out = minimize_negloglik(X, Z, y)
        ev = negloglik_whitened(out.theta, X, Z, y)
        assert out.nll == pytest.approx(ev.nll, rel=1e-12)

    def test_direct_route_same_optimum(self, sleep_design):
        X, Z, y = sleep_design
        w = minimize_negloglik(X, Z, y, route='whitened')
        d = minimize_negloglik(X, Z, y, route='direct')
        np.testing.assert_allclose(d.theta, w.theta, atol=1e-3)
        np.testing.assert_allclose(d.nll, w.nll, atol=1e-6)


class TestOtherOptimizers:

    @pytest.mark.parametrize('optimizer', ['L-BFGS-B', 'BFGS'])
    def test_reaches_same_likelihood(self, sleep_design, optimizer):
        X, Z, y = sleep_design
        ref = minimize_negloglik(X, Z, y)
        out = minimize_negloglik(X, Z, y, theta0=[3.0, 3.0], optimizer=optimizer)
        assert out.optimizer == optimizer
        np.testing.assert_allclose(out.nll, ref.nll, atol=1e-2)

    def test_unknown_optimizer(self, sleep_design):
        X, Z, y = sleep_design
        with pytest.raises(ValueError, match="Unknown optimizer"):
            minimize_negloglik(X, Z, y, optimizer='Powell')


class TestRejectedCandidates:

    def test_rejected_vertex_is_skipped(self, sleep_design, monkeypatch):
        """Points with an invalid covariance score +inf and are counted."""
        X, Z, y = sleep_design

        def capped(theta, X, Z, y):
            if theta[0] > 4.0:
                raise InvalidCovarianceError("capped", tau=float(np.exp(theta[0])))
            return negloglik_whitened(theta, X, Z, y)

        monkeypatch.setattr(_optimize, "get_route", lambda route: capped)
        out = minimize_negloglik(X, Z, y, theta0=[3.5, 3.5])
        assert out.n_rejected >= 1
        assert out.converged
        np.testing.assert_allclose(np.exp(out.theta), [36.01, 30.90], atol=0.1)

    def test_no_finite_point_raises(self, sleep_design):
        X, Z, y = sleep_design
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', RuntimeWarning)
            with pytest.raises(ConvergenceError) as exc_info:
                minimize_negloglik(X, Z, y, theta0=[800.0, 800.0], max_iter=20)
        assert exc_info.value.reason == 'no_finite_point'


class TestBudget:

    def test_exhausted_budget_reports_not_converged(self, sleep_design):
        X, Z, y = sleep_design
        out = minimize_negloglik(X, Z, y, max_iter=3)
        assert not out.converged
        assert out.n_iter <= 3
        assert np.all(np.isfinite(out.theta))

    def test_lmm_warns_on_exhausted_budget(self, sleepstudy):
        d = sleepstudy
        with pytest.warns(NonConvergenceWarning, match="did not converge"):
            fit = lmm(d['y'], d['X'], groups=d['subject'], max_iter=3)
        assert not fit.converged
        assert fit.result.has_warning('did not converge')
        assert 'WARNING: Model did not converge' in fit.summary()


class TestValidation:

    def test_bad_theta0_shape(self, sleep_design):
        X, Z, y = sleep_design
        with pytest.raises(ValidationError, match="theta0"):
            minimize_negloglik(X, Z, y, theta0=[1.0, 2.0, 3.0])

    def test_non_finite_theta0(self, sleep_design):
        X, Z, y = sleep_design
        with pytest.raises(ValidationError, match="theta0"):
            minimize_negloglik(X, Z, y, theta0=[np.nan, 0.0])

    def test_non_positive_tol(self, sleep_design):
        X, Z, y = sleep_design
        with pytest.raises(ValidationError, match="tol"):
            minimize_negloglik(X, Z, y, tol=0.0)

    def test_zero_max_iter(self, sleep_design):
        X, Z, y = sleep_design
        with pytest.raises(ValidationError, match="max_iter"):
            minimize_negloglik(X, Z, y, max_iter=0)


class TestStartGrid:

    def test_grid_start_beats_default(self, sleep_design):
        X, Z, y = sleep_design
        theta = theta_start_grid(X, Z, y)
        assert theta.shape == (2,)
        f_grid = negloglik_whitened(theta, X, Z, y).nll
        f_zero = negloglik_whitened(np.zeros(2), X, Z, y).nll
        assert f_grid < f_zero

    def test_grid_start_converges_to_same_optimum(self, sleep_design):
        X, Z, y = sleep_design
        ref = minimize_negloglik(X, Z, y)
        out = minimize_negloglik(X, Z, y, theta0=theta_start_grid(X, Z, y))
        np.testing.assert_allclose(out.nll, ref.nll, atol=1e-6)
