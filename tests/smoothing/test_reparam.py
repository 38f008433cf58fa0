"""Tests for the mixed-model re-parameterization of the spline."""

import numpy as np
import pytest

from pymixed.core.exceptions import DimensionError, ValidationError
from pymixed.smoothing import (
    default_knots, mixed_model_matrices, mixed_split, penalty_matrix, spline_design,
)


@pytest.fixture
def spline_setup(rng):
    knots = default_knots(7)
    x = rng.uniform(0, 1, size=40)
    X = spline_design(x, knots)
    S = penalty_matrix(knots)
    return X, S, mixed_split(S)


class TestMixedSplit:

    def test_eigenvalues_sorted_and_partitioned(self, spline_setup):
        _, S, split = spline_setup
        assert np.all(np.diff(split.D) <= 0)
        assert split.n_random == 7
        assert split.n_fixed == 2
        assert np.all(split.D_random > split.tol)
        assert np.all(np.abs(split.D[split.n_random:]) <= split.tol)

    def test_orthogonal(self, spline_setup):
        _, _, split = spline_setup
        np.testing.assert_allclose(split.U.T @ split.U, np.eye(9), atol=1e-12)

    def test_null_space_is_unpenalized(self, spline_setup):
        _, S, split = spline_setup
        np.testing.assert_allclose(S @ split.U_fixed, 0.0, atol=1e-14)

    def test_zero_penalty_rejected(self):
        with pytest.raises(ValidationError, match="no positive eigenvalue"):
            mixed_split(np.zeros((3, 3)))

    def test_explicit_tolerance(self, spline_setup):
        """A loose tolerance moves small penalized directions to the null block."""
        _, S, split = spline_setup
        loose = mixed_split(S, rtol=2 * split.D[split.n_random - 1] / split.D[0])
        assert loose.n_fixed > split.n_fixed


class TestMixedModelMatrices:

    def test_round_trip(self, spline_setup, rng):
        """Xβ = X_F β'_F + X_R β'_R with β' = U'β."""
        X, _, split = spline_setup
        X_F, X_R, _ = mixed_model_matrices(X, split)
        beta = rng.standard_normal(9)
        beta_p = split.U.T @ beta
        np.testing.assert_allclose(
            X @ beta,
            X_F @ beta_p[split.n_random:] + X_R @ beta_p[:split.n_random],
            atol=1e-12,
        )

    def test_penalty_becomes_ridge(self, spline_setup, rng):
        """With g = D^{1/2} β'_R, Zg = X_R β'_R and β'Sβ = ‖g‖²."""
        X, S, split = spline_setup
        _, X_R, Z = mixed_model_matrices(X, split)
        beta = rng.standard_normal(9)
        g = np.sqrt(split.D_random) * (split.U_random.T @ beta)
        np.testing.assert_allclose(Z @ g, X_R @ (split.U_random.T @ beta), atol=1e-12)
        assert beta @ S @ beta == pytest.approx(g @ g, rel=1e-10)

    def test_to_original_inverts(self, spline_setup, rng):
        _, _, split = spline_setup
        beta = rng.standard_normal(9)
        beta_F = split.U_fixed.T @ beta
        g = np.sqrt(split.D_random) * (split.U_random.T @ beta)
        np.testing.assert_allclose(split.to_original(beta_F, g), beta, atol=1e-12)

    def test_column_mismatch(self, spline_setup):
        X, _, split = spline_setup
        with pytest.raises(DimensionError):
            mixed_model_matrices(X[:, :5], split)
