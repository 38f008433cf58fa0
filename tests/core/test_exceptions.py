"""
Tests for the PyMixed exception hierarchy.

Validates:
    - Inheritance chain (all exceptions catchable via PyMixedError)
    - Diagnostic attributes on the numerical and knot errors
    - NonConvergenceWarning is a RuntimeWarning, not an exception class
      of the hierarchy
"""

import warnings

import pytest

from pymixed.core.exceptions import (
    ConvergenceError,
    DimensionError,
    InvalidCovarianceError,
    InvalidKnotSequenceError,
    NonConvergenceWarning,
    NotPositiveDefiniteError,
    NumericalError,
    PyMixedError,
    RankDeficientDesignError,
    SingularMatrixError,
    ValidationError,
)


# ═══════════════════════════════════════════════════════════════════════
# Inheritance hierarchy
# ═══════════════════════════════════════════════════════════════════════


class TestInheritance:
    """Every exception is catchable via PyMixedError."""

    def test_dimension_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            raise DimensionError("wrong shape")

    def test_knot_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            raise InvalidKnotSequenceError("duplicate knots")

    def test_rank_deficient_is_singular_matrix_error(self):
        with pytest.raises(SingularMatrixError):
            raise RankDeficientDesignError("X is rank-deficient")

    def test_rank_deficient_is_numerical_error(self):
        with pytest.raises(NumericalError):
            raise RankDeficientDesignError("X is rank-deficient")

    def test_invalid_covariance_is_not_positive_definite(self):
        with pytest.raises(NotPositiveDefiniteError):
            raise InvalidCovarianceError("Sigma not PD")

    def test_invalid_covariance_is_pymixed_error(self):
        with pytest.raises(PyMixedError):
            raise InvalidCovarianceError("Sigma not PD")

    def test_convergence_error_is_not_numerical_error(self):
        """ConvergenceError inherits from PyMixedError, not NumericalError."""
        err = ConvergenceError("no finite objective", iterations=0)
        assert isinstance(err, PyMixedError)
        assert not isinstance(err, NumericalError)

    def test_non_convergence_warning_is_runtime_warning(self):
        assert issubclass(NonConvergenceWarning, RuntimeWarning)
        assert not issubclass(NonConvergenceWarning, PyMixedError)

    def test_non_convergence_warning_can_be_filtered(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            warnings.warn("budget exhausted", NonConvergenceWarning)
        assert len(caught) == 1
        assert issubclass(caught[0].category, NonConvergenceWarning)


# ═══════════════════════════════════════════════════════════════════════
# Diagnostic attributes
# ═══════════════════════════════════════════════════════════════════════


class TestSingularMatrixError:
    """SingularMatrixError carries matrix diagnostic attributes."""

    def test_all_attributes(self):
        err = SingularMatrixError(
            "X'X is singular",
            matrix_name="X'X",
            condition_number=1e18,
            rank=3,
            expected_rank=5,
        )
        assert str(err) == "X'X is singular"
        assert err.matrix_name == "X'X"
        assert err.condition_number == 1e18
        assert err.rank == 3
        assert err.expected_rank == 5

    def test_defaults_are_none(self):
        err = RankDeficientDesignError("singular")
        assert err.matrix_name is None
        assert err.condition_number is None
        assert err.rank is None
        assert err.expected_rank is None


class TestInvalidCovarianceError:
    """InvalidCovarianceError records the offending variance components."""

    def test_attributes(self):
        err = InvalidCovarianceError(
            "Sigma not PD", tau=1e200, sigma=0.0, min_eigenvalue=-1e-3,
        )
        assert err.tau == 1e200
        assert err.sigma == 0.0
        assert err.min_eigenvalue == pytest.approx(-1e-3)
        assert err.matrix_name == 'Sigma'

    def test_defaults_are_none(self):
        err = InvalidCovarianceError("Sigma not PD")
        assert err.tau is None
        assert err.sigma is None
        assert err.min_eigenvalue is None


class TestInvalidKnotSequenceError:

    def test_attributes(self):
        err = InvalidKnotSequenceError(
            "duplicate", knots=[0.2, 0.2], reason='duplicate',
        )
        assert err.knots == [0.2, 0.2]
        assert err.reason == 'duplicate'

    def test_defaults_are_none(self):
        err = InvalidKnotSequenceError("bad")
        assert err.knots is None
        assert err.reason is None


class TestConvergenceError:
    """ConvergenceError carries iteration diagnostics."""

    def test_all_attributes(self):
        err = ConvergenceError(
            "no valid point",
            iterations=12,
            final_change=None,
            reason="no_finite_point",
            threshold=1e-10,
        )
        assert str(err) == "no valid point"
        assert err.iterations == 12
        assert err.final_change is None
        assert err.reason == "no_finite_point"
        assert err.threshold == 1e-10

    def test_required_iterations(self):
        """iterations is required (positional)."""
        err = ConvergenceError("failed", 42)
        assert err.iterations == 42
