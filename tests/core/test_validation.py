"""
Tests for input validation utilities.
"""

import numpy as np
import pytest

from pymixed.core.exceptions import (
    DimensionError, RankDeficientDesignError, ValidationError,
)
from pymixed.core.validation import (
    check_1d,
    check_2d,
    check_array,
    check_column_rank,
    check_consistent_length,
    check_finite,
    check_min_samples,
)


class TestCheckArray:

    def test_list_to_float_array(self):
        arr = check_array([1, 2, 3], 'x')
        assert arr.dtype == np.float64
        np.testing.assert_array_equal(arr, [1.0, 2.0, 3.0])

    def test_nested_list_to_2d(self):
        arr = check_array([[1, 2], [3, 4]], 'X')
        assert arr.shape == (2, 2)

    def test_rejects_mixed_types(self):
        with pytest.raises(ValidationError, match="X"):
            check_array([1, 'a', None], 'X')

    def test_rejects_strings(self):
        with pytest.raises(ValidationError, match="non-numeric"):
            check_array(['a', 'b'], 'y')


class TestCheckFinite:

    def test_finite_passes(self):
        check_finite(np.array([1.0, 2.0]), 'y')

    def test_nan_rejected(self):
        with pytest.raises(ValidationError, match="1 NaN"):
            check_finite(np.array([1.0, np.nan]), 'y')

    def test_inf_rejected(self):
        with pytest.raises(ValidationError, match="1 Inf"):
            check_finite(np.array([np.inf, 2.0]), 'y')


class TestCheckNdim:

    def test_check_1d_rejects_2d(self):
        with pytest.raises(DimensionError, match="expected 1D"):
            check_1d(np.zeros((3, 2)), 'y')

    def test_check_2d_rejects_1d(self):
        with pytest.raises(DimensionError, match="expected 2D"):
            check_2d(np.zeros(3), 'X')


class TestConsistentLength:

    def test_same_length_passes(self):
        check_consistent_length(np.zeros(5), np.zeros((5, 2)), names=('y', 'X'))

    def test_mismatch_raises_with_details(self):
        with pytest.raises(DimensionError, match="y=5, X=4"):
            check_consistent_length(np.zeros(5), np.zeros((4, 2)), names=('y', 'X'))

    def test_name_count_mismatch(self):
        with pytest.raises(ValueError):
            check_consistent_length(np.zeros(5), np.zeros(5), names=('y',))


class TestMinSamples:

    def test_too_few(self):
        with pytest.raises(ValidationError, match="at least 3"):
            check_min_samples(np.zeros(2), 3, 'y')


class TestColumnRank:

    def test_full_rank_passes(self, rng):
        check_column_rank(rng.standard_normal((20, 3)), 'X')

    def test_duplicate_column_raises(self, rng):
        x = rng.standard_normal(20)
        X = np.column_stack([np.ones(20), x, 2.0 * x])
        with pytest.raises(RankDeficientDesignError) as exc_info:
            check_column_rank(X, 'X')
        assert exc_info.value.rank == 2
        assert exc_info.value.expected_rank == 3
        assert exc_info.value.matrix_name == 'X'
