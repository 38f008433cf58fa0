"""Tests for MixedDesign validation."""

import numpy as np
import pytest

from pymixed.core.exceptions import (
    DimensionError, RankDeficientDesignError, ValidationError,
)
from pymixed.mixed import lmm
from pymixed.mixed.design import MixedDesign


class TestMixedDesign:

    def test_from_groups(self, sleepstudy):
        d = sleepstudy
        design = MixedDesign.validate(d['y'], d['X'], groups=d['subject'])
        assert (design.n, design.p, design.m) == (180, 2, 18)
        assert design.is_grouping
        assert design.Z.shape == (180, 18)

    def test_from_explicit_z(self, rng):
        y = rng.standard_normal(10)
        X = np.ones(10)
        Z = rng.standard_normal((10, 3))
        design = MixedDesign.validate(y, X, Z=Z)
        assert not design.is_grouping
        assert design.group_levels is None
        assert design.X.shape == (10, 1)

    def test_requires_exactly_one_random_design(self, rng):
        y = rng.standard_normal(10)
        X = np.ones((10, 1))
        with pytest.raises(ValidationError, match="exactly one"):
            MixedDesign.validate(y, X)
        with pytest.raises(ValidationError, match="exactly one"):
            MixedDesign.validate(y, X, groups=np.arange(10) % 2, Z=np.ones((10, 1)))

    def test_length_mismatch(self, rng):
        with pytest.raises(DimensionError):
            MixedDesign.validate(
                rng.standard_normal(10), np.ones((9, 1)), groups=np.arange(10) % 2,
            )

    def test_non_finite_response(self):
        y = np.array([1.0, np.nan, 2.0, 3.0])
        with pytest.raises(ValidationError, match="non-finite"):
            MixedDesign.validate(y, np.ones(4), groups=[0, 0, 1, 1])

    def test_too_few_observations(self):
        with pytest.raises(ValidationError):
            MixedDesign.validate([1.0, 2.0], np.ones(2), groups=[0, 1])

    def test_rank_deficient_fixed_design(self, sleepstudy):
        d = sleepstudy
        X = np.column_stack([d['X'], d['X'][:, 1] * 3.0])
        with pytest.raises(RankDeficientDesignError) as exc_info:
            MixedDesign.validate(d['y'], X, groups=d['subject'])
        assert exc_info.value.expected_rank == 3

    def test_lmm_rejects_rank_deficient(self, sleepstudy):
        d = sleepstudy
        X = np.column_stack([d['X'], d['X'][:, 0]])
        with pytest.raises(RankDeficientDesignError):
            lmm(d['y'], X, groups=d['subject'])

    def test_coefficient_names_length_checked(self, sleepstudy):
        d = sleepstudy
        with pytest.raises(ValueError, match="coefficient_names"):
            lmm(d['y'], d['X'], groups=d['subject'], coefficient_names=['a'])
