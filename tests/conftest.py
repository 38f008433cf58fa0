"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from pymixed.datasets import sleepstudy as _sleepstudy, engine as _engine


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def sleepstudy():
    """lme4 sleepstudy: reaction ~ days + (1 | subject), 18 × 10 rows."""
    X = np.column_stack([np.ones(180), _sleepstudy['days']])
    return {
        'y': _sleepstudy['reaction'],
        'X': X,
        'subject': _sleepstudy['subject'],
    }


@pytest.fixture
def engine():
    """Engine wear against size, size rescaled onto [0, 1], 7 even knots."""
    size = _engine['size']
    return {
        'x': (size - size.min()) / (size.max() - size.min()),
        'y': _engine['wear'],
        'knots': np.arange(1, 8) / 8.0,
    }


@pytest.fixture
def random_intercept_data(rng):
    """Unbalanced random-intercept data with a continuous covariate.

    8 clusters of sizes 3..10, intercept 5, slope 2, τ = 1.5, σ = 1.
    """
    sizes = np.arange(3, 11)
    group = np.repeat(np.arange(len(sizes)), sizes)
    n = group.shape[0]
    g = rng.normal(0.0, 1.5, size=len(sizes))
    x = rng.standard_normal(n)
    y = 5.0 + 2.0 * x + g[group] + rng.normal(0.0, 1.0, size=n)
    X = np.column_stack([np.ones(n), x])
    return {'y': y, 'X': X, 'group': group, 'n': n, 'g': g}
