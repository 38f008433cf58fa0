"""
Tests for the Result[P] envelope.
"""

from dataclasses import FrozenInstanceError, dataclass

import pytest

from pymixed.core.result import Result


@dataclass(frozen=True)
class FakeParams:
    """Minimal payload for testing."""
    value: float


class TestResultConstruction:

    def test_basic_creation(self):
        r = Result(
            params=FakeParams(1.5),
            info={'method': 'ML', 'converged': True},
            timing=None,
            backend_name='cpu_lmm',
        )
        assert r.params.value == 1.5
        assert r.info['converged'] is True
        assert r.timing is None
        assert r.backend_name == 'cpu_lmm'

    def test_timing_with_breakdown(self):
        r = Result(
            params=FakeParams(0.0),
            info={},
            timing={'total_seconds': 0.5, 'optimization': 0.4},
            backend_name='cpu_lmm',
        )
        assert r.timing['optimization'] == 0.4

    def test_warnings_default_empty(self):
        r = Result(params=FakeParams(0.0), info={}, timing=None, backend_name='x')
        assert r.warnings == ()


class TestImmutability:

    def test_cannot_set_params(self):
        r = Result(params=FakeParams(0.0), info={}, timing=None, backend_name='x')
        with pytest.raises(FrozenInstanceError):
            r.params = FakeParams(1.0)

    def test_cannot_set_warnings(self):
        r = Result(params=FakeParams(0.0), info={}, timing=None, backend_name='x')
        with pytest.raises(FrozenInstanceError):
            r.warnings = ('changed',)


class TestHasWarning:

    def test_no_warnings_returns_false(self):
        r = Result(params=FakeParams(0.0), info={}, timing=None, backend_name='x')
        assert not r.has_warning('converge')

    def test_substring_match(self):
        r = Result(
            params=FakeParams(0.0), info={}, timing=None, backend_name='x',
            warnings=('Nelder-Mead did not converge after 3 iterations',),
        )
        assert r.has_warning('did not converge')
        assert not r.has_warning('singular')
