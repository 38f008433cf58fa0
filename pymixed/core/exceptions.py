"""
Exception hierarchy for PyMixed.

All exceptions inherit from PyMixedError so callers can catch any
library-specific failure in one place. Model-specific failures
(invalid covariance, rank-deficient design, bad knots) subclass the
generic numerical and validation errors.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyMixedError(Exception):
    """Base exception for all PyMixed errors."""
    pass


class ValidationError(PyMixedError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.
    """
    pass


class InvalidKnotSequenceError(ValidationError):
    """
    Knot sequence cannot define a spline basis.

    Raised before any basis construction when knots are empty,
    non-finite, duplicated, or outside the open interval (0, 1).

    Attributes:
        knots: The offending knot values, as supplied
        reason: Short machine-readable reason ('non_numeric', 'empty', 'non_finite',
                'duplicate', 'out_of_domain')
    """

    def __init__(
        self,
        message: str,
        knots=None,
        reason: str | None = None,
    ):
        super().__init__(message)
        self.knots = knots
        self.reason = reason


class NumericalError(PyMixedError):
    """
    Numerical computation failed.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or nearly singular.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        condition_number: Estimated condition number, if available
        rank: Numerical rank, if computed
        expected_rank: Expected rank (typically the number of columns)
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        condition_number: float | None = None,
        rank: int | None = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.condition_number = condition_number
        self.rank = rank
        self.expected_rank = expected_rank


class RankDeficientDesignError(SingularMatrixError):
    """
    Fixed-effects design matrix is column-rank-deficient.

    The least-squares step for the fixed effects is ill-posed. This is a
    fatal configuration error: no ridge or pivoting is applied.
    """
    pass


class NotPositiveDefiniteError(NumericalError):
    """
    Matrix is not positive definite.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        min_eigenvalue: Minimum eigenvalue, if computed
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        min_eigenvalue: float | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.min_eigenvalue = min_eigenvalue


class InvalidCovarianceError(NotPositiveDefiniteError):
    """
    Marginal covariance τ²ZZ' + σ²I failed its Cholesky factorization.

    Inside the optimizer this marks a rejected candidate point and is
    turned into an infinite objective. Direct callers of the likelihood
    functions see it raised.

    Attributes:
        tau: Random-effect standard deviation at the failing point
        sigma: Residual standard deviation at the failing point
    """

    def __init__(
        self,
        message: str,
        tau: float | None = None,
        sigma: float | None = None,
        min_eigenvalue: float | None = None,
    ):
        super().__init__(message, matrix_name='Sigma', min_eigenvalue=min_eigenvalue)
        self.tau = tau
        self.sigma = sigma


class ConvergenceError(PyMixedError):
    """
    Iterative algorithm failed to produce any usable estimate.

    Raised when the optimizer never evaluated a finite objective, so
    there is no best-found point to report.

    Attributes:
        iterations: Number of iterations completed
        final_change: Final parameter or objective change
        reason: Why convergence failed (e.g., 'max_iterations', 'no_finite_point')
        threshold: The convergence threshold that was not met
    """

    def __init__(
        self,
        message: str,
        iterations: int,
        final_change: float | None = None,
        reason: str | None = None,
        threshold: float | None = None
    ):
        super().__init__(message)
        self.iterations = iterations
        self.final_change = final_change
        self.reason = reason
        self.threshold = threshold


class NonConvergenceWarning(RuntimeWarning):
    """
    Optimizer stopped on its iteration budget before meeting tolerance.

    The fit still returns its best-found estimate with ``converged=False``.
    """
    pass
