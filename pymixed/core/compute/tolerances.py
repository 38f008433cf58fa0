"""
Numerical tolerances shared by the estimation code and the test suite.

Every threshold that turns a floating-point quantity into a yes/no
decision (is this eigenvalue zero, is this column dependent, have we
converged) lives here so it is chosen once and documented once.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


# Whitened vs. direct likelihood evaluation of the same point
LIKELIHOOD_AGREEMENT = ToleranceTier(
    rtol=1e-9,
    atol=1e-6,
    name='likelihood_agreement',
    description='Two likelihood routes on identical inputs',
)

# Fitted estimates vs. published reference fits (lme4 ML)
REFERENCE_FIT = ToleranceTier(
    rtol=1e-3,
    atol=0.1,
    name='reference_fit',
    description='Converged estimates vs. reference software',
)

# Relative decrease in the objective at which the optimizer stops.
OPTIMIZER_RTOL = 1e-10

# Eigenvalues of the penalty matrix at or below
# NULL_EIGENVALUE_RTOL * max(eigenvalue) are treated as exactly zero.
# Kernel-block eigenvalues for knots in (0, 1) sit many orders above
# this, while rounding noise on the null space sits near 1e-16.
NULL_EIGENVALUE_RTOL = 1e-10

# Diagonal entries of R in a QR factorization below
# RANK_RTOL * max(n, p) * |R[0, 0]| count as dependent columns.
RANK_RTOL = 2.220446049250313e-16
