"""
errors.py

Exception and warning classes raised by the bondcalc library.

Classes:
    BondError - Base class for every error raised by bondcalc.
    InvalidInputError - Bond terms or call arguments that cannot be valued.
    UnresolvedYieldError - A risk measure was requested before the required yield was resolved.
    SolverNonConvergenceWarning - A yield solver stopped before meeting its tolerance.
"""

# SPDX-License-Identifier: MIT


class BondError(Exception):
    """
    Base class for every error raised by bondcalc.
    """


class InvalidInputError(BondError, ValueError):
    """
    Raised when bond terms or call arguments are rejected before any computation,
    e.g. a non-positive face value, a zero payment frequency or a discount rate
    at or below -payment_frequency.
    """


class UnresolvedYieldError(BondError):
    """
    Raised when duration, convexity or a risk report is requested for terms whose
    required yield has not been resolved. Use bondcalc.bond.resolve_yield first.
    """


class SolverNonConvergenceWarning(RuntimeWarning):
    """
    Emitted when a bisection solver exhausts its iteration budget, or the target
    lies outside the search bracket. The returned rate is the best estimate only.
    """
