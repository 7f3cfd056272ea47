"""
analytics.py

Valuation and risk measures for a single fixed-coupon bond under periodic compounding.

Functions:
    discounted_cashflows(terms, rate) -> pd.DataFrame
        Schedule of cashflows discounted at a flat annual rate.
    present_value(terms, rate) -> float
        Price of the bond at a flat annual rate.
    solve_ytm(terms) -> float
        Yield to maturity implied by the market price.
    solve_break_even_yield(terms, reference_price) -> float
        Yield which reproduces an arbitrary reference price.
    macaulay_duration(terms), modified_duration(terms), convexity(terms) -> float
        Risk measures at the required yield.
    current_yield(terms) -> float
        Periodic coupon over market price.

Notes:
    - Both solvers search annual rates in [0, 1]. A yield outside that bracket is
      returned at the boundary and flagged with SolverNonConvergenceWarning.
    - Duration and convexity are weighted by the market price and discounted at the
      required yield, and are expressed in coupon periods.

Example:
    >>> from bondcalc.bond import BondTerms
    >>> from bondcalc.analytics import present_value
    >>> terms = BondTerms(face_value=1000, coupon_rate=0.05, market_price=1000,
                          remaining_years=5, payment_frequency=1, required_yield=0.05)
    >>> round(present_value(terms, 0.05), 6)
    1000.0
"""

# SPDX-License-Identifier: MIT

from dataclasses import dataclass
from typing import Optional
import logging
import warnings
import numpy as np
import pandas as pd
from scipy.optimize import bisect

from bondcalc.bond import BondTerms, BondTermsRaw
from bondcalc.errors import InvalidInputError, UnresolvedYieldError, SolverNonConvergenceWarning

logger = logging.getLogger(__name__)

# Annual rate bracket searched by both yield solvers
YIELD_BRACKET = (0.0, 1.0)

@dataclass(frozen=True)
class YieldSolution:
    """
    Outcome of a yield solve.

    Attributes:
        rate (float): Best estimate of the annual yield.
        iterations (int): Number of bisection steps taken.
        converged (bool): False if the solver ran out of iterations or the target was outside the bracket.
        price_error (float): Absolute difference between the price at rate and the target price.
    """
    rate: float
    iterations: int
    converged: bool
    price_error: float


def _discount_series(terms: BondTermsRaw, rate: float):
    """
    (Protected function)
    The single discounting series shared by price, duration and convexity.

    Returns:
        tuple of np.ndarray: (period index t, cashflow at t, discount factor at t)
    """
    rate = float(rate)
    freq = terms.payment_frequency
    if not np.isfinite(rate) or rate <= -freq:
        raise InvalidInputError(f"Discount rate must be greater than -payment_frequency ({-freq}), got {rate}")

    t = np.arange(1, terms.periods + 1)
    cashflows = np.full(terms.periods, terms.coupon, dtype=float)
    cashflows[-1] += terms.face_value # notional repaid with the final coupon
    discount_factors = np.power(1.0 + rate / freq, -t.astype(float))
    return t, cashflows, discount_factors


def discounted_cashflows(terms: BondTermsRaw, rate: float) -> pd.DataFrame:
    """
    Generates the schedule of cashflows discounted at a flat annual rate.

    Args:
        terms (BondTermsRaw): Bond terms. The required yield is not used.
        rate (float): Annual nominal discount rate, compounded payment_frequency times a year.

    Returns:
        pd.DataFrame: Columns Period, Time (years), Cashflow, Discount Factor and Present Value.
    """
    t, cashflows, discount_factors = _discount_series(terms, rate)
    return pd.DataFrame({
        "Period": t,
        "Time": t / terms.payment_frequency,
        "Cashflow": cashflows,
        "Discount Factor": discount_factors,
        "Present Value": cashflows * discount_factors,
    })


def present_value(terms: BondTermsRaw, rate: float) -> float:
    """
    Calculates the price of the bond by discounting every coupon and the face value at a flat annual rate.

    Args:
        terms (BondTermsRaw): Bond terms. The required yield is not used.
        rate (float): Annual nominal discount rate. Must be greater than -payment_frequency.

    Returns:
        float: Present value of all remaining cashflows.
    """
    _, cashflows, discount_factors = _discount_series(terms, rate)
    return float(np.sum(cashflows * discount_factors))


def solve_ytm(terms: BondTermsRaw, tolerance: float = 1e-6, max_iterations: int = 1000, full_output: bool = False):
    """
    Solves for the yield to maturity which makes the present value equal to the market price.

    Bisects annual rates in [0, 1]. Stops as soon as the price error at the midpoint is
    below tolerance, otherwise returns the last midpoint after max_iterations steps.

    Args:
        terms (BondTermsRaw): Bond terms. The required yield is not used.
        tolerance (float, optional): Absolute price tolerance.
        max_iterations (int, optional): Maximum number of bisection steps.
        full_output (bool, optional): If True, also return a YieldSolution.

    Returns:
        float, or (float, YieldSolution) if full_output is True.
    """
    if tolerance <= 0:
        raise InvalidInputError("tolerance must be positive")
    if max_iterations < 1:
        raise InvalidInputError("max_iterations must be at least 1")

    low, high = YIELD_BRACKET
    mid = low
    error = float("inf")
    converged = False
    iterations = 0

    for iterations in range(1, max_iterations + 1):
        mid = (low + high) / 2.0
        pv = present_value(terms, mid)
        error = abs(terms.market_price - pv)

        if error < tolerance:
            converged = True
            break

        # Price falls as the rate rises
        if pv < terms.market_price:
            high = mid
        else:
            low = mid

    solution = YieldSolution(rate=mid, iterations=iterations, converged=converged, price_error=error)
    if converged:
        logger.debug("YTM solved to %.10f in %d iterations", mid, iterations)
    else:
        _warn_not_converged("Yield to maturity", solution)

    if full_output:
        return mid, solution
    return mid


def solve_break_even_yield(terms: BondTermsRaw, reference_price: Optional[float] = None, xtol: float = 1e-6,
                           max_iterations: int = 100, full_output: bool = False):
    """
    Solves for the yield which reproduces a reference price.

    Bisects annual rates in [0, 1] until the bracket is no wider than xtol. Unlike solve_ytm
    there is no price tolerance check, and the target price need not be the market price.

    Args:
        terms (BondTermsRaw): Bond terms. The required yield is not used.
        reference_price (float, optional): Target price. Defaults to the market price.
        xtol (float, optional): Bracket width at which bisection stops.
        max_iterations (int, optional): Maximum number of bisection steps.
        full_output (bool, optional): If True, also return a YieldSolution.

    Returns:
        float, or (float, YieldSolution) if full_output is True.
    """
    if reference_price is None:
        reference_price = terms.market_price
    reference_price = float(reference_price)
    if not np.isfinite(reference_price) or reference_price <= 0:
        raise InvalidInputError("Expected positive value for reference_price")
    if xtol <= 0:
        raise InvalidInputError("xtol must be positive")

    def objective(rate):
        return present_value(terms, rate) - reference_price

    low, high = YIELD_BRACKET
    f_low, f_high = objective(low), objective(high)

    if f_low < 0:
        # Reference price is above the undiscounted cashflows, so the yield is negative
        solution = YieldSolution(rate=low, iterations=0, converged=False, price_error=abs(f_low))
    elif f_high > 0:
        solution = YieldSolution(rate=high, iterations=0, converged=False, price_error=abs(f_high))
    else:
        rate, result = bisect(objective, low, high, xtol=xtol, maxiter=max_iterations, full_output=True, disp=False)
        solution = YieldSolution(rate=float(rate), iterations=result.iterations,
                                 converged=bool(result.converged), price_error=abs(objective(rate)))

    if solution.converged:
        logger.debug("Break-even yield solved to %.10f in %d iterations", solution.rate, solution.iterations)
    else:
        _warn_not_converged("Break-even yield", solution)

    if full_output:
        return solution.rate, solution
    return solution.rate


def macaulay_duration(terms: BondTerms) -> float:
    """
    Calculates the Macaulay duration: the time to each cashflow, in coupon periods, weighted by
    its value discounted at the required yield over the market price.

    Raises:
        UnresolvedYieldError: If the terms have no required yield.
    """
    _require_resolved(terms, "macaulay_duration")
    t, cashflows, discount_factors = _discount_series(terms, terms.required_yield)
    return float(np.sum(t * cashflows * discount_factors) / terms.market_price)


def modified_duration(terms: BondTerms) -> float:
    """
    Calculates the modified duration, the Macaulay duration over (1 + y / payment_frequency).
    """
    _require_resolved(terms, "modified_duration")
    return macaulay_duration(terms) / (1.0 + terms.required_yield / terms.payment_frequency)


def convexity(terms: BondTerms) -> float:
    """
    Calculates the convexity at the required yield, in coupon periods squared.

    Each cashflow at period t contributes t(t+1) CF / (1 + y/f)^(t+2), and the total is divided
    by the market price.
    """
    _require_resolved(terms, "convexity")
    t, cashflows, discount_factors = _discount_series(terms, terms.required_yield)
    growth = 1.0 + terms.required_yield / terms.payment_frequency
    return float(np.sum(t * (t + 1) * cashflows * discount_factors) / growth ** 2 / terms.market_price)


def current_yield(terms: BondTermsRaw) -> float:
    """
    Calculates the current yield as the periodic coupon over the market price.

    Note: this is not annualised by payment frequency. See annualized_current_yield.
    """
    return terms.coupon / terms.market_price


def annualized_current_yield(terms: BondTermsRaw) -> float:
    """
    Calculates the conventional current yield, annual coupon income over the market price.
    Differs from current_yield whenever payment_frequency is not 1.
    """
    return terms.coupon * terms.payment_frequency / terms.market_price


def _require_resolved(terms: BondTermsRaw, operation: str) -> None:
    """
    (Protected function)
    Guards risk measures which discount at the required yield.
    """
    if getattr(terms, "required_yield", None) is None:
        raise UnresolvedYieldError(
            f"{operation} requires a resolved required_yield; call resolve_yield() on the bond terms first")


def _warn_not_converged(label: str, solution: YieldSolution) -> None:
    message = (f"{label} solver did not converge after {solution.iterations} iterations; "
               f"returning approximate rate {solution.rate:.6f} (price error {solution.price_error:.3g})")
    logger.warning(message)
    warnings.warn(message, SolverNonConvergenceWarning, stacklevel=3)
