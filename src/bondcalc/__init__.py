# SPDX-License-Identifier: MIT

from bondcalc.bond import BondTermsRaw, BondTerms, resolve_yield, UNSET_YIELD
from bondcalc.errors import BondError, InvalidInputError, UnresolvedYieldError, SolverNonConvergenceWarning
from bondcalc.analytics import (
    YieldSolution,
    discounted_cashflows,
    present_value,
    solve_ytm,
    solve_break_even_yield,
    macaulay_duration,
    modified_duration,
    convexity,
    current_yield,
    annualized_current_yield,
)
from bondcalc.reports import (
    bond_analysis,
    price_sensitivity,
    scenario_analysis,
    frequency_analysis,
    amortization_schedule,
    full_report,
)

def load_bond(path_to_input: str, resolve: bool = True):
    """
    Reads the terms of a single bond from a CSV file.
    CSV should be in this format:

    Face Value,Coupon Rate,Market Price,Remaining Years,Payment Frequency,Required Yield
    1000,0.06,950,10,2,-1

    Args:
        path_to_input(str): The filepath for the CSV input.
        resolve(bool): If True, solve for the required yield when the file leaves it unset.

    Returns:
        BondTerms if resolve is True, otherwise BondTermsRaw.

    Example:
        >>> import bondcalc
        >>> terms = bondcalc.load_bond("bond.csv")
    """

    # Get CSV handler
    from bondcalc.csv import CSVHandler
    handler = CSVHandler()

    raw = handler.encode(path_to_input)
    return resolve_yield(raw) if resolve else raw
