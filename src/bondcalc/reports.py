"""
reports.py

Derived tables built from repeated valuations of a single bond.

Functions:
    bond_analysis(terms) -> pd.DataFrame
        Headline price, yield and risk figures.
    price_sensitivity(terms, step=0.005, steps=2) -> pd.DataFrame
        Price at the required yield shifted up and down in equal steps.
    scenario_analysis(terms, shifts=SCENARIO_SHIFTS, reprice_risk=False) -> pd.DataFrame
        Price and risk figures for parallel yield shifts.
    frequency_analysis(terms, frequencies=FREQUENCIES, reprice_risk=False) -> pd.DataFrame
        Price and risk figures with the coupon frequency replaced.
    amortization_schedule(terms) -> pd.DataFrame
        Timing and size of every remaining payment.

Notes:
    - By default scenario_analysis only shifts the yield used for the price; the duration,
      convexity and current yield columns are those at the unshifted required yield.
      frequency_analysis likewise reuses the annual required yield under each compounding
      frequency and weights risk by the market price. Passing reprice_risk=True evaluates
      the risk columns at the shifted yield and weights them by the repriced value instead.
      This is a deliberate change in output, not a refinement.
"""

# SPDX-License-Identifier: MIT

from typing import Optional, Sequence
import numpy as np
import pandas as pd

from bondcalc.bond import BondTerms, BondTermsRaw, resolve_yield
from bondcalc.errors import InvalidInputError
from bondcalc.analytics import (
    present_value,
    solve_ytm,
    solve_break_even_yield,
    macaulay_duration,
    modified_duration,
    convexity,
    current_yield,
    _require_resolved,
)

SCENARIO_SHIFTS = (-0.02, -0.01, 0.0, 0.01, 0.02)
FREQUENCIES = (1, 2, 4)
FREQUENCY_LABELS = {1: "Annual", 2: "Semi-Annual", 4: "Quarterly", 12: "Monthly"}

RISK_COLUMNS = ["Macaulay Duration", "Modified Duration", "Convexity"]


def bond_analysis(terms: BondTerms, reference_price: Optional[float] = None) -> pd.DataFrame:
    """
    Returns the headline figures for a bond in a single row.

    Args:
        terms (BondTerms): Resolved bond terms.
        reference_price (float, optional): Price for the break-even yield. Defaults to the market price.

    Returns:
        pd.DataFrame: Present Value, YTM, Macaulay Duration, Modified Duration, Convexity,
            Current Yield and Break-Even Yield.
    """
    _require_resolved(terms, "bond_analysis")
    data = {
        "Present Value": present_value(terms, terms.required_yield),
        "YTM": solve_ytm(terms),
        "Macaulay Duration": macaulay_duration(terms),
        "Modified Duration": modified_duration(terms),
        "Convexity": convexity(terms),
        "Current Yield": current_yield(terms),
        "Break-Even Yield": solve_break_even_yield(terms, reference_price),
    }
    return pd.DataFrame([data])


def price_sensitivity(terms: BondTerms, step: float = 0.005, steps: int = 2) -> pd.DataFrame:
    """
    Prices the bond at the required yield plus k * step for k in -steps..steps.

    Returns:
        pd.DataFrame: 2 * steps + 1 rows with columns Yield and Price.
    """
    _require_resolved(terms, "price_sensitivity")
    # Integer multiples avoid drift from repeatedly adding a float step
    yields = terms.required_yield + np.arange(-steps, steps + 1) * step
    prices = [present_value(terms, y) for y in yields]
    return pd.DataFrame({"Yield": yields, "Price": prices})


def scenario_analysis(terms: BondTerms, shifts: Sequence[float] = SCENARIO_SHIFTS,
                      reprice_risk: bool = False) -> pd.DataFrame:
    """
    Reprices the bond under parallel shifts of the required yield.

    Args:
        terms (BondTerms): Resolved bond terms.
        shifts (sequence of float, optional): Yield shifts in decimals (e.g. 0.01 = 100bps).
        reprice_risk (bool, optional): If True, duration and convexity are evaluated at the shifted
            yield and weighted by the shifted price. Defaults to False, which keeps the unshifted figures.

    Returns:
        pd.DataFrame: One row per shift with columns Shift, Yield, Price, Macaulay Duration,
            Modified Duration, Convexity and Current Yield.
    """
    _require_resolved(terms, "scenario_analysis")

    rows = []
    for shift in shifts:
        shifted_yield = terms.required_yield + shift
        price = present_value(terms, shifted_yield)

        if reprice_risk:
            risk_terms = BondTerms(
                face_value=terms.face_value,
                coupon_rate=terms.coupon_rate,
                market_price=price,
                remaining_years=terms.remaining_years,
                payment_frequency=terms.payment_frequency,
                required_yield=shifted_yield,
            )
        else:
            risk_terms = terms

        row = {"Shift": shift, "Yield": shifted_yield, "Price": price}
        row.update(_risk_figures(risk_terms))
        row["Current Yield"] = current_yield(terms)
        rows.append(row)

    return pd.DataFrame(rows, columns=["Shift", "Yield", "Price"] + RISK_COLUMNS + ["Current Yield"])


def frequency_analysis(terms: BondTerms, frequencies: Sequence[int] = FREQUENCIES,
                       reprice_risk: bool = False) -> pd.DataFrame:
    """
    Values the bond as if it paid coupons at each of the given frequencies.

    The annual required yield is reused unchanged under every compounding frequency, so it must
    be greater than -freq for every frequency requested.

    Args:
        terms (BondTerms): Resolved bond terms.
        frequencies (sequence of int, optional): Coupon payments per year to compare.
        reprice_risk (bool, optional): If True, risk figures are weighted by the repriced value rather
            than the observed market price.

    Raises:
        InvalidInputError: If the required yield is at or below -freq for a requested frequency.

    Returns:
        pd.DataFrame: One row per frequency with columns Frequency, Label, Price, Macaulay Duration,
            Modified Duration and Convexity.
    """
    _require_resolved(terms, "frequency_analysis")
    for freq in frequencies:
        if freq > 0 and terms.required_yield <= -freq:
            raise InvalidInputError(
                f"frequency_analysis: required_yield {terms.required_yield} cannot be compounded {freq}x per year; "
                f"it must be greater than {-freq}")

    rows = []
    for freq in frequencies:
        variant = terms.with_frequency(freq)
        price = present_value(variant, variant.required_yield)
        if reprice_risk:
            variant = BondTerms(
                face_value=variant.face_value,
                coupon_rate=variant.coupon_rate,
                market_price=price,
                remaining_years=variant.remaining_years,
                payment_frequency=variant.payment_frequency,
                required_yield=variant.required_yield,
            )

        row = {"Frequency": variant.payment_frequency, "Label": frequency_label(freq), "Price": price}
        row.update(_risk_figures(variant))
        rows.append(row)

    return pd.DataFrame(rows, columns=["Frequency", "Label", "Price"] + RISK_COLUMNS)


def amortization_schedule(terms: BondTermsRaw) -> pd.DataFrame:
    """
    Lists every remaining payment. Each period pays the coupon, and the final period
    also repays the face value.

    Returns:
        pd.DataFrame: Columns Period, Payment Time (years) and Payment.
    """
    periods = np.arange(1, terms.periods + 1)
    payments = np.full(terms.periods, terms.coupon, dtype=float)
    payments[-1] = terms.coupon + terms.face_value
    return pd.DataFrame({
        "Period": periods,
        "Payment Time": periods / terms.payment_frequency,
        "Payment": payments,
    })


def full_report(raw: BondTermsRaw) -> dict:
    """
    Resolves the bond terms and builds every report.

    Returns:
        dict: Report name mapped to its pd.DataFrame, in display order.
    """
    terms = resolve_yield(raw)
    return {
        "Bond Analysis": bond_analysis(terms),
        "Price Sensitivity Analysis": price_sensitivity(terms),
        "Scenario Analysis": scenario_analysis(terms),
        "Frequency Analysis": frequency_analysis(terms),
        "Amortization Schedule": amortization_schedule(terms),
    }


def frequency_label(freq: int) -> str:
    return FREQUENCY_LABELS.get(freq, f"{freq}x per year")


def _risk_figures(terms: BondTerms) -> dict:
    return {
        "Macaulay Duration": macaulay_duration(terms),
        "Modified Duration": modified_duration(terms),
        "Convexity": convexity(terms),
    }
