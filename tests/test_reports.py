# SPDX-License-Identifier: MIT

import pandas as pd
import pytest
from bondcalc.bond import BondTermsRaw, BondTerms, resolve_yield
from bondcalc.analytics import present_value, solve_ytm, macaulay_duration, modified_duration, convexity, current_yield
from bondcalc.reports import (
    bond_analysis,
    price_sensitivity,
    scenario_analysis,
    frequency_analysis,
    amortization_schedule,
    full_report,
    frequency_label,
)
from bondcalc.errors import InvalidInputError, UnresolvedYieldError

@pytest.fixture
def raw():
    return BondTermsRaw(face_value=1000, coupon_rate=0.06, market_price=950, remaining_years=10, payment_frequency=2)

@pytest.fixture
def terms():
    return BondTerms(face_value=1000, coupon_rate=0.06, market_price=950, remaining_years=10,
                     payment_frequency=2, required_yield=0.07)

def test_bond_analysis(terms):
    df = bond_analysis(terms)
    assert list(df.columns) == ["Present Value", "YTM", "Macaulay Duration", "Modified Duration",
                                "Convexity", "Current Yield", "Break-Even Yield"]
    row = df.iloc[0]
    assert row["Present Value"] == pytest.approx(present_value(terms, 0.07))
    assert row["YTM"] == pytest.approx(solve_ytm(terms))
    assert row["Break-Even Yield"] == pytest.approx(row["YTM"], abs=1e-5)
    assert row["Current Yield"] == pytest.approx(30 / 950)

def test_price_sensitivity(terms):
    df = price_sensitivity(terms)
    assert list(df.columns) == ["Yield", "Price"]
    assert len(df) == 5
    assert df["Yield"].tolist() == pytest.approx([0.06, 0.065, 0.07, 0.075, 0.08])
    assert df["Price"].is_monotonic_decreasing
    assert df.iloc[2]["Price"] == pytest.approx(present_value(terms, 0.07))
    assert df.iloc[0]["Price"] == pytest.approx(1000.0)  # priced at the coupon rate

def test_price_sensitivity_custom_grid(terms):
    df = price_sensitivity(terms, step=0.01, steps=3)
    assert len(df) == 7
    assert df["Yield"].iloc[0] == pytest.approx(0.04)

def test_scenario_analysis_keeps_unshifted_risk(terms):
    df = scenario_analysis(terms)
    assert list(df.columns) == ["Shift", "Yield", "Price", "Macaulay Duration", "Modified Duration",
                                "Convexity", "Current Yield"]
    assert df["Shift"].tolist() == [-0.02, -0.01, 0.0, 0.01, 0.02]
    assert df["Yield"].tolist() == pytest.approx([0.05, 0.06, 0.07, 0.08, 0.09])
    assert df["Price"].is_monotonic_decreasing

    # Risk columns do not move with the shift
    assert (df["Macaulay Duration"] == macaulay_duration(terms)).all()
    assert (df["Modified Duration"] == modified_duration(terms)).all()
    assert (df["Convexity"] == convexity(terms)).all()
    assert (df["Current Yield"] == current_yield(terms)).all()

def test_scenario_analysis_reprice_risk(raw):
    terms = resolve_yield(raw)
    df = scenario_analysis(terms, reprice_risk=True)
    # Duration shortens as yields rise
    assert df["Macaulay Duration"].is_monotonic_decreasing
    # No shift at the solved yield reproduces the default figures
    assert df.iloc[2]["Macaulay Duration"] == pytest.approx(macaulay_duration(terms), rel=1e-6)
    assert df.iloc[2]["Convexity"] == pytest.approx(convexity(terms), rel=1e-6)

def test_frequency_analysis(terms):
    df = frequency_analysis(terms)
    assert list(df.columns) == ["Frequency", "Label", "Price", "Macaulay Duration", "Modified Duration", "Convexity"]
    assert df["Frequency"].tolist() == [1, 2, 4]
    assert df["Label"].tolist() == ["Annual", "Semi-Annual", "Quarterly"]

    # Semiannual row is the bond as given
    semi = df.iloc[1]
    assert semi["Price"] == pytest.approx(present_value(terms, 0.07))
    assert semi["Macaulay Duration"] == pytest.approx(macaulay_duration(terms))
    assert semi["Convexity"] == pytest.approx(convexity(terms))

    # Same annual rate reinterpreted under each compounding frequency
    annual = BondTerms(face_value=1000, coupon_rate=0.06, market_price=950, remaining_years=10,
                       payment_frequency=1, required_yield=0.07)
    assert df.iloc[0]["Price"] == pytest.approx(present_value(annual, 0.07))
    assert df.iloc[0]["Modified Duration"] == pytest.approx(modified_duration(annual))

def test_frequency_analysis_reprice_risk(terms):
    df = frequency_analysis(terms, frequencies=(1,), reprice_risk=True)
    annual = BondTerms(face_value=1000, coupon_rate=0.06, market_price=present_value(terms.with_frequency(1), 0.07),
                       remaining_years=10, payment_frequency=1, required_yield=0.07)
    assert df.iloc[0]["Macaulay Duration"] == pytest.approx(macaulay_duration(annual))

def test_frequency_label():
    assert frequency_label(12) == "Monthly"
    assert frequency_label(3) == "3x per year"

def test_amortization_schedule(terms):
    df = amortization_schedule(terms)
    assert list(df.columns) == ["Period", "Payment Time", "Payment"]
    assert len(df) == 20
    assert df["Period"].tolist() == list(range(1, 21))
    assert df.iloc[0]["Payment Time"] == 0.5
    assert df.iloc[-1]["Payment Time"] == 10.0

    # Every payment is the coupon except the last, which also repays the face value
    assert (df["Payment"].iloc[:-1] == 30.0).all()
    assert df["Payment"].iloc[-1] == 1030.0
    assert df["Payment"].sum() == pytest.approx(30.0 * 19 + 30.0 + 1000)

def test_amortization_schedule_does_not_need_yield(raw):
    df = amortization_schedule(raw)
    assert len(df) == raw.periods

@pytest.mark.parametrize("report", [bond_analysis, price_sensitivity, scenario_analysis, frequency_analysis])
def test_reports_require_resolved_yield(raw, report):
    with pytest.raises(UnresolvedYieldError):
        report(raw)

def test_full_report(raw):
    reports = full_report(raw)
    assert list(reports) == ["Bond Analysis", "Price Sensitivity Analysis", "Scenario Analysis",
                             "Frequency Analysis", "Amortization Schedule"]
    assert all(isinstance(df, pd.DataFrame) for df in reports.values())
    # Required yield solved from the market price, so the model price is the market price
    assert reports["Bond Analysis"].iloc[0]["Present Value"] == pytest.approx(950, abs=1e-4)

def test_frequency_analysis_checks_yield_against_each_frequency():
    # -150% is a valid quarterly rate but cannot be compounded once a year
    quarterly = BondTerms(face_value=1000, coupon_rate=0.06, market_price=950, remaining_years=10,
                          payment_frequency=4, required_yield=-1.5)
    with pytest.raises(InvalidInputError, match="frequency_analysis"):
        frequency_analysis(quarterly)

    df = frequency_analysis(quarterly, frequencies=(2, 4))
    assert df["Frequency"].tolist() == [2, 4]
