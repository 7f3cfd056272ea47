"""
cli.py

Console entry point: gathers bond terms and prints every report.

Functions:
    gather_terms(args) -> BondTermsRaw
        Builds bond terms from a CSV file, command line flags or interactive prompts.
    main(argv=None) -> None
        Runs the calculator. Installed as the bondcalc console script.

Example:
    $ bondcalc --face-value 1000 --coupon-rate 0.06 --market-price 950 --years 10 --frequency 2 --required-yield -1
"""

# SPDX-License-Identifier: MIT

from bondcalc.bond import BondTermsRaw, UNSET_YIELD
from bondcalc.csv import CSVHandler
from bondcalc.errors import BondError, SolverNonConvergenceWarning
from bondcalc.reports import full_report
from typing import List, Optional
import argparse
import logging
import warnings
import pandas as pd

# (argument name, prompt text, type) in the order values are asked for
PROMPTS = [
    ("face_value", "Enter Face Value (e.g. 1000): ", float),
    ("coupon_rate", "Enter Coupon Rate (e.g. 0.05 for 5%): ", float),
    ("market_price", "Enter Market Price (e.g. 950): ", float),
    ("remaining_years", "Enter Remaining Maturity in Years (e.g. 8): ", int),
    ("payment_frequency", "Enter Payment Frequency (1 for annual, 2 for semi-annual): ", int),
    ("required_yield",
     "Enter Required Yield (e.g. 0.06 for 6%, or -1 if you want it to be calculated based on price): ", float),
]


def _prompt(text: str, cast):
    try:
        raw = input(text).strip()
    except EOFError:
        raise SystemExit(f"Error: input ended before a value was given for: {text.strip()}")
    try:
        return cast(raw)
    except ValueError:
        raise SystemExit(f"Error: could not read {raw!r} as {cast.__name__}")


def _print_table(title: str, df: pd.DataFrame) -> None:
    print(f"\n{title}:")
    print(df.to_string(index=False, float_format=lambda v: f"{v:.4f}"))


def _print_kv(title: str, df: pd.DataFrame) -> None:
    print(f"\n{title}:")
    for k, v in df.iloc[0].items():
        print(f"{k}: {float(v):.4f}")


def gather_terms(args: argparse.Namespace) -> BondTermsRaw:
    """
    Builds raw bond terms from a CSV file, command line flags, or prompts for anything missing.
    """
    if args.file:
        return CSVHandler().encode(args.file)

    values = {}
    for name, text, cast in PROMPTS:
        value = getattr(args, name)
        if value is None:
            value = _prompt(text, cast)
        values[name] = value

    return BondTermsRaw.from_input(**values)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Bond valuation and risk calculator")
    p.add_argument("--file", default=None, help="CSV with columns: Face Value,Coupon Rate,Market Price,"
                                               "Remaining Years,Payment Frequency[,Required Yield]")
    p.add_argument("--face-value", dest="face_value", type=float, default=None, help="Redemption amount (e.g. 1000)")
    p.add_argument("--coupon-rate", dest="coupon_rate", type=float, default=None, help="Annual coupon rate (e.g. 0.05)")
    p.add_argument("--market-price", dest="market_price", type=float, default=None, help="Observed price (e.g. 950)")
    p.add_argument("--years", dest="remaining_years", type=int, default=None, help="Whole years to maturity")
    p.add_argument("--frequency", dest="payment_frequency", type=int, default=None,
                   help="Coupon payments per year (1, 2, 4, ...)")
    p.add_argument("--required-yield", dest="required_yield", type=float, default=None,
                   help=f"Annual required yield, or {UNSET_YIELD:g} to solve it from the market price")
    p.add_argument("-v", "--verbose", action="store_true", help="Show solver progress")
    return p


def main(argv: Optional[List[str]] = None) -> None:
    p = build_parser()
    args = p.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s")
    # Non-convergence is reported through logging
    warnings.simplefilter("ignore", SolverNonConvergenceWarning)

    try:
        raw = gather_terms(args)
        reports = full_report(raw)
    except BondError as e:
        raise SystemExit(f"Error: {e}")

    for title, df in reports.items():
        if title == "Bond Analysis":
            _print_kv(title, df)
        else:
            _print_table(title, df)


if __name__ == "__main__":
    main()
