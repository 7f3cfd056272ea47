"""
bond.py

Contains the bond terms records and the yield resolution step.

Classes:
    BondTermsRaw - Static bond parameters, possibly without a required yield.
    BondTerms - Static bond parameters with the required yield always present.

Functions:
    resolve_yield(raw) -> BondTerms
        Fills in a missing required yield by solving for yield to maturity.

Notes:
    - Rates are annual nominal rates compounded payment_frequency times per year.
    - A required yield of None or UNSET_YIELD (-1) means "solve the yield for me". Both are
      stored as None, so -1 can never be used as a real discount rate.

Example:
    >>> from bondcalc.bond import BondTermsRaw, resolve_yield
    >>> raw = BondTermsRaw(face_value=1000, coupon_rate=0.06, market_price=950,
                           remaining_years=10, payment_frequency=2)
    >>> terms = resolve_yield(raw)
    >>> round(terms.required_yield, 4)
    0.0669
"""

# SPDX-License-Identifier: MIT

from dataclasses import dataclass, replace
from numbers import Integral, Real
from typing import Optional
import logging
import math
import pandas as pd

from bondcalc.errors import InvalidInputError, UnresolvedYieldError

logger = logging.getLogger(__name__)

# Console value meaning "derive the required yield from the market price"
UNSET_YIELD = -1.0

@dataclass(frozen=True)
class BondTermsRaw:
    """
    Static terms of a single fixed-coupon bond.

    Attributes:
        face_value (float):
            Redemption amount paid at maturity. Must be positive.
        coupon_rate (float):
            Nominal annual coupon rate (e.g. 0.05 for 5%). Must be non-negative.
        market_price (float):
            Observed trading price of the bond. Must be positive.
        remaining_years (int):
            Whole years until maturity. Must be positive.
        payment_frequency (int):
            Number of coupon payments per year. Typical values are:
              - 1 = annual
              - 2 = semiannual
              - 4 = quarterly
        required_yield (float, optional):
            Annual nominal discount rate used for duration, convexity and default pricing.
            None, or UNSET_YIELD, means the yield has not been resolved yet.

    Methods:
        resolve(tolerance=1e-6, max_iterations=1000) -> BondTerms
            Returns resolved terms, solving for yield to maturity if needed.
        with_frequency(payment_frequency) -> BondTermsRaw
            Returns a copy with a different coupon frequency.
        summary(verbose=False) -> pd.DataFrame
            Returns a summary of the stored terms and derived details.
    """
    face_value: float
    coupon_rate: float
    market_price: float
    remaining_years: int
    payment_frequency: int
    required_yield: Optional[float] = None

    def __post_init__(self):
        # Perform data normalisation
        for name in ("face_value", "coupon_rate", "market_price"):
            object.__setattr__(self, name, _as_real(name, getattr(self, name)))
        for name in ("remaining_years", "payment_frequency"):
            object.__setattr__(self, name, _as_integer(name, getattr(self, name)))
        if _is_unset(self.required_yield):
            object.__setattr__(self, "required_yield", None)
        else:
            object.__setattr__(self, "required_yield", _as_real("required_yield", self.required_yield))

        # Perform data validation
        if self.face_value <= 0:
            raise InvalidInputError("Expected positive value for face_value")
        if self.coupon_rate < 0:
            raise InvalidInputError("Expected non-negative value for coupon_rate")
        if self.market_price <= 0:
            raise InvalidInputError("Expected positive value for market_price")
        if self.payment_frequency <= 0:
            raise InvalidInputError("payment_frequency must be a positive number of payments per year")
        if self.remaining_years <= 0:
            raise InvalidInputError("Expected positive value for remaining_years")
        if self.required_yield is not None and self.required_yield <= -self.payment_frequency:
            raise InvalidInputError(
                f"required_yield must be greater than -payment_frequency ({-self.payment_frequency})")

    @classmethod
    def from_input(cls, face_value, coupon_rate, market_price, remaining_years, payment_frequency,
                   required_yield=UNSET_YIELD) -> "BondTermsRaw":
        """
        Builds raw terms from console style input, where a required yield of -1 means "unset".
        """
        return cls(face_value=face_value, coupon_rate=coupon_rate, market_price=market_price,
                   remaining_years=remaining_years, payment_frequency=payment_frequency,
                   required_yield=required_yield)

    @property
    def coupon(self) -> float:
        """Coupon amount paid each period."""
        return self.face_value * self.coupon_rate / self.payment_frequency

    @property
    def periods(self) -> int:
        """Total number of coupon periods until maturity."""
        return self.remaining_years * self.payment_frequency

    @property
    def is_resolved(self) -> bool:
        return self.required_yield is not None

    def resolve(self, tolerance: float = 1e-6, max_iterations: int = 1000) -> "BondTerms":
        return resolve_yield(self, tolerance=tolerance, max_iterations=max_iterations)

    def with_frequency(self, payment_frequency: int):
        """
        Returns a copy of these terms paying coupons payment_frequency times per year.
        The annual required yield is carried over unchanged.
        """
        return replace(self, payment_frequency=payment_frequency)

    def summary(self, verbose: Optional[bool] = False) -> pd.DataFrame:
        """
        Returns a summary of the stored terms and derived details.

        Args:
            verbose (bool, optional): Indicates whether a full summary should be provided.

        Returns:
            pd.DataFrame: Tabular summary of the bond's key attributes.
        """
        required_yield = f"{self.required_yield:.4f}" if self.required_yield is not None else None

        if verbose:
            data = {
                "Face Value": self.face_value,
                "Coupon Rate": f"{self.coupon_rate:.4f}",
                "Market Price": self.market_price,
                "Remaining Years": self.remaining_years,
                "Payment Frequency": self.payment_frequency,
                "Required Yield": required_yield,
                "Coupon": self.coupon,
                "Periods": self.periods,
            }
            return pd.DataFrame([data])
        else:
            data = {"Face Value": self.face_value, "Market Price": self.market_price, "Required Yield": required_yield}
            return pd.DataFrame([data], columns=["Face Value", "Market Price", "Required Yield"])


@dataclass(frozen=True)
class BondTerms(BondTermsRaw):
    """
    Bond terms whose required yield is always present.

    Instances are normally produced by resolve_yield, but may be built directly
    when the required yield is known up front.
    """
    required_yield: float = None

    def __post_init__(self):
        if _is_unset(self.required_yield):
            raise UnresolvedYieldError("BondTerms requires a required_yield; use resolve_yield() on BondTermsRaw")
        super().__post_init__()

    def resolve(self, tolerance: float = 1e-6, max_iterations: int = 1000) -> "BondTerms":
        return self


def resolve_yield(raw: BondTermsRaw, tolerance: float = 1e-6, max_iterations: int = 1000) -> BondTerms:
    """
    Returns resolved terms for the provided raw terms.

    If the raw terms carry a required yield it is kept. Otherwise the yield to maturity
    implied by the market price is solved for and used as the required yield.

    Args:
        raw (BondTermsRaw): Terms to resolve.
        tolerance (float, optional): Price tolerance passed to the yield solver.
        max_iterations (int, optional): Iteration budget passed to the yield solver.

    Returns:
        BondTerms: Terms with the required yield present.
    """
    if isinstance(raw, BondTerms):
        return raw

    required_yield = raw.required_yield
    if required_yield is None:
        # Avoid a circular import, analytics depends on this module
        from bondcalc.analytics import solve_ytm

        logger.info("Calculating required yield (YTM) based on the market price...")
        required_yield = solve_ytm(raw, tolerance=tolerance, max_iterations=max_iterations)

    return BondTerms(
        face_value=raw.face_value,
        coupon_rate=raw.coupon_rate,
        market_price=raw.market_price,
        remaining_years=raw.remaining_years,
        payment_frequency=raw.payment_frequency,
        required_yield=required_yield,
    )


def _is_unset(value) -> bool:
    if value is None:
        return True
    return isinstance(value, Real) and not isinstance(value, bool) and value == UNSET_YIELD


def _as_real(name, value) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidInputError(f"{name} must be a real number, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise InvalidInputError(f"{name} must be finite, got {value!r}")
    return value


def _as_integer(name, value) -> int:
    if isinstance(value, bool):
        raise InvalidInputError(f"{name} must be a whole number, got {value!r}")
    if isinstance(value, Integral):
        return int(value)
    # Accept whole valued floats such as 10.0 read from a CSV column
    if isinstance(value, Real) and math.isfinite(value) and float(value).is_integer():
        return int(value)
    raise InvalidInputError(f"{name} must be a whole number, got {value!r}")
