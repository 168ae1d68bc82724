"""Calculation request and input validation.

Resolution order:
1. Start from a request with every optional field at its default.
2. Overlay caller-supplied overrides (unknown names are rejected).
3. Validate every field against its documented range before any search runs.

The three required fields (interest_rate, property_tax_percentage,
total_income) default to None, meaning "not provided".
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields, replace
from typing import Optional

from .config import (
    DEFAULT_AMORTIZATION_PERIOD,
    DEFAULT_DOWNPAYMENT_PERCENTAGE,
    DEFAULT_IS_STRESS_TESTED,
    DEFAULT_PAYMENT_FREQUENCY,
    DEFAULT_PRECISION,
    DEFAULT_TARGET,
    MAX_AMORTIZATION_YEARS,
    MAX_PAYMENT_FREQUENCY,
    MAX_SAFE_INTEGER,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalculationRequest:
    """Inputs for one affordability calculation.

    Ratios are fractions (0.05 for 5%). Income is annual.
    """
    # Optional, with defaults
    target: float = DEFAULT_TARGET
    downpayment_percentage: float = DEFAULT_DOWNPAYMENT_PERCENTAGE
    amortization_period: float = DEFAULT_AMORTIZATION_PERIOD
    payment_frequency: int = DEFAULT_PAYMENT_FREQUENCY
    is_stress_tested: bool = DEFAULT_IS_STRESS_TESTED
    precision: float = DEFAULT_PRECISION
    # Required
    interest_rate: Optional[float] = None
    property_tax_percentage: Optional[float] = None
    total_income: Optional[float] = None


class AffordabilityError(Exception):
    """Base class for every failure the calculator reports."""


class InvalidInputError(AffordabilityError, ValueError):
    """Raised when a request field is missing, out of range or unknown."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


class SearchExhaustedError(AffordabilityError):
    """Raised when the search hits its iteration cap without reaching the target."""


_FIELD_NAMES = frozenset(f.name for f in fields(CalculationRequest))


def build_request(**overrides) -> CalculationRequest:
    """Return a default request with *overrides* applied on top."""
    unknown = sorted(set(overrides) - _FIELD_NAMES)
    if unknown:
        raise InvalidInputError(unknown[0], "unknown request field")
    return replace(CalculationRequest(), **overrides)


def _number(name: str, value) -> float:
    if value is None:
        raise InvalidInputError(name, "is required")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(name, f"must be a number, got {type(value).__name__}")
    try:
        number = float(value)
    except OverflowError:
        raise InvalidInputError(name, "is too large to represent as a float") from None
    if math.isnan(number):
        raise InvalidInputError(name, "must not be NaN")
    return number


def _check_between(
    name: str,
    value,
    low: float,
    high: float,
    *,
    high_inclusive: bool = True,
) -> None:
    value = _number(name, value)
    above = value > high if high_inclusive else value >= high
    if value < low or above:
        closing = "]" if high_inclusive else ")"
        raise InvalidInputError(name, f"{value!r} is outside [{low}, {high}{closing}")


def check_request(request: CalculationRequest) -> None:
    """Raise InvalidInputError if any field of *request* is unusable.

    Checks, in order:
    1. target and downpayment_percentage within [0, 1]
    2. amortization_period within [0, 100) and payment_frequency within [0, 12]
    3. precision strictly positive
    4. interest_rate and property_tax_percentage present, >= 0, < MAX_SAFE_INTEGER
    5. total_income present and < MAX_SAFE_INTEGER (no lower bound)
    """
    try:
        _check_between("target", request.target, 0, 1)
        _check_between("downpayment_percentage", request.downpayment_percentage, 0, 1)
        _check_between(
            "amortization_period", request.amortization_period,
            0, MAX_AMORTIZATION_YEARS, high_inclusive=False,
        )
        _check_between("payment_frequency", request.payment_frequency, 0, MAX_PAYMENT_FREQUENCY)

        if _number("precision", request.precision) <= 0:
            raise InvalidInputError("precision", "must be > 0")

        _check_between(
            "interest_rate", request.interest_rate,
            0, MAX_SAFE_INTEGER, high_inclusive=False,
        )
        _check_between(
            "property_tax_percentage", request.property_tax_percentage,
            0, MAX_SAFE_INTEGER, high_inclusive=False,
        )

        if _number("total_income", request.total_income) >= MAX_SAFE_INTEGER:
            raise InvalidInputError("total_income", f"must be < {MAX_SAFE_INTEGER}")
    except InvalidInputError as exc:
        logger.debug("Rejected calculation request: %s", exc)
        raise
