"""Core affordability calculation functions.

All values are plain floats (IEEE double precision), matching the published
reference figures bit for bit. Degenerate annuities (zero amortization period
or zero payment frequency) produce an infinite or NaN payment instead of
raising, which ends the search on its first step.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from .config import (
    COMPOUNDING_PERIODS_PER_YEAR,
    INSURANCE_PREMIUM_TIERS,
    MAX_SEARCH_STEPS,
    MONTHS_PER_YEAR,
    STRESS_TEST_BENCHMARK_RATE,
    STRESS_TEST_RATE_BUMP,
)
from .request import (
    CalculationRequest,
    InvalidInputError,
    SearchExhaustedError,
    build_request,
    check_request,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AffordabilityResult:
    # Outcome
    property_value: float
    steps: int
    # Breakdown of the final search step
    downpayment: float
    loan_amount: float
    insurance_premium: float
    mortgage_principal: float
    qualifying_rate: float         # annual rate after the stress adjustment
    monthly_periodic_rate: float
    periodic_payment: float
    monthly_property_tax: float
    gds_ratio: float


def _divide(numerator: float, denominator: float) -> float:
    # IEEE semantics: x/0 is ±inf, 0/0 is NaN.
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def stress_test_rate(interest_rate: float, is_stress_tested: bool = True) -> float:
    """Return the rate the borrower must qualify at.

    Below the benchmark the contract rate is bumped by two points; at or above
    it the benchmark itself is used.
    """
    if not is_stress_tested:
        return interest_rate
    if interest_rate < STRESS_TEST_BENCHMARK_RATE:
        return interest_rate + STRESS_TEST_RATE_BUMP
    return STRESS_TEST_BENCHMARK_RATE


def insurance_premium(loan_amount: float, downpayment_percentage: float) -> float:
    """Mortgage insurance premium for the tier the downpayment ratio falls in."""
    for upper_bound, premium_rate in INSURANCE_PREMIUM_TIERS:
        if downpayment_percentage < upper_bound:
            return loan_amount * premium_rate
    return 0.0


def monthly_periodic_rate(annual_rate: float) -> float:
    """Convert a nominal annual rate compounded semi-annually to a monthly rate.

        effective = (1 + r/2)^2 - 1
        monthly   = (1 + effective)^(1/12) - 1
    """
    n = COMPOUNDING_PERIODS_PER_YEAR
    effective_rate = (1 + annual_rate / n) ** n - 1
    return (1 + effective_rate) ** (1 / MONTHS_PER_YEAR) - 1


def periodic_payment(
    principal: float,
    periodic_rate: float,
    amortization_period: float,
    payment_frequency: int,
) -> float:
    """Return the amortizing-loan payment.

    Uses the standard annuity formula:
        payment = r * P / (1 - (1 + r)^(-years * frequency))

    A zero denominator is not an error: the result is inf (or NaN when the
    numerator is zero too).
    """
    denominator = 1 - (1 + periodic_rate) ** (-amortization_period * payment_frequency)
    return _divide(periodic_rate * principal, denominator)


def _evaluate(
    property_value: float,
    steps: int,
    request: CalculationRequest,
    qualifying_rate: float,
    periodic_rate: float,
    monthly_income: float,
) -> AffordabilityResult:
    downpayment = property_value * request.downpayment_percentage
    loan_amount = property_value - downpayment
    premium = insurance_premium(loan_amount, request.downpayment_percentage)
    principal = loan_amount + premium

    payment = periodic_payment(
        principal, periodic_rate, request.amortization_period, request.payment_frequency
    )
    property_tax = property_value * request.property_tax_percentage / MONTHS_PER_YEAR
    gds = _divide(payment + property_tax, monthly_income)

    return AffordabilityResult(
        property_value=property_value,
        steps=steps,
        downpayment=downpayment,
        loan_amount=loan_amount,
        insurance_premium=premium,
        mortgage_principal=principal,
        qualifying_rate=qualifying_rate,
        monthly_periodic_rate=periodic_rate,
        periodic_payment=payment,
        monthly_property_tax=property_tax,
        gds_ratio=gds,
    )


def search_affordability(
    request: CalculationRequest,
    *,
    max_steps: int = MAX_SEARCH_STEPS,
) -> AffordabilityResult:
    """Find the first property value whose GDS ratio reaches the target.

    Candidate values are ``step * request.precision`` for step = 1, 2, ...
    and the answer is the first step whose ratio is no longer below
    ``request.target`` (a NaN ratio counts as reached). The ratio never
    decreases with the step, so the step is located by doubling until the
    target is reached and then bisecting, giving the same answer as a
    step-by-step scan. Values are exact multiples of the precision; for a
    non-integer precision they can differ from a scan that accumulates
    ``value += precision``.

    Raises InvalidInputError for a bad request and SearchExhaustedError when
    the target is not reached by step *max_steps*.
    """
    check_request(request)

    qualifying_rate = stress_test_rate(request.interest_rate, request.is_stress_tested)
    periodic_rate = monthly_periodic_rate(qualifying_rate)

    result = AffordabilityResult(
        property_value=0.0,
        steps=0,
        downpayment=0.0,
        loan_amount=0.0,
        insurance_premium=0.0,
        mortgage_principal=0.0,
        qualifying_rate=qualifying_rate,
        monthly_periodic_rate=periodic_rate,
        periodic_payment=0.0,
        monthly_property_tax=0.0,
        gds_ratio=0.0,
    )
    # Zero income, or a target already met before the first step.
    if request.total_income == 0 or not result.gds_ratio < request.target:
        return result

    monthly_income = request.total_income / MONTHS_PER_YEAR

    def evaluate(step: int) -> AffordabilityResult:
        return _evaluate(
            float(step * request.precision),
            step,
            request,
            qualifying_rate,
            periodic_rate,
            monthly_income,
        )

    # Gallop: the target is not reached at `below`, it is reached at `found`.
    below = 0
    step = 1
    while True:
        found = evaluate(step)
        if not found.gds_ratio < request.target:
            break
        below = step
        if step >= max_steps:
            raise SearchExhaustedError(
                f"GDS ratio still {found.gds_ratio:.6f} (target {request.target}) "
                f"after {max_steps} steps of {request.precision}"
            )
        step = min(step * 2, max_steps)

    while found.steps - below > 1:
        middle = (below + found.steps) // 2
        candidate = evaluate(middle)
        if candidate.gds_ratio < request.target:
            below = middle
        else:
            found = candidate

    logger.debug(
        "Search stopped at %s, step %d (GDS %s, qualifying rate %s)",
        found.property_value, found.steps, found.gds_ratio, qualifying_rate,
    )
    return found


def compute(request: CalculationRequest) -> Optional[float]:
    """Return the affordable property value, or None if it cannot be computed."""
    try:
        return search_affordability(request).property_value
    except InvalidInputError:
        return None
    except SearchExhaustedError as exc:
        logger.warning("Affordability search abandoned: %s", exc)
        return None


def calculate(**overrides) -> Optional[float]:
    """Build a request from keyword overrides and compute it.

    >>> calculate(interest_rate=0.03, property_tax_percentage=0.01, total_income=60000)
    292000.0
    """
    try:
        request = build_request(**overrides)
    except InvalidInputError:
        return None
    return compute(request)
