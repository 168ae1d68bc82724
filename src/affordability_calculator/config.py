"""Application-wide constants and calculation defaults.

All tuneable defaults and valid ranges live here so there is a single place to
adjust them.
"""
from __future__ import annotations

# ── Request defaults ──────────────────────────────────────────────────────────

DEFAULT_TARGET: float = 0.32               # target GDS ratio
DEFAULT_DOWNPAYMENT_PERCENTAGE: float = 0.2
DEFAULT_AMORTIZATION_PERIOD: float = 25    # years
DEFAULT_PAYMENT_FREQUENCY: int = 12        # payments per year
DEFAULT_IS_STRESS_TESTED: bool = True
DEFAULT_PRECISION: float = 1000            # currency step of the search

# ── Valid ranges ──────────────────────────────────────────────────────────────

# Largest integer a double represents exactly; upper bound for the required
# rate, tax and income fields.
MAX_SAFE_INTEGER: int = 2**53 - 1

MAX_AMORTIZATION_YEARS: float = 100        # exclusive
MAX_PAYMENT_FREQUENCY: int = 12            # inclusive

# ── Stress test (minimum qualifying rate) ────────────────────────────────────

STRESS_TEST_BENCHMARK_RATE: float = 0.0525
STRESS_TEST_RATE_BUMP: float = 0.02

# ── Mortgage insurance premium tiers ─────────────────────────────────────────

# (downpayment ratio upper bound, exclusive; premium rate on the loan amount).
# A downpayment at or above the last bound carries no premium.
INSURANCE_PREMIUM_TIERS: tuple[tuple[float, float], ...] = (
    (0.10, 0.04),
    (0.15, 0.031),
    (0.20, 0.028),
)

# ── Search parameters ─────────────────────────────────────────────────────────

MONTHS_PER_YEAR: int = 12
COMPOUNDING_PERIODS_PER_YEAR: int = 2      # nominal rates compound semi-annually
# Largest step index the search examines; beyond it the target is treated
# as unreachable (negative income, zero housing cost).
MAX_SEARCH_STEPS: int = MAX_SAFE_INTEGER
