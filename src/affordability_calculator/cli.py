"""Command-line entry point: one affordability calculation per invocation.

  1. Read the required fields (income, interest rate, property tax) from flags.
  2. Overlay any optional flags on the request defaults.
  3. Run the search and print the affordable property value, optionally with
     the breakdown of the final search step.
"""
from __future__ import annotations

import logging
import sys

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from .calculator import AffordabilityResult, search_affordability
from .config import (
    DEFAULT_AMORTIZATION_PERIOD,
    DEFAULT_DOWNPAYMENT_PERCENTAGE,
    DEFAULT_PAYMENT_FREQUENCY,
    DEFAULT_PRECISION,
    DEFAULT_TARGET,
)
from .request import AffordabilityError, CalculationRequest, build_request

console = Console()
err_console = Console(stderr=True, style="bold red")

# ──────────────────────────────────────────────────────────────────────────────
# Formatting helpers
# ──────────────────────────────────────────────────────────────────────────────

def _fmt_money(value: float) -> str:
    return f"{value:,.2f}"


def _fmt_pct(value: float) -> str:
    return f"{value * 100:.4f}%"


def _fmt_value(value: float) -> str:
    """Property value without a spurious '.0' when it is whole."""
    return f"{value:.0f}" if value.is_integer() else repr(value)


# ──────────────────────────────────────────────────────────────────────────────
# Result display
# ──────────────────────────────────────────────────────────────────────────────

def display_result(request: CalculationRequest, result: AffordabilityResult) -> None:
    console.print(Panel(
        f"[bold green]Affordable property value[/bold green]: "
        f"{_fmt_money(result.property_value)}",
        expand=False,
    ))

    t = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    t.add_column("Field", style="cyan")
    t.add_column("Value", justify="right")

    t.add_row("Annual income", _fmt_money(request.total_income))
    t.add_row("Contract rate", _fmt_pct(request.interest_rate))
    t.add_row("Qualifying rate", _fmt_pct(result.qualifying_rate))
    t.add_row("Monthly periodic rate", _fmt_pct(result.monthly_periodic_rate))
    t.add_row("Downpayment", _fmt_money(result.downpayment))
    t.add_row("Loan amount", _fmt_money(result.loan_amount))
    t.add_row("  └ Insurance premium", _fmt_money(result.insurance_premium))
    t.add_row("Mortgage principal", _fmt_money(result.mortgage_principal))
    t.add_row("Periodic payment", _fmt_money(result.periodic_payment))
    t.add_row("Monthly property tax", _fmt_money(result.monthly_property_tax))
    t.add_row("GDS ratio", f"{_fmt_pct(result.gds_ratio)} (target {_fmt_pct(request.target)})")
    t.add_row("Search steps", str(result.steps))
    console.print(t)


# ──────────────────────────────────────────────────────────────────────────────
# Click entry point
# ──────────────────────────────────────────────────────────────────────────────

@click.command()
@click.option("--income", type=float, required=True, help="Total annual income")
@click.option("--interest-rate", type=float, required=True, help="Annual interest rate (e.g. 0.0484 for 4.84%)")
@click.option("--property-tax", type=float, required=True, help="Annual property tax rate (e.g. 0.0112)")
@click.option("--target", type=float, default=DEFAULT_TARGET, show_default=True, help="Target GDS ratio")
@click.option("--downpayment", type=float, default=DEFAULT_DOWNPAYMENT_PERCENTAGE, show_default=True, help="Downpayment ratio")
@click.option("--amortization", type=float, default=DEFAULT_AMORTIZATION_PERIOD, show_default=True, help="Amortization period (years)")
@click.option("--frequency", type=int, default=DEFAULT_PAYMENT_FREQUENCY, show_default=True, help="Payments per year")
@click.option("--stress-test/--no-stress-test", default=True, show_default=True, help="Qualify at the stress test rate")
@click.option("--precision", type=float, default=DEFAULT_PRECISION, show_default=True, help="Search step (currency)")
@click.option("--details", is_flag=True, help="Show the breakdown of the final search step")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
def main(
    income: float,
    interest_rate: float,
    property_tax: float,
    target: float,
    downpayment: float,
    amortization: float,
    frequency: int,
    stress_test: bool,
    precision: float,
    details: bool,
    verbose: bool,
) -> None:
    """Affordability Calculator: maximum property value for a GDS target."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    request = build_request(
        total_income=income,
        interest_rate=interest_rate,
        property_tax_percentage=property_tax,
        target=target,
        downpayment_percentage=downpayment,
        amortization_period=amortization,
        payment_frequency=frequency,
        is_stress_tested=stress_test,
        precision=precision,
    )

    try:
        result = search_affordability(request)
    except AffordabilityError as exc:
        err_console.print(Panel(f"Cannot compute affordability with the given inputs\n{exc}", expand=False))
        sys.exit(1)

    if details:
        display_result(request, result)
    console.print(_fmt_value(result.property_value))
