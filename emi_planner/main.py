"""Command-line interface for the EMI planner.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full amortization schedules with part payments,
view summaries with the savings over the plain loan, compare up to four loan
scenarios and estimate the loan amount they are eligible for. Schedules can
be printed to the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Tuple

import click

from .affordability import estimate_affordability
from .comparison import compare_scenarios
from .config import FREQUENCY_MONTHS, MAX_SCENARIOS, REDUCE_TENURE, SALARIED, STRATEGIES
from .data_models import LoanTerms, PartPaymentInstruction, Scenario
from .engine import compute_part_payment_impact, compute_schedule
from .errors import PlannerError
from .export import export_to_csv, export_to_json, impact_to_dict, summary_to_dict
from .formatter import (
    print_affordability,
    print_comparison,
    print_schedule,
    print_summary,
    print_yearly,
)
from .utils import Number, parse_year_month, to_decimal

_SUFFIXES = {
    "k": Decimal("1000"),
    "l": Decimal("100000"),
    "m": Decimal("1000000"),
    "cr": Decimal("10000000"),
}


def parse_amount(value: str) -> Decimal:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000") and shorthand with ``k`` (thousand),
    ``l`` (lakh), ``m`` (million) or ``cr`` (crore) suffixes, e.g. "25l"
    meaning 2_500_000.
    """
    value = value.strip().lower().replace(",", "")
    factor = Decimal("1")
    for suffix, multiplier in _SUFFIXES.items():
        if value.endswith(suffix):
            factor = multiplier
            value = value[: -len(suffix)]
            break
    try:
        return to_decimal(value, "amount") * factor
    except PlannerError:
        raise click.BadParameter(f"Invalid amount: {value}")


def parse_part_payment_strings(values: Tuple[str, ...]) -> List[PartPaymentInstruction]:
    """Parse ``YYYY-MM:AMOUNT[:FREQUENCY[:STRATEGY]]`` entries."""
    instructions: List[PartPaymentInstruction] = []
    for index, item in enumerate(values, start=1):
        parts = item.split(":")
        if not 2 <= len(parts) <= 4:
            raise click.BadParameter(
                f"Part payment must be in YYYY-MM:AMOUNT[:FREQUENCY[:STRATEGY]] format; got {item}"
            )
        ym, amount_str = parts[0], parts[1]
        frequency = parts[2].lower() if len(parts) > 2 else "one-time"
        strategy = parts[3].lower() if len(parts) > 3 else REDUCE_TENURE
        if frequency not in FREQUENCY_MONTHS:
            raise click.BadParameter(
                f"Part payment frequency must be one of {', '.join(FREQUENCY_MONTHS)}; got {frequency}"
            )
        if strategy not in STRATEGIES:
            raise click.BadParameter(
                f"Part payment strategy must be one of {', '.join(STRATEGIES)}; got {strategy}"
            )
        try:
            dt = parse_year_month(ym)
        except PlannerError as exc:
            raise click.BadParameter(str(exc))
        instructions.append(
            PartPaymentInstruction(
                id=f"pp-{index}",
                month=dt.month,
                year=dt.year,
                amount=parse_amount(amount_str),
                frequency=frequency,
                strategy=strategy,
            )
        )
    return instructions


def build_terms(principal: str, rate: Number, tenure: int, start_date: str) -> LoanTerms:
    try:
        start = parse_year_month(start_date)
    except PlannerError as exc:
        raise click.BadParameter(str(exc))
    try:
        annual_rate = to_decimal(rate, "rate")
    except PlannerError as exc:
        raise click.BadParameter(str(exc))
    return LoanTerms(
        principal=parse_amount(principal),
        annual_rate=annual_rate,
        tenure_years=tenure,
        start_month=start.month,
        start_year=start.year,
    )


def loan_options(func):
    """Attach the options shared by every single-loan command."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Loan amount (e.g. 25l, 2m)"),
        click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)"),
        click.option("--tenure", "-t", "tenure", required=True, type=int, help="Loan tenure in years"),
        click.option("--start-date", "-s", "start_date", required=True, help="First EMI month (YYYY-MM)"),
        click.option(
            "--part-payment",
            "part_payment",
            multiple=True,
            help="Part payment in YYYY-MM:AMOUNT[:FREQUENCY[:STRATEGY]] format. "
            "Example: --part-payment 2025-04:100k:yearly:reduce-emi",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log engine decisions to stderr")
def cli(verbose: bool) -> None:
    """Plan loan repayments, part payments and affordability."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@loan_options
@click.option("--yearly", is_flag=True, help="Show the calendar-year roll-up instead of months")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(
    principal: str,
    rate: float,
    tenure: int,
    start_date: str,
    part_payment: Tuple[str, ...],
    yearly: bool,
    output: Optional[str],
) -> None:
    """Compute and print the full amortization schedule."""
    terms = build_terms(principal, rate, tenure, start_date)
    instructions = parse_part_payment_strings(part_payment)
    try:
        result = compute_schedule(terms, instructions)
    except PlannerError as exc:
        raise click.ClickException(str(exc))
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
        return
    print_summary(result)
    if yearly:
        print_yearly(result.yearly)
    else:
        print_schedule(result.schedule)


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(
    principal: str,
    rate: float,
    tenure: int,
    start_date: str,
    part_payment: Tuple[str, ...],
    output: Optional[str],
) -> None:
    """Print the summary, with savings when part payments are given."""
    terms = build_terms(principal, rate, tenure, start_date)
    instructions = parse_part_payment_strings(part_payment)
    try:
        if instructions:
            impact = compute_part_payment_impact(terms, instructions)
            result = impact.planned
        else:
            impact = None
            result = compute_schedule(terms)
    except PlannerError as exc:
        raise click.ClickException(str(exc))
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        data = {"summary": summary_to_dict(result)}
        if impact is not None:
            data["savings"] = impact_to_dict(impact)
        with path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(result, impact)


@cli.command()
@click.option(
    "--scenario",
    "scenario",
    multiple=True,
    required=True,
    help="Scenario in AMOUNT:RATE:YEARS format; the first one is the base. Repeat 2-4 times.",
)
@click.option("--start-date", "-s", "start_date", required=True, help="First EMI month (YYYY-MM)")
def compare(scenario: Tuple[str, ...], start_date: str) -> None:
    """Compare loan scenarios without part payments.

    Example:

        emi-planner compare -s 2025-01 --scenario 50l:8.5:20 --scenario 50l:8:15
    """
    if not 2 <= len(scenario) <= MAX_SCENARIOS:
        raise click.BadParameter(f"Give between 2 and {MAX_SCENARIOS} scenarios; got {len(scenario)}")
    scenarios: List[Scenario] = []
    for index, item in enumerate(scenario):
        parts = item.split(":")
        if len(parts) != 3:
            raise click.BadParameter(f"Scenario must be in AMOUNT:RATE:YEARS format; got {item}")
        amount_str, rate_str, years_str = parts
        try:
            years = int(years_str)
        except ValueError:
            raise click.BadParameter(f"Invalid tenure in scenario: {years_str}")
        terms = build_terms(amount_str, rate_str, years, start_date)
        scenario_id = "base" if index == 0 else f"scenario-{index}"
        name = "Current" if index == 0 else f"Scenario {index}"
        scenarios.append(Scenario(id=scenario_id, name=name, terms=terms))
    try:
        comparison = compare_scenarios(scenarios)
    except PlannerError as exc:
        raise click.ClickException(str(exc))
    print_comparison(comparison)


@cli.command()
@click.option("--income", "income", required=True, help="Gross monthly income")
@click.option("--tenure", "-t", "tenure", required=True, type=int, help="Desired tenure in years")
@click.option("--rate", "-r", "rate", required=True, type=float, help="Expected annual interest rate (percent)")
@click.option("--obligations", "obligations", default="0", help="Existing monthly EMIs")
@click.option("--property-value", "property_value", required=True, help="Property value")
@click.option("--credit-score", "credit_score", type=int, help="Credit score (300-900), if known")
@click.option(
    "--employment",
    "employment",
    type=click.Choice(["salaried", "self-employed", "business-owner"]),
    default=SALARIED,
    help="Employment type",
)
def afford(
    income: str,
    tenure: int,
    rate: float,
    obligations: str,
    property_value: str,
    credit_score: Optional[int],
    employment: str,
) -> None:
    """Estimate the loan amount you are eligible for."""
    try:
        result = estimate_affordability(
            income=parse_amount(income),
            tenure_years=tenure,
            annual_rate=to_decimal(rate, "rate"),
            existing_obligations=parse_amount(obligations),
            property_value=parse_amount(property_value),
            credit_score=credit_score,
            employment_type=employment,
        )
    except PlannerError as exc:
        raise click.ClickException(str(exc))
    print_affordability(result)


if __name__ == "__main__":
    cli()
