"""Output helpers for the EMI planner.

This module provides simple functions to render schedules, summaries,
comparisons and affordability estimates in a tabular text format. Amounts are
rounded to two decimals here, at the presentation boundary; the engine itself
never rounds.
"""

from __future__ import annotations

from typing import Iterable, Optional

from .data_models import (
    AffordabilityResult,
    ComparisonResult,
    LoanCalculationResult,
    PartPaymentImpact,
    ScheduleEntry,
    YearlySummary,
)
from .utils import round_currency


def _months_to_text(months: int) -> str:
    return f"{months // 12}y {months % 12}m"


def print_summary(result: LoanCalculationResult, impact: Optional[PartPaymentImpact] = None) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Principal          : {round_currency(result.terms.principal)}")
    print(f"Monthly EMI        : {round_currency(result.emi)}")
    # Once part payments make the installment vary, the average tells more
    if result.has_variable_emi:
        print(f"Average EMI        : {round_currency(result.average_emi)}")
    print(f"Total interest     : {round_currency(result.total_interest)}")
    if result.total_part_payment:
        print(f"Total part payment : {round_currency(result.total_part_payment)}")
    print(f"Total amount       : {round_currency(result.total_amount)}")
    print(f"Original end date  : {result.original_end_date.strftime('%Y-%m')}")
    print(f"New end date       : {result.end_date.strftime('%Y-%m')}")
    print(f"Installments       : {result.tenure_months} ({_months_to_text(result.tenure_months)})")
    if impact is not None:
        print(f"Baseline interest  : {round_currency(impact.baseline.total_interest)}")
        print(f"Interest saved     : {round_currency(impact.interest_saved)}")
        if impact.months_saved:
            print(f"Tenure reduction   : {impact.months_saved} months")
    print("-" * 72)


def print_schedule(schedule: Iterable[ScheduleEntry]) -> None:
    """Print the monthly amortization schedule as a simple table."""
    headers = ["Period", "Date", "StartBal", "EMI", "Principal", "Interest", "PartPay", "EndBal"]
    print("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.period),
            entry.date.strftime("%Y-%m"),
            f"{round_currency(entry.starting_balance)}",
            f"{round_currency(entry.emi_amount)}",
            f"{round_currency(entry.principal_component)}",
            f"{round_currency(entry.interest_component)}",
            f"{round_currency(entry.part_payment)}",
            f"{round_currency(entry.remaining_balance)}",
        ]
        print("\t".join(row))


def print_yearly(yearly: Iterable[YearlySummary]) -> None:
    """Print the calendar-year roll-up of a schedule."""
    headers = ["Year", "EMI", "Principal", "Interest", "PartPay", "EndBal", "Paid%"]
    print("\t".join(headers))
    for year in yearly:
        row = [
            str(year.year),
            f"{round_currency(year.emi_paid)}",
            f"{round_currency(year.principal_paid)}",
            f"{round_currency(year.interest_paid)}",
            f"{round_currency(year.part_payment)}",
            f"{round_currency(year.end_balance)}",
            f"{round_currency(year.paid_percent)}",
        ]
        print("\t".join(row))


def print_comparison(comparison: ComparisonResult) -> None:
    """Print scored scenarios side by side and name the winner.

    Each metric column is followed by its 0-100 score, where 100 marks the
    lowest value among the compared scenarios.
    """
    print("Comparison")
    print("=" * 96)
    print(
        f"{'Scenario':16s} {'EMI':>12s} {'Score':>7s} {'Interest':>15s} {'Score':>7s} "
        f"{'Tenure':>8s} {'Score':>7s} {'Total':>9s}"
    )
    for r in comparison.results:
        print(
            f"{r.name[:16]:16s} {round_currency(r.emi):>12} {round_currency(r.emi_score):>7} "
            f"{round_currency(r.total_interest):>15} {round_currency(r.interest_score):>7} "
            f"{_months_to_text(r.tenure_months):>8s} {round_currency(r.tenure_score):>7} "
            f"{round_currency(r.weighted_score):>9}"
        )
    print("=" * 96)
    winner = comparison.winner
    print(f"Best overall: {winner.name} (score {round_currency(comparison.winner_score)})")


def print_affordability(result: AffordabilityResult) -> None:
    """Print the eligibility estimate with its breakdown."""
    print("Loan eligibility")
    print("-" * 72)
    print(f"Eligible amount        : {round_currency(result.eligible_principal)}")
    print(f"Max allowed EMI (FOIR) : {round_currency(result.max_allowed_installment)}")
    print(f"Available for new EMI  : {round_currency(result.available_for_new_installment)}")
    print(f"Base eligible amount   : {round_currency(result.base_eligible_principal)}")
    if result.credit_rating:
        print(
            f"Credit score factor    : {result.credit_score_multiplier} ({result.credit_rating})"
        )
    print(f"Employment factor      : {result.employment_multiplier}")
    print(f"Income based amount    : {round_currency(result.income_based_eligibility)}")
    print(
        f"LTV limit              : {round_currency(result.loan_to_value_limit)} "
        f"({result.loan_to_value_ratio * 100:.0f}% of property value)"
    )
    print("-" * 72)
