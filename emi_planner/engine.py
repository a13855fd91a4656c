"""Core calculation engine for the EMI planner.

This module implements the month-by-month amortization of an equated monthly
installment (EMI) loan with optional part payments. Each part payment carries
one of two strategies:

* ``reduce-tenure`` keeps the installment and pulls the payoff date forward
  to the month in which the new balance is cleared at that installment.
* ``reduce-emi`` keeps the (possibly already shortened) payoff date and
  re-amortizes the new balance over the months left before it.

When both strategies land in the same month the payoff date is adjusted
first and the installment is then re-amortized against the adjusted date.
Results are returned as a ``LoanCalculationResult`` holding the schedule, a
calendar-year roll-up and the totals. All amounts are ``Decimal`` and are
never rounded here; rounding belongs to the formatter and exporters.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence

from .config import (
    BALANCE_EPSILON,
    MAX_START_YEAR,
    MAX_TENURE_YEARS,
    MIN_START_YEAR,
    REDUCE_EMI,
    REDUCE_TENURE,
)
from .data_models import (
    LoanCalculationResult,
    LoanTerms,
    PartPaymentEvent,
    PartPaymentImpact,
    PartPaymentInstruction,
    ScheduleEntry,
    YearlySummary,
)
from .errors import InconsistentScheduleError, InvalidInputError
from .expander import expand_part_payments, group_by_month
from .formula import (
    annuity_payment,
    checked_annual_rate,
    checked_principal,
    months_to_amortize,
)
from .utils import add_months, months_between

logger = logging.getLogger(__name__)

# Residuals smaller than half a cent are floating noise, not debt.
_RESIDUAL = Decimal("0.005")


@dataclass
class _SimulationState:
    """Loop-carried state of a single simulation run."""

    balance: Decimal
    installment: Decimal
    end_date: date  # live payoff horizon, exclusive
    current_date: date
    period: int = 1
    total_interest: Decimal = Decimal("0")
    total_part_payment: Decimal = Decimal("0")


def validate_terms(terms: LoanTerms) -> LoanTerms:
    """Return a copy of ``terms`` with checked, ``Decimal``-typed values.

    Principal, rate and tenure above their ceilings are clamped.

    Raises
    ------
    InvalidInputError
        If any field is non-finite, negative or out of range.
    """
    principal = checked_principal(terms.principal)
    if principal <= BALANCE_EPSILON:
        raise InvalidInputError(f"Principal must exceed {BALANCE_EPSILON}; got {principal}")
    annual_rate = checked_annual_rate(terms.annual_rate)
    tenure = terms.tenure_years
    if isinstance(tenure, bool) or not isinstance(tenure, int) or tenure <= 0:
        raise InvalidInputError(f"Tenure must be a positive whole number of years; got {tenure!r}")
    if tenure > MAX_TENURE_YEARS:
        logger.warning("Tenure of %s years exceeds ceiling; clamped to %s", tenure, MAX_TENURE_YEARS)
        tenure = MAX_TENURE_YEARS
    if not isinstance(terms.start_month, int) or not 1 <= terms.start_month <= 12:
        raise InvalidInputError(f"Start month must be 1-12; got {terms.start_month!r}")
    if not isinstance(terms.start_year, int) or not MIN_START_YEAR <= terms.start_year <= MAX_START_YEAR:
        raise InvalidInputError(
            f"Start year must be between {MIN_START_YEAR} and {MAX_START_YEAR}; got {terms.start_year!r}"
        )
    return dataclasses.replace(
        terms, principal=principal, annual_rate=annual_rate, tenure_years=tenure
    )


def _step(state: _SimulationState, rate_per_month: Decimal, events: List[PartPaymentEvent]) -> ScheduleEntry:
    """Advance the simulation by one month and return that month's entry."""
    starting_balance = state.balance
    next_date = add_months(state.current_date, 1)

    interest = state.balance * rate_per_month
    principal = state.installment - interest
    charged = state.installment

    part_payment = sum((e.amount for e in events), Decimal("0"))
    if part_payment > 0:
        logger.debug(
            "Part payment found for %s: %s (%s)",
            state.current_date.strftime("%Y-%m"),
            part_payment,
            ", ".join(sorted({e.strategy for e in events})),
        )

    # The last month of the live horizon, or an installment larger than the
    # debt, settles the full balance.
    if principal > state.balance or next_date >= state.end_date:
        principal = state.balance
        charged = interest + principal
    part_payment = min(part_payment, state.balance - principal)

    state.balance -= principal + part_payment
    state.total_interest += interest
    state.total_part_payment += part_payment

    if state.balance < -BALANCE_EPSILON:
        raise InconsistentScheduleError(
            f"Balance fell to {state.balance} in {state.current_date.strftime('%Y-%m')}"
        )
    if state.balance.copy_abs() < _RESIDUAL:
        state.balance = Decimal("0")

    if part_payment > 0 and state.balance > BALANCE_EPSILON:
        strategies = {e.strategy for e in events}
        if REDUCE_TENURE in strategies:
            remaining = months_to_amortize(state.balance, state.installment, rate_per_month)
            new_end = add_months(next_date, remaining)
            if new_end < state.end_date:
                logger.debug(
                    "Payoff horizon moved from %s to %s",
                    state.end_date.strftime("%Y-%m"),
                    new_end.strftime("%Y-%m"),
                )
                state.end_date = new_end
        if REDUCE_EMI in strategies:
            remaining = months_between(next_date, state.end_date)
            if remaining > 0:
                new_installment = annuity_payment(state.balance, rate_per_month, remaining)
                logger.debug(
                    "Installment recalculated from %s to %s over %s months",
                    state.installment,
                    new_installment,
                    remaining,
                )
                state.installment = new_installment

    entry = ScheduleEntry(
        period=state.period,
        date=state.current_date,
        starting_balance=starting_balance,
        emi_amount=charged,
        principal_component=principal,
        interest_component=interest,
        part_payment=part_payment,
        remaining_balance=state.balance,
    )
    state.current_date = next_date
    state.period += 1
    return entry


def yearly_summary(schedule: Sequence[ScheduleEntry], principal: Decimal) -> List[YearlySummary]:
    """Roll the schedule up into one summary per calendar year."""
    buckets: Dict[int, List[ScheduleEntry]] = {}
    for entry in schedule:
        buckets.setdefault(entry.year, []).append(entry)
    summaries: List[YearlySummary] = []
    for year, entries in buckets.items():
        end_balance = entries[-1].remaining_balance
        summaries.append(
            YearlySummary(
                year=year,
                emi_paid=sum((e.emi_amount for e in entries), Decimal("0")),
                principal_paid=sum((e.principal_component for e in entries), Decimal("0")),
                interest_paid=sum((e.interest_component for e in entries), Decimal("0")),
                part_payment=sum((e.part_payment for e in entries), Decimal("0")),
                end_balance=end_balance,
                paid_percent=(principal - end_balance) / principal * 100,
            )
        )
    return summaries


def compute_schedule(
    terms: LoanTerms,
    part_payments: Iterable[PartPaymentInstruction] = (),
) -> LoanCalculationResult:
    """Compute the amortization schedule for a loan.

    Parameters
    ----------
    terms: LoanTerms
        Principal, annual rate, tenure and start month of the loan.
    part_payments: iterable of PartPaymentInstruction
        Extra payments, possibly recurring. May be empty.

    Returns
    -------
    LoanCalculationResult
        The nominal EMI, totals, the monthly schedule and its yearly roll-up.

    Raises
    ------
    InvalidInputError
        If the terms or a part-payment instruction are out of range.
    NumericOverflowError
        If the amortization factor cannot be computed.
    InconsistentScheduleError
        If the balance is driven negative or left unpaid at the horizon.
    """
    terms = validate_terms(terms)
    rate_per_month = terms.monthly_rate
    total_months = terms.total_months
    emi = annuity_payment(terms.principal, rate_per_month, total_months)

    events = expand_part_payments(part_payments, terms.start_date, terms.end_date)
    events_by_month = group_by_month(events)

    state = _SimulationState(
        balance=terms.principal,
        installment=emi,
        end_date=terms.end_date,
        current_date=terms.start_date,
    )
    schedule: List[ScheduleEntry] = []
    # The live horizon never moves past the nominal end date, so the month
    # counter is only a hard stop for malformed input.
    while (
        state.balance > BALANCE_EPSILON
        and state.current_date < state.end_date
        and len(schedule) < total_months
    ):
        schedule.append(_step(state, rate_per_month, events_by_month.get(state.current_date, [])))

    if state.balance > BALANCE_EPSILON:
        raise InconsistentScheduleError(
            f"Balance of {state.balance} left unpaid at {state.end_date.strftime('%Y-%m')}"
        )

    logger.debug(
        "Simulated %s of %s months, total interest %s",
        len(schedule),
        total_months,
        state.total_interest,
    )
    return LoanCalculationResult(
        terms=terms,
        emi=emi,
        total_interest=state.total_interest,
        total_amount=terms.principal + state.total_interest,
        total_part_payment=state.total_part_payment,
        schedule=tuple(schedule),
        yearly=tuple(yearly_summary(schedule, terms.principal)),
        original_end_date=add_months(terms.start_date, total_months - 1),
        end_date=schedule[-1].date,
    )


def compute_part_payment_impact(
    terms: LoanTerms,
    part_payments: Iterable[PartPaymentInstruction],
) -> PartPaymentImpact:
    """Compare a part-payment plan against the same loan without one."""
    planned = compute_schedule(terms, part_payments)
    baseline = compute_schedule(terms)
    return PartPaymentImpact(
        baseline=baseline,
        planned=planned,
        interest_saved=baseline.total_interest - planned.total_interest,
        months_saved=baseline.tenure_months - planned.tenure_months,
    )
