"""Data models for the EMI planner.

This module defines dataclasses representing the entities used by the
engine: the loan terms, user-authored part-payment instructions, the concrete
part-payment events they expand into, schedule entries and the result objects
returned by the simulator, the scenario comparator and the affordability
estimator. All of them are frozen; a result is never modified after it is
returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from .config import REDUCE_TENURE
from .utils import add_months


@dataclass(frozen=True)
class LoanTerms:
    """Terms of a loan, immutable input to a simulation run.

    Attributes
    ----------
    principal: Decimal
        The amount borrowed.
    annual_rate: Decimal
        Nominal annual interest rate in percent (``8.5`` means 8.5 %).
    tenure_years: int
        Nominal tenure in years.
    start_month / start_year: int
        Calendar month (1-12) and year of the first installment.
    """

    principal: Decimal
    annual_rate: Decimal
    tenure_years: int
    start_month: int
    start_year: int

    @property
    def total_months(self) -> int:
        return self.tenure_years * 12

    @property
    def monthly_rate(self) -> Decimal:
        return self.annual_rate / Decimal(12) / Decimal(100)

    @property
    def start_date(self) -> date:
        return date(self.start_year, self.start_month, 1)

    @property
    def end_date(self) -> date:
        """First month after the last nominal installment (exclusive bound)."""
        return add_months(self.start_date, self.total_months)


@dataclass(frozen=True)
class PartPaymentInstruction:
    """An extra principal payment as entered by the user.

    Attributes
    ----------
    id: str
        Caller-assigned identifier, carried through to the expanded events.
    month / year: int
        Date of the first (or only) occurrence.
    amount: Decimal
        Amount paid at every occurrence.
    frequency: str
        ``"one-time"``, ``"monthly"``, ``"quarterly"``, ``"half-yearly"`` or
        ``"yearly"``.
    strategy: str
        ``"reduce-tenure"`` keeps the installment and shortens the payoff
        date. ``"reduce-emi"`` keeps the payoff date and lowers the
        installment.
    """

    id: str
    month: int
    year: int
    amount: Decimal
    frequency: str = "one-time"
    strategy: str = REDUCE_TENURE

    @property
    def date(self) -> date:
        return date(self.year, self.month, 1)


@dataclass(frozen=True)
class PartPaymentEvent:
    """A single occurrence of a part-payment instruction."""

    date: date
    amount: Decimal
    strategy: str
    instruction_id: str = ""

    @property
    def month(self) -> int:
        return self.date.month

    @property
    def year(self) -> int:
        return self.date.year


@dataclass(frozen=True)
class ScheduleEntry:
    """An entry in the amortization schedule, one per simulated month.

    ``emi_amount`` is the installment actually charged that month. It differs
    from the nominal EMI after a reduce-emi part payment and in the final
    (balloon) month. ``part_payment`` is the sum of all part payments landing
    in the month, already clamped to the outstanding balance.
    """

    period: int
    date: date
    starting_balance: Decimal
    emi_amount: Decimal
    principal_component: Decimal
    interest_component: Decimal
    part_payment: Decimal
    remaining_balance: Decimal

    @property
    def month(self) -> int:
        return self.date.month

    @property
    def year(self) -> int:
        return self.date.year


@dataclass(frozen=True)
class YearlySummary:
    """Calendar-year roll-up of the schedule."""

    year: int
    emi_paid: Decimal
    principal_paid: Decimal
    interest_paid: Decimal
    part_payment: Decimal
    end_balance: Decimal
    paid_percent: Decimal


@dataclass(frozen=True)
class LoanCalculationResult:
    """Output of a simulation run.

    ``emi`` is the nominal installment computed from the original terms and is
    kept for reference even when part payments change the amount charged.
    ``total_amount`` is principal plus interest. ``original_end_date`` is the
    month of the last nominal installment and ``end_date`` the month of the
    last installment actually charged.
    """

    terms: LoanTerms
    emi: Decimal
    total_interest: Decimal
    total_amount: Decimal
    total_part_payment: Decimal
    schedule: Tuple[ScheduleEntry, ...]
    yearly: Tuple[YearlySummary, ...]
    original_end_date: date
    end_date: date

    @property
    def tenure_months(self) -> int:
        return len(self.schedule)

    @property
    def has_variable_emi(self) -> bool:
        """True when consecutive installments differ by more than one unit."""
        return any(
            abs(cur.emi_amount - prev.emi_amount) > 1
            for prev, cur in zip(self.schedule, self.schedule[1:])
        )

    @property
    def average_emi(self) -> Decimal:
        if not self.has_variable_emi or not self.schedule:
            return self.emi
        return sum((e.emi_amount for e in self.schedule), Decimal("0")) / len(self.schedule)


@dataclass(frozen=True)
class PartPaymentImpact:
    """Savings obtained by a part-payment plan versus no part payments."""

    baseline: LoanCalculationResult
    planned: LoanCalculationResult
    interest_saved: Decimal
    months_saved: int


@dataclass(frozen=True)
class Scenario:
    """A named set of loan terms taking part in a comparison."""

    id: str
    name: str
    terms: LoanTerms


@dataclass(frozen=True)
class ScenarioResult:
    """Metrics and normalized 0-100 scores of one compared scenario."""

    scenario_id: str
    name: str
    emi: Decimal
    total_interest: Decimal
    total_amount: Decimal
    tenure_months: int
    emi_score: Decimal
    interest_score: Decimal
    tenure_score: Decimal
    weighted_score: Decimal


@dataclass(frozen=True)
class ComparisonResult:
    """Scored scenarios in insertion order plus the overall winner."""

    results: Tuple[ScenarioResult, ...]
    winner_id: str
    winner_score: Decimal
    best_emi_id: str
    best_interest_id: str
    best_tenure_id: str

    @property
    def winner(self) -> ScenarioResult:
        return next(r for r in self.results if r.scenario_id == self.winner_id)


@dataclass(frozen=True)
class AffordabilityResult:
    """Eligible principal and every intermediate value of the estimate."""

    max_allowed_installment: Decimal
    available_for_new_installment: Decimal
    base_eligible_principal: Decimal
    credit_score_multiplier: Decimal
    employment_multiplier: Decimal
    income_based_eligibility: Decimal
    loan_to_value_ratio: Decimal
    loan_to_value_limit: Decimal
    eligible_principal: Decimal
    credit_rating: Optional[str] = None
