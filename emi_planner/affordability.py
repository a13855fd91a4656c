"""Loan eligibility estimate from income, obligations and property value.

The estimate inverts the EMI formula: the installment a borrower can still
afford under the FOIR cap is turned into the principal it would amortize,
then adjusted for credit score and employment type and finally capped by the
loan-to-value limit on the property.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional, Tuple

from .config import DEFAULT_POLICY, AffordabilityPolicy, MAX_TENURE_YEARS
from .data_models import AffordabilityResult
from .errors import InvalidInputError
from .formula import checked_annual_rate, monthly_rate, principal_for_installment
from .utils import Number, to_decimal

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _non_negative(value: Number, name: str) -> Decimal:
    amount = to_decimal(value, name)
    if not amount.is_finite() or amount < 0:
        raise InvalidInputError(f"{name.capitalize()} must be a non-negative amount; got {value}")
    return amount


def credit_score_band(
    score: int, policy: AffordabilityPolicy = DEFAULT_POLICY
) -> Tuple[Decimal, str]:
    """Return the ``(multiplier, label)`` of the band ``score`` falls in."""
    for min_score, multiplier, label in policy.credit_score_bands:
        if score >= min_score:
            return multiplier, label
    _, multiplier, label = policy.credit_score_bands[-1]
    return multiplier, label


def estimate_affordability(
    income: Number,
    tenure_years: int,
    annual_rate: Number,
    existing_obligations: Number,
    property_value: Number,
    credit_score: Optional[int] = None,
    employment_type: str = "salaried",
    policy: AffordabilityPolicy = DEFAULT_POLICY,
) -> AffordabilityResult:
    """Estimate the principal a borrower is eligible for.

    Parameters
    ----------
    income: number
        Gross monthly income; must be positive.
    tenure_years: int
        Desired tenure in years.
    annual_rate: number
        Expected annual interest rate in percent.
    existing_obligations: number
        Installments already being paid every month.
    property_value: number
        Value of the property the loan is secured against.
    credit_score: int, optional
        Bureau score (300-900). Without it no credit multiplier applies and
        the standard LTV ratio is used.
    employment_type: str
        ``"salaried"``, ``"self-employed"`` or ``"business-owner"``.
    policy: AffordabilityPolicy
        Lending rules; defaults to the standard policy.
    """
    income_value = to_decimal(income, "income")
    if not income_value.is_finite() or income_value <= 0:
        raise InvalidInputError(f"Income must be a positive amount; got {income}")
    if isinstance(tenure_years, bool) or not isinstance(tenure_years, int) or tenure_years <= 0:
        raise InvalidInputError(f"Tenure must be a positive whole number of years; got {tenure_years!r}")
    tenure_years = min(tenure_years, MAX_TENURE_YEARS)
    rate = monthly_rate(checked_annual_rate(annual_rate))
    obligations = _non_negative(existing_obligations, "existing obligations")
    property_amount = _non_negative(property_value, "property value")
    if credit_score is not None and not policy.min_credit_score <= credit_score <= policy.max_credit_score:
        raise InvalidInputError(
            f"Credit score must be between {policy.min_credit_score} and "
            f"{policy.max_credit_score}; got {credit_score}"
        )
    if employment_type not in policy.employment_multipliers:
        raise InvalidInputError(
            f"Employment type must be one of {', '.join(policy.employment_multipliers)}; "
            f"got {employment_type}"
        )

    max_installment = income_value * policy.foir
    available = max(ZERO, max_installment - obligations)
    base_principal = principal_for_installment(available, rate, tenure_years * 12)

    rating = None
    credit_multiplier = Decimal("1")
    if credit_score is not None:
        credit_multiplier, rating = credit_score_band(credit_score, policy)
    employment_multiplier = policy.employment_multipliers[employment_type]
    income_based = base_principal * credit_multiplier * employment_multiplier

    if credit_score is not None and credit_score >= policy.ltv_good_credit_threshold:
        ltv_ratio = policy.ltv_ratio_good_credit
    else:
        ltv_ratio = policy.ltv_ratio
    ltv_limit = property_amount * ltv_ratio

    eligible = max(ZERO, min(income_based, ltv_limit))
    logger.debug(
        "Eligibility %s (income based %s, LTV limit %s)", eligible, income_based, ltv_limit
    )
    return AffordabilityResult(
        max_allowed_installment=max_installment,
        available_for_new_installment=available,
        base_eligible_principal=base_principal,
        credit_score_multiplier=credit_multiplier,
        employment_multiplier=employment_multiplier,
        income_based_eligibility=income_based,
        loan_to_value_ratio=ltv_ratio,
        loan_to_value_limit=ltv_limit,
        eligible_principal=eligible,
        credit_rating=rating,
    )
