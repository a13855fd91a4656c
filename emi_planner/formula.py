"""Closed-form annuity formulas.

The equated monthly installment (EMI) of a loan is

    emi = P * r * (1 + r)^n / ((1 + r)^n - 1)

where ``P`` is the principal, ``r`` the monthly rate and ``n`` the number of
installments. When the rate is zero the payment simplifies to ``P / n``. This
module also provides the two inversions of that formula used elsewhere: the
number of installments needed to clear a balance at a given installment, and
the principal a given installment can support.
"""

from __future__ import annotations

import logging
from decimal import ROUND_CEILING, Decimal

from .config import MAX_ANNUAL_RATE, MAX_PRINCIPAL, MAX_TENURE_MONTHS
from .errors import InvalidInputError, NumericOverflowError
from .utils import Number, to_decimal

logger = logging.getLogger(__name__)

# Absorbs log() noise so that an exact integer horizon is not rounded up.
_HORIZON_TOLERANCE = Decimal("1e-9")


def checked_principal(value: Number) -> Decimal:
    principal = to_decimal(value, "principal")
    if not principal.is_finite() or principal <= 0:
        raise InvalidInputError(f"Principal must be a positive finite amount; got {value}")
    if principal > MAX_PRINCIPAL:
        logger.warning("Principal %s exceeds ceiling; clamped to %s", principal, MAX_PRINCIPAL)
        principal = MAX_PRINCIPAL
    return principal


def checked_annual_rate(value: Number) -> Decimal:
    rate = to_decimal(value, "annual rate")
    if not rate.is_finite() or rate < 0:
        raise InvalidInputError(f"Annual rate must be a non-negative finite percentage; got {value}")
    if rate > MAX_ANNUAL_RATE:
        logger.warning("Annual rate %s%% exceeds ceiling; clamped to %s%%", rate, MAX_ANNUAL_RATE)
        rate = MAX_ANNUAL_RATE
    return rate


def checked_months(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidInputError(f"Term must be a positive whole number of months; got {value!r}")
    if value > MAX_TENURE_MONTHS:
        logger.warning("Term of %s months exceeds ceiling; clamped to %s", value, MAX_TENURE_MONTHS)
        return MAX_TENURE_MONTHS
    return value


def monthly_rate(annual_rate: Decimal) -> Decimal:
    """Convert an annual percentage into a monthly decimal rate."""
    return annual_rate / Decimal(12) / Decimal(100)


def _growth_factor(rate_per_month: Decimal, months: int) -> Decimal:
    factor = (1 + rate_per_month) ** months
    if not factor.is_finite() or factor <= 1:
        raise NumericOverflowError(
            f"Amortization factor (1 + {rate_per_month})^{months} = {factor} is unusable"
        )
    return factor


def annuity_payment(principal: Decimal, rate_per_month: Decimal, months: int) -> Decimal:
    """Return the installment that amortizes ``principal`` over ``months``.

    Inputs are assumed to be validated already; see :func:`calculate_emi`
    for the checked entry point.
    """
    if months <= 0:
        raise InvalidInputError("Term must be positive")
    if rate_per_month == 0:
        return principal / Decimal(months)
    factor = _growth_factor(rate_per_month, months)
    return principal * rate_per_month * factor / (factor - 1)


def calculate_emi(principal: Number, annual_rate: Number, months: int) -> Decimal:
    """Compute the EMI for a loan.

    Parameters
    ----------
    principal: number
        Amount borrowed; must be finite and positive.
    annual_rate: number
        Nominal annual rate in percent; must be finite and non-negative.
    months: int
        Number of monthly installments; must be a positive integer.

    Values above the configured ceilings (principal, 100 % rate, 600 months)
    are clamped before computing.

    Raises
    ------
    InvalidInputError
        If any input is non-finite, negative or otherwise out of range.
    NumericOverflowError
        If the amortization factor is not finite or not above one.
    """
    principal_value = checked_principal(principal)
    rate = monthly_rate(checked_annual_rate(annual_rate))
    term = checked_months(months)
    return annuity_payment(principal_value, rate, term)


def months_to_amortize(balance: Decimal, installment: Decimal, rate_per_month: Decimal) -> int:
    """Return how many installments of ``installment`` clear ``balance``.

    Solves ``n = log(I / (I - B * r)) / log(1 + r)`` and rounds up, so the
    last of the ``n`` installments may be smaller than the others.
    """
    if balance <= 0:
        return 0
    if installment <= 0:
        raise InvalidInputError(f"Installment must be positive; got {installment}")
    if rate_per_month == 0:
        return int((balance / installment).to_integral_value(rounding=ROUND_CEILING))
    headroom = installment - balance * rate_per_month
    if headroom <= 0:
        raise NumericOverflowError(
            f"Installment {installment} does not cover the monthly interest on {balance}"
        )
    n = (installment / headroom).ln() / (1 + rate_per_month).ln()
    if not n.is_finite():
        raise NumericOverflowError(f"Cannot solve payoff horizon for balance {balance}")
    return max(1, int((n - _HORIZON_TOLERANCE).to_integral_value(rounding=ROUND_CEILING)))


def principal_for_installment(installment: Decimal, rate_per_month: Decimal, months: int) -> Decimal:
    """Return the principal an ``installment`` amortizes over ``months``."""
    if installment <= 0:
        return Decimal("0")
    if rate_per_month == 0:
        return installment * Decimal(months)
    factor = _growth_factor(rate_per_month, months)
    return installment * (factor - 1) / (rate_per_month * factor)
