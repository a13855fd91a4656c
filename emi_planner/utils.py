"""Utility functions for the EMI planner.

This module provides helpers for converting user input into ``Decimal``
values, for month arithmetic on ``datetime.date`` instances (always the first
day of a month) and for the single rounding boundary used when amounts are
presented or exported.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext
import calendar
from typing import Union

from .errors import InvalidInputError

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")


def to_decimal(value: Number, name: str = "value") -> Decimal:
    """Convert ``value`` into a ``Decimal``.

    Floats go through ``str`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion. Strings may contain thousands
    separators. Non-finite values (``nan``, ``inf``) are returned as-is; range
    checks are the caller's job.

    Raises
    ------
    InvalidInputError
        If the value cannot be interpreted as a number.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidInputError(f"Invalid numeric value for {name}: {value!r}")
    try:
        if isinstance(value, str):
            return Decimal(value.strip().replace(",", ""))
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidInputError(f"Invalid numeric value for {name}: {value!r}") from exc


def parse_year_month(ym: str) -> date:
    """Parse a YYYY-MM string into a ``date`` object (first day of month).

    Raises
    ------
    InvalidInputError
        If the string is not a valid year-month.
    """
    try:
        parts = ym.split("-")
        if len(parts) < 2:
            raise ValueError
        year = int(parts[0])
        month = int(parts[1])
        return date(year, month, 1)
    except (AttributeError, ValueError) as exc:
        raise InvalidInputError(f"Invalid year-month string: {ym}") from exc


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def months_between(start: date, end: date) -> int:
    """Number of whole months from ``start`` to ``end`` (negative if earlier)."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def month_name(month: int) -> str:
    return calendar.month_abbr[month]


def round_currency(amount: Decimal) -> Decimal:
    """Round an amount to two decimals for display or export."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)
