"""Expansion of part-payment instructions into concrete monthly events."""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List

from .config import FREQUENCY_MONTHS, MAX_START_YEAR, MIN_START_YEAR, STRATEGIES
from .data_models import PartPaymentEvent, PartPaymentInstruction
from .errors import InvalidInputError
from .utils import add_months, to_decimal


def _validate_instruction(instruction: PartPaymentInstruction) -> None:
    amount = to_decimal(instruction.amount, "part payment amount")
    if not amount.is_finite() or amount <= 0:
        raise InvalidInputError(
            f"Part payment {instruction.id!r} amount must be positive; got {instruction.amount}"
        )
    if not 1 <= instruction.month <= 12:
        raise InvalidInputError(
            f"Part payment {instruction.id!r} month must be 1-12; got {instruction.month}"
        )
    if not MIN_START_YEAR <= instruction.year <= MAX_START_YEAR:
        raise InvalidInputError(
            f"Part payment {instruction.id!r} year must be between {MIN_START_YEAR} and "
            f"{MAX_START_YEAR}; got {instruction.year}"
        )
    if instruction.frequency not in FREQUENCY_MONTHS:
        raise InvalidInputError(
            f"Part payment frequency must be one of {', '.join(FREQUENCY_MONTHS)}; "
            f"got {instruction.frequency}"
        )
    if instruction.strategy not in STRATEGIES:
        raise InvalidInputError(
            f"Part payment strategy must be one of {', '.join(STRATEGIES)}; got {instruction.strategy}"
        )


def expand_part_payments(
    instructions: Iterable[PartPaymentInstruction],
    start_date: date,
    end_date: date,
) -> List[PartPaymentEvent]:
    """Materialize every occurrence of the given instructions.

    Parameters
    ----------
    instructions: iterable of PartPaymentInstruction
        User-authored instructions, possibly recurring.
    start_date: date
        First month of the loan. Only used to bound the recurrence.
    end_date: date
        Exclusive end of the loan horizon: the month after the last
        scheduled installment. Recurring instructions produce events for every
        occurrence strictly before this date, so the final scheduled month is
        included.

    Returns
    -------
    List[PartPaymentEvent]
        Events sorted by date. Events from different instructions that land
        in the same month are kept separate, in instruction order.
    """
    events: List[PartPaymentEvent] = []
    for instruction in instructions:
        _validate_instruction(instruction)
        amount = to_decimal(instruction.amount, "part payment amount")
        step = FREQUENCY_MONTHS[instruction.frequency]
        first = instruction.date
        if step == 0:
            events.append(PartPaymentEvent(first, amount, instruction.strategy, instruction.id))
            continue
        occurrence = first
        while occurrence < end_date:
            if occurrence >= start_date:
                events.append(
                    PartPaymentEvent(occurrence, amount, instruction.strategy, instruction.id)
                )
            occurrence = add_months(occurrence, step)
    # sorted() is stable, so same-month events keep their instruction order
    return sorted(events, key=lambda e: e.date)


def group_by_month(events: Iterable[PartPaymentEvent]) -> Dict[date, List[PartPaymentEvent]]:
    """Group events by month for quick lookup."""
    mapping: Dict[date, List[PartPaymentEvent]] = {}
    for event in events:
        mapping.setdefault(event.date, []).append(event)
    return mapping
