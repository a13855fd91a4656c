"""Share links carrying the whole calculator state in the query string.

A link holds ``amount``, ``rate``, ``tenure``, ``startMonth``, ``startYear``,
the part payments as a JSON list under ``partPayments`` and optionally
``view=schedule`` to open the schedule directly. Nothing is stored on the
server; the link is the state.
"""

from __future__ import annotations

import json
from typing import Iterable, List, Mapping, Optional, Tuple
from urllib.parse import urlencode

from emi_planner.data_models import LoanTerms, PartPaymentInstruction
from emi_planner.errors import InvalidInputError
from emi_planner.utils import to_decimal


def build_share_url(
    base_url: str,
    terms: LoanTerms,
    part_payments: Iterable[PartPaymentInstruction] = (),
    view: Optional[str] = None,
) -> str:
    params = {
        "amount": str(terms.principal),
        "rate": str(terms.annual_rate),
        "tenure": str(terms.tenure_years),
        "startMonth": str(terms.start_month),
        "startYear": str(terms.start_year),
    }
    payments = [
        {
            "id": p.id,
            "month": p.month,
            "year": p.year,
            "amount": str(p.amount),
            "frequency": p.frequency,
            "strategy": p.strategy,
        }
        for p in part_payments
    ]
    if payments:
        params["partPayments"] = json.dumps(payments, separators=(",", ":"))
    if view:
        params["view"] = view
    return f"{base_url}?{urlencode(params)}"


def _int_param(args: Mapping[str, str], name: str) -> int:
    try:
        return int(args[name])
    except KeyError:
        raise InvalidInputError(f"Share link is missing '{name}'")
    except (TypeError, ValueError):
        raise InvalidInputError(f"Share link has an invalid '{name}': {args[name]!r}")


def parse_share_args(
    args: Mapping[str, str],
) -> Tuple[LoanTerms, List[PartPaymentInstruction], Optional[str]]:
    """Rebuild terms, part payments and view from share link parameters."""
    if "amount" not in args or "rate" not in args:
        raise InvalidInputError("Share link must carry 'amount' and 'rate'")
    terms = LoanTerms(
        principal=to_decimal(args["amount"], "amount"),
        annual_rate=to_decimal(args["rate"], "rate"),
        tenure_years=_int_param(args, "tenure"),
        start_month=_int_param(args, "startMonth"),
        start_year=_int_param(args, "startYear"),
    )
    payments: List[PartPaymentInstruction] = []
    raw = args.get("partPayments")
    if raw:
        try:
            items = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise InvalidInputError(f"Share link has malformed part payments: {exc}") from exc
        if not isinstance(items, list):
            raise InvalidInputError("Share link part payments must be a list")
        payments = [instruction_from_dict(item, index) for index, item in enumerate(items, start=1)]
    return terms, payments, args.get("view")


def instruction_from_dict(item: Mapping, index: int) -> PartPaymentInstruction:
    """Build a part-payment instruction from JSON-like data."""
    try:
        return PartPaymentInstruction(
            id=str(item.get("id") or f"pp-{index}"),
            month=int(item["month"]),
            year=int(item["year"]),
            amount=to_decimal(item["amount"], "part payment amount"),
            frequency=item.get("frequency", "one-time"),
            strategy=item.get("strategy", "reduce-tenure"),
        )
    except InvalidInputError:
        raise
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise InvalidInputError(f"Invalid part payment #{index}: {item!r}") from exc
