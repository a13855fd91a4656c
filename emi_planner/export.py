"""JSON and CSV export of calculation results.

Amounts are rounded to two decimals and converted to ``float`` on the way out.
The same dictionaries feed the CLI exporters and the web API.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, List

from .data_models import (
    AffordabilityResult,
    ComparisonResult,
    LoanCalculationResult,
    PartPaymentImpact,
)
from .utils import month_name, round_currency

CSV_HEADER = [
    "S.No",
    "Month",
    "Year",
    "EMI",
    "Principal",
    "Interest",
    "Part_Payment",
    "Remaining_Balance",
]


def _money(value) -> float:
    return float(round_currency(value))


def summary_to_dict(result: LoanCalculationResult) -> Dict[str, Any]:
    return {
        "principal": _money(result.terms.principal),
        "annual_rate": float(result.terms.annual_rate),
        "tenure_years": result.terms.tenure_years,
        "monthly_emi": _money(result.emi),
        "average_emi": _money(result.average_emi),
        "total_interest": _money(result.total_interest),
        "total_part_payment": _money(result.total_part_payment),
        "total_amount": _money(result.total_amount),
        "original_end_date": result.original_end_date.strftime("%Y-%m"),
        "end_date": result.end_date.strftime("%Y-%m"),
        "tenure_months": result.tenure_months,
    }


def schedule_to_dicts(result: LoanCalculationResult) -> List[Dict[str, Any]]:
    return [
        {
            "serial_no": entry.period,
            "month": month_name(entry.month),
            "year": entry.year,
            "emi_amount": _money(entry.emi_amount),
            "principal_amount": _money(entry.principal_component),
            "interest_amount": _money(entry.interest_component),
            "part_payment": _money(entry.part_payment),
            "remaining_balance": _money(entry.remaining_balance),
        }
        for entry in result.schedule
    ]


def yearly_to_dicts(result: LoanCalculationResult) -> List[Dict[str, Any]]:
    return [
        {
            "year": y.year,
            "emi_paid": _money(y.emi_paid),
            "principal_paid": _money(y.principal_paid),
            "interest_paid": _money(y.interest_paid),
            "part_payment": _money(y.part_payment),
            "end_balance": _money(y.end_balance),
            "paid_percent": _money(y.paid_percent),
        }
        for y in result.yearly
    ]


def impact_to_dict(impact: PartPaymentImpact) -> Dict[str, Any]:
    return {
        "baseline_total_interest": _money(impact.baseline.total_interest),
        "baseline_tenure_months": impact.baseline.tenure_months,
        "interest_saved": _money(impact.interest_saved),
        "months_saved": impact.months_saved,
    }


def comparison_to_dict(comparison: ComparisonResult) -> Dict[str, Any]:
    return {
        "scenarios": [
            {
                "id": r.scenario_id,
                "name": r.name,
                "emi": _money(r.emi),
                "total_interest": _money(r.total_interest),
                "total_amount": _money(r.total_amount),
                "tenure_months": r.tenure_months,
                "emi_score": _money(r.emi_score),
                "interest_score": _money(r.interest_score),
                "tenure_score": _money(r.tenure_score),
                "weighted_score": _money(r.weighted_score),
            }
            for r in comparison.results
        ],
        "winner": {"id": comparison.winner_id, "score": _money(comparison.winner_score)},
        "best": {
            "emi": comparison.best_emi_id,
            "total_interest": comparison.best_interest_id,
            "tenure_months": comparison.best_tenure_id,
        },
    }


def affordability_to_dict(result: AffordabilityResult) -> Dict[str, Any]:
    return {
        "eligible_principal": _money(result.eligible_principal),
        "max_allowed_installment": _money(result.max_allowed_installment),
        "available_for_new_installment": _money(result.available_for_new_installment),
        "base_eligible_principal": _money(result.base_eligible_principal),
        "credit_score_multiplier": float(result.credit_score_multiplier),
        "credit_rating": result.credit_rating,
        "employment_multiplier": float(result.employment_multiplier),
        "income_based_eligibility": _money(result.income_based_eligibility),
        "loan_to_value_ratio": float(result.loan_to_value_ratio),
        "loan_to_value_limit": _money(result.loan_to_value_limit),
    }


def export_to_json(path: Path, result: LoanCalculationResult) -> None:
    """Export summary, schedule and yearly roll-up to a JSON file."""
    data = {
        "summary": summary_to_dict(result),
        "schedule": schedule_to_dicts(result),
        "yearly": yearly_to_dicts(result),
    }
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, result: LoanCalculationResult) -> None:
    """Export the schedule to a CSV file, followed by a totals row."""
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)
        for row in schedule_to_dicts(result):
            writer.writerow(
                [
                    row["serial_no"],
                    row["month"],
                    row["year"],
                    row["emi_amount"],
                    row["principal_amount"],
                    row["interest_amount"],
                    row["part_payment"],
                    row["remaining_balance"],
                ]
            )
        writer.writerow(
            [
                "Total",
                "",
                "",
                _money(result.total_amount),
                _money(result.terms.principal),
                _money(result.total_interest),
                _money(result.total_part_payment),
                "",
            ]
        )
