import logging
import os

from flask import Flask, jsonify, request

from emi_planner.affordability import estimate_affordability
from emi_planner.comparison import compare_scenarios
from emi_planner.data_models import LoanTerms, Scenario
from emi_planner.engine import compute_part_payment_impact, compute_schedule
from emi_planner.errors import InvalidInputError, PlannerError
from emi_planner.export import (
    affordability_to_dict,
    comparison_to_dict,
    impact_to_dict,
    schedule_to_dicts,
    summary_to_dict,
    yearly_to_dicts,
)
from emi_planner.utils import to_decimal
from emi_planner_web.share import build_share_url, instruction_from_dict, parse_share_args

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["MAX_SCHEDULE_ROWS"] = int(os.environ.get("EMI_PLANNER_MAX_SCHEDULE_ROWS", "120"))
app.config["SHARE_BASE_URL"] = os.environ.get("EMI_PLANNER_SHARE_BASE_URL", "http://localhost:8710/")


def _json_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise InvalidInputError("Request body must be a JSON object")
    return body


def _required(body: dict, name: str):
    if body.get(name) is None:
        raise InvalidInputError(f"Missing field '{name}'")
    return body[name]


def _int_field(body: dict, name: str, default=None) -> int:
    value = body.get(name, default)
    if value is None:
        raise InvalidInputError(f"Missing field '{name}'")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Field '{name}' must be a whole number; got {value!r}")


def _body_to_terms(body: dict) -> LoanTerms:
    return LoanTerms(
        principal=to_decimal(_required(body, "principal"), "principal"),
        annual_rate=to_decimal(_required(body, "rate"), "rate"),
        tenure_years=_int_field(body, "tenure"),
        start_month=_int_field(body, "start_month"),
        start_year=_int_field(body, "start_year"),
    )


def _body_to_part_payments(body: dict):
    items = body.get("part_payments") or []
    if not isinstance(items, list):
        raise InvalidInputError("'part_payments' must be a list")
    return [instruction_from_dict(item, index) for index, item in enumerate(items, start=1)]


def _schedule_for_view(rows: list, show_full_schedule: bool):
    """Return the rows to send and how many were left out."""
    if show_full_schedule:
        return rows, 0
    limit = app.config["MAX_SCHEDULE_ROWS"]
    preview = rows[:limit]
    return preview, len(rows) - len(preview)


@app.errorhandler(PlannerError)
def handle_planner_error(exc: PlannerError):
    logger.info("Rejected request to %s: %s", request.path, exc)
    return jsonify({"error": str(exc), "type": type(exc).__name__}), 400


@app.post("/api/schedule")
def schedule():
    body = _json_body()
    terms = _body_to_terms(body)
    part_payments = _body_to_part_payments(body)
    payload = {}
    if part_payments:
        impact = compute_part_payment_impact(terms, part_payments)
        result = impact.planned
        payload["savings"] = impact_to_dict(impact)
    else:
        result = compute_schedule(terms)
    rows, truncated = _schedule_for_view(schedule_to_dicts(result), bool(body.get("full_schedule")))
    payload.update(
        summary=summary_to_dict(result),
        schedule=rows,
        yearly=yearly_to_dicts(result),
        truncated=truncated,
    )
    return jsonify(payload)


@app.post("/api/compare")
def compare():
    body = _json_body()
    items = _required(body, "scenarios")
    if not isinstance(items, list):
        raise InvalidInputError("'scenarios' must be a list")
    scenarios = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise InvalidInputError(f"Scenario #{index + 1} must be an object")
        merged = {"start_month": body.get("start_month"), "start_year": body.get("start_year"), **item}
        scenarios.append(
            Scenario(
                id=str(item.get("id") or ("base" if index == 0 else f"scenario-{index}")),
                name=str(item.get("name") or ("Current" if index == 0 else f"Scenario {index}")),
                terms=_body_to_terms(merged),
            )
        )
    return jsonify(comparison_to_dict(compare_scenarios(scenarios)))


@app.post("/api/affordability")
def affordability():
    body = _json_body()
    credit_score = body.get("credit_score")
    result = estimate_affordability(
        income=to_decimal(_required(body, "income"), "income"),
        tenure_years=_int_field(body, "tenure"),
        annual_rate=to_decimal(_required(body, "rate"), "rate"),
        existing_obligations=to_decimal(body.get("existing_obligations", 0), "existing obligations"),
        property_value=to_decimal(_required(body, "property_value"), "property value"),
        credit_score=None if credit_score is None else _int_field(body, "credit_score"),
        employment_type=body.get("employment_type", "salaried"),
    )
    return jsonify(affordability_to_dict(result))


@app.post("/api/share")
def create_share_link():
    body = _json_body()
    terms = _body_to_terms(body)
    part_payments = _body_to_part_payments(body)
    url = build_share_url(app.config["SHARE_BASE_URL"], terms, part_payments, body.get("view"))
    return jsonify({"url": url})


@app.get("/api/share")
def open_share_link():
    terms, part_payments, view = parse_share_args(request.args)
    result = compute_schedule(terms, part_payments)
    rows, truncated = _schedule_for_view(schedule_to_dicts(result), view == "schedule")
    return jsonify(
        {
            "view": view,
            "summary": summary_to_dict(result),
            "schedule": rows,
            "truncated": truncated,
        }
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    print("Starting EMI planner web API...")
    app.run(host="0.0.0.0", port=8710, debug=True)
