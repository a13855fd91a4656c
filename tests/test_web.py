from urllib.parse import parse_qs, urlsplit

import pytest

from emi_planner_web.app import app


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


HOME_LOAN = {"principal": 2000000, "rate": 8, "tenure": 15, "start_month": 1, "start_year": 2024}


def test_schedule_preview_is_truncated(client):
    response = client.post("/api/schedule", json=HOME_LOAN)
    assert response.status_code == 200
    data = response.get_json()
    assert data["summary"]["tenure_months"] == 180
    assert abs(data["summary"]["monthly_emi"] - 19113) < 1
    assert len(data["schedule"]) == app.config["MAX_SCHEDULE_ROWS"]
    assert data["truncated"] == 180 - app.config["MAX_SCHEDULE_ROWS"]
    assert len(data["yearly"]) == 15
    assert "savings" not in data


def test_full_schedule_with_part_payments(client):
    body = dict(
        HOME_LOAN,
        full_schedule=True,
        part_payments=[{"month": 12, "year": 2024, "amount": 500000, "strategy": "reduce-tenure"}],
    )
    data = client.post("/api/schedule", json=body).get_json()
    assert data["truncated"] == 0
    assert len(data["schedule"]) == data["summary"]["tenure_months"] < 180
    assert data["savings"]["months_saved"] == 180 - data["summary"]["tenure_months"]
    assert data["savings"]["interest_saved"] > 0


@pytest.mark.parametrize(
    "body",
    [
        dict(HOME_LOAN, principal=-5),
        dict(HOME_LOAN, start_month=14),
        {"rate": 8, "tenure": 15, "start_month": 1, "start_year": 2024},
        dict(HOME_LOAN, part_payments=[{"month": 12, "year": 2024, "amount": 1000, "frequency": "weekly"}]),
        dict(HOME_LOAN, part_payments=[{"year": 2024, "amount": 1000}]),
    ],
)
def test_schedule_rejects_invalid_input(client, body):
    response = client.post("/api/schedule", json=body)
    assert response.status_code == 400
    assert response.get_json()["type"] == "InvalidInputError"


def test_non_json_body_is_rejected(client):
    response = client.post("/api/schedule", data="principal=1", content_type="text/plain")
    assert response.status_code == 400


def test_compare(client):
    body = {
        "start_month": 1,
        "start_year": 2025,
        "scenarios": [
            {"principal": 5000000, "rate": 8.5, "tenure": 20},
            {"name": "Lower rate", "principal": 5000000, "rate": 8, "tenure": 20},
        ],
    }
    data = client.post("/api/compare", json=body).get_json()
    assert [s["id"] for s in data["scenarios"]] == ["base", "scenario-1"]
    assert data["scenarios"][1]["name"] == "Lower rate"
    assert data["winner"] == {"id": "scenario-1", "score": 100.0}
    assert data["best"]["tenure_months"] == "base"


def test_compare_rejects_too_many_scenarios(client):
    scenario = {"principal": 5000000, "rate": 8.5, "tenure": 20}
    body = {"start_month": 1, "start_year": 2025, "scenarios": [scenario] * 5}
    assert client.post("/api/compare", json=body).status_code == 400


def test_affordability(client):
    body = {
        "income": 100000,
        "tenure": 20,
        "rate": 8.5,
        "property_value": 5000000,
        "credit_score": 780,
        "employment_type": "salaried",
    }
    data = client.post("/api/affordability", json=body).get_json()
    assert data["eligible_principal"] == 4250000.0
    assert data["loan_to_value_ratio"] == 0.85
    assert data["credit_rating"] == "Good"
    assert data["max_allowed_installment"] == 50000.0


def test_affordability_rejects_unknown_employment(client):
    body = {"income": 100000, "tenure": 20, "rate": 8.5, "property_value": 5000000, "employment_type": "student"}
    assert client.post("/api/affordability", json=body).status_code == 400


def test_share_link_round_trip(client):
    body = dict(
        HOME_LOAN,
        view="schedule",
        part_payments=[
            {"id": "bonus", "month": 3, "year": 2025, "amount": 100000, "frequency": "yearly", "strategy": "reduce-emi"}
        ],
    )
    url = client.post("/api/share", json=body).get_json()["url"]
    query = urlsplit(url).query
    params = parse_qs(query)
    assert params["amount"] == ["2000000"]
    assert params["startMonth"] == ["1"]
    assert params["view"] == ["schedule"]

    shared = client.get(f"/api/share?{query}").get_json()
    direct = client.post("/api/schedule", json=dict(body, full_schedule=True)).get_json()
    assert shared["view"] == "schedule"
    assert shared["summary"] == direct["summary"]
    assert shared["schedule"] == direct["schedule"]


def test_share_link_missing_fields(client):
    response = client.get("/api/share?amount=100000")
    assert response.status_code == 400


def test_share_link_part_payments_must_be_a_list(client):
    query = "amount=100000&rate=8&tenure=5&startMonth=1&startYear=2024&partPayments=5"
    response = client.get(f"/api/share?{query}")
    assert response.status_code == 400
    assert response.get_json()["type"] == "InvalidInputError"
