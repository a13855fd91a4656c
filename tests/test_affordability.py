from decimal import Decimal

import pytest

from emi_planner.affordability import credit_score_band, estimate_affordability
from emi_planner.config import AffordabilityPolicy
from emi_planner.errors import InvalidInputError


def _estimate(**overrides):
    params = dict(
        income=100000,
        tenure_years=20,
        annual_rate=8.5,
        existing_obligations=0,
        property_value=50000000,
        credit_score=None,
        employment_type="salaried",
    )
    params.update(overrides)
    return estimate_affordability(**params)


def test_foir_and_inverse_emi():
    result = _estimate(existing_obligations=15000)

    assert result.max_allowed_installment == Decimal("50000")
    assert result.available_for_new_installment == Decimal("35000")
    # 35k a month over 20 years at 8.5 % supports roughly 40 lakh
    assert Decimal("4000000") < result.base_eligible_principal < Decimal("4050000")
    assert result.credit_score_multiplier == 1
    assert result.credit_rating is None
    assert result.eligible_principal == result.income_based_eligibility


def test_ltv_caps_eligibility():
    result = _estimate(property_value=5000000)

    assert result.loan_to_value_ratio == Decimal("0.75")
    assert result.loan_to_value_limit == Decimal("3750000")
    assert result.income_based_eligibility > result.loan_to_value_limit
    assert result.eligible_principal == Decimal("3750000")


def test_good_credit_raises_ltv():
    result = _estimate(property_value=5000000, credit_score=780)

    assert result.loan_to_value_ratio == Decimal("0.85")
    assert result.eligible_principal == Decimal("4250000")
    assert result.credit_rating == "Good"


def test_zero_rate_uses_simple_inverse():
    result = _estimate(annual_rate=0, tenure_years=10)
    assert result.base_eligible_principal == Decimal("6000000")


@pytest.mark.parametrize(
    "score, multiplier, label",
    [
        (900, Decimal("1.10"), "Excellent"),
        (800, Decimal("1.10"), "Excellent"),
        (799, Decimal("1.00"), "Good"),
        (750, Decimal("1.00"), "Good"),
        (749, Decimal("0.90"), "Fair"),
        (700, Decimal("0.90"), "Fair"),
        (650, Decimal("0.80"), "Poor"),
        (649, Decimal("0.70"), "Very Poor"),
        (300, Decimal("0.70"), "Very Poor"),
    ],
)
def test_credit_score_bands(score, multiplier, label):
    assert credit_score_band(score) == (multiplier, label)


@pytest.mark.parametrize(
    "employment, multiplier",
    [("salaried", Decimal("1.00")), ("business-owner", Decimal("0.90")), ("self-employed", Decimal("0.85"))],
)
def test_employment_multiplier(employment, multiplier):
    result = _estimate(employment_type=employment)
    assert result.employment_multiplier == multiplier
    assert result.income_based_eligibility == result.base_eligible_principal * multiplier


def test_credit_and_employment_multipliers_combine():
    result = _estimate(credit_score=680, employment_type="self-employed")
    expected = result.base_eligible_principal * Decimal("0.80") * Decimal("0.85")
    assert result.income_based_eligibility == expected


def test_obligations_above_foir_leave_nothing():
    result = _estimate(existing_obligations=60000)
    assert result.available_for_new_installment == 0
    assert result.eligible_principal == 0


def test_eligibility_grows_with_income():
    incomes = [20000, 50000, 80000, 150000, 400000]
    eligible = [_estimate(income=i, property_value=10000000).eligible_principal for i in incomes]
    assert eligible == sorted(eligible)
    assert eligible[-1] == Decimal("7500000")  # capped by LTV


def test_eligibility_shrinks_with_obligations():
    obligations = [0, 10000, 25000, 49000, 50000, 70000]
    eligible = [_estimate(existing_obligations=o).eligible_principal for o in obligations]
    assert eligible == sorted(eligible, reverse=True)


def test_custom_policy():
    policy = AffordabilityPolicy(foir=Decimal("0.4"))
    result = estimate_affordability(100000, 20, 8.5, 0, 50000000, policy=policy)
    assert result.max_allowed_installment == Decimal("40000")


@pytest.mark.parametrize(
    "overrides",
    [
        {"income": 0},
        {"income": -1000},
        {"tenure_years": 0},
        {"annual_rate": -1},
        {"existing_obligations": -1},
        {"property_value": -1},
        {"credit_score": 950},
        {"credit_score": 100},
        {"employment_type": "student"},
    ],
)
def test_invalid_inputs(overrides):
    with pytest.raises(InvalidInputError):
        _estimate(**overrides)
