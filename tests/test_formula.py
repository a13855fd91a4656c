from decimal import Decimal

import pytest

from emi_planner.config import MAX_PRINCIPAL
from emi_planner.errors import InvalidInputError, NumericOverflowError
from emi_planner.formula import (
    annuity_payment,
    calculate_emi,
    monthly_rate,
    months_to_amortize,
    principal_for_installment,
)


def test_emi_for_reference_home_loan():
    emi = calculate_emi(2000000, 8, 180)
    assert abs(emi - Decimal("19113")) < 1


def test_emi_accepts_strings_and_floats():
    assert calculate_emi("2,000,000", "8", 180) == calculate_emi(2000000.0, 8.0, 180)


def test_zero_rate_is_simple_division():
    assert calculate_emi(120000, 0, 120) == Decimal("1000")


@pytest.mark.parametrize("principal", [0, -5, "nan", float("inf"), "abc", True])
def test_invalid_principal(principal):
    with pytest.raises(InvalidInputError):
        calculate_emi(principal, 8, 120)


@pytest.mark.parametrize("rate", [-0.5, "nan", float("inf")])
def test_invalid_rate(rate):
    with pytest.raises(InvalidInputError):
        calculate_emi(100000, rate, 120)


@pytest.mark.parametrize("months", [0, -12, 12.5, "12", True])
def test_invalid_term(months):
    with pytest.raises(InvalidInputError):
        calculate_emi(100000, 8, months)


def test_extreme_inputs_are_clamped():
    assert calculate_emi(1e15, 8, 180) == calculate_emi(MAX_PRINCIPAL, 8, 180)
    assert calculate_emi(100000, 250, 12) == calculate_emi(100000, 100, 12)
    assert calculate_emi(100000, 8, 1000) == calculate_emi(100000, 8, 600)


def test_vanishing_rate_is_reported_as_overflow():
    with pytest.raises(NumericOverflowError):
        calculate_emi(100000, Decimal("1e-30"), 120)


def test_months_to_amortize_recovers_full_term():
    rate = monthly_rate(Decimal("8"))
    emi = annuity_payment(Decimal("2000000"), rate, 180)
    assert months_to_amortize(Decimal("2000000"), emi, rate) == 180


def test_months_to_amortize_rounds_up_partial_month():
    rate = monthly_rate(Decimal("8"))
    emi = annuity_payment(Decimal("2000000"), rate, 180)
    assert months_to_amortize(Decimal("1999000"), emi, rate) == 180
    assert months_to_amortize(Decimal("1000000"), emi, rate) < 180


def test_months_to_amortize_zero_rate():
    assert months_to_amortize(Decimal("1000"), Decimal("300"), Decimal("0")) == 4
    assert months_to_amortize(Decimal("0"), Decimal("300"), Decimal("0")) == 0


def test_months_to_amortize_rejects_installment_below_interest():
    with pytest.raises(NumericOverflowError):
        months_to_amortize(Decimal("100000"), Decimal("500"), Decimal("0.01"))


def test_principal_for_installment_inverts_emi():
    rate = monthly_rate(Decimal("8.5"))
    emi = annuity_payment(Decimal("3500000"), rate, 240)
    assert abs(principal_for_installment(emi, rate, 240) - Decimal("3500000")) < Decimal("0.000001")


def test_principal_for_installment_zero_rate_and_zero_installment():
    assert principal_for_installment(Decimal("500"), Decimal("0"), 24) == Decimal("12000")
    assert principal_for_installment(Decimal("0"), Decimal("0.01"), 24) == 0
