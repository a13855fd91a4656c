from decimal import Decimal

import pytest

from emi_planner.data_models import LoanTerms, PartPaymentInstruction


@pytest.fixture
def home_loan() -> LoanTerms:
    """20 lakh at 8 % over 15 years, first EMI in January 2024."""
    return LoanTerms(
        principal=Decimal("2000000"),
        annual_rate=Decimal("8"),
        tenure_years=15,
        start_month=1,
        start_year=2024,
    )


def part_payment(month, year, amount, frequency="one-time", strategy="reduce-tenure", id="pp"):
    return PartPaymentInstruction(
        id=id,
        month=month,
        year=year,
        amount=Decimal(str(amount)),
        frequency=frequency,
        strategy=strategy,
    )
