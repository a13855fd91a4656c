"""Policy constants and numeric bounds used by the planner.

Lending policy values (FOIR, LTV, credit score bands, employment factors) and
the scenario scoring weights are plain configuration rather than derived
quantities. They are grouped in frozen dataclasses so callers can pass an
adjusted policy without touching module state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Tuple

# Balance at or below this amount counts as fully repaid.
BALANCE_EPSILON = Decimal("0.01")

# Upper bounds applied to raw inputs before any computation.
MAX_PRINCIPAL = Decimal("1000000000000")
MAX_ANNUAL_RATE = Decimal("100")
MAX_TENURE_YEARS = 50
MAX_TENURE_MONTHS = MAX_TENURE_YEARS * 12

MIN_START_YEAR = 1900
MAX_START_YEAR = 2200

# Base scenario plus up to three alternatives.
MAX_SCENARIOS = 4

FREQUENCY_MONTHS: Dict[str, int] = {
    "one-time": 0,
    "monthly": 1,
    "quarterly": 3,
    "half-yearly": 6,
    "yearly": 12,
}

REDUCE_TENURE = "reduce-tenure"
REDUCE_EMI = "reduce-emi"
STRATEGIES: Tuple[str, ...] = (REDUCE_TENURE, REDUCE_EMI)

SALARIED = "salaried"
SELF_EMPLOYED = "self-employed"
BUSINESS_OWNER = "business-owner"


@dataclass(frozen=True)
class AffordabilityPolicy:
    """Lending rules applied by the affordability estimator.

    Attributes
    ----------
    foir: Decimal
        Fixed Obligations to Income Ratio. The share of gross monthly income
        that may go towards all installments combined.
    credit_score_bands: tuple of (min_score, multiplier, label)
        Checked in order; the first band whose ``min_score`` the score
        reaches applies. The last band is the catch-all.
    employment_multipliers: dict
        Factor applied to the income-based eligibility per employment type.
    ltv_ratio / ltv_ratio_good_credit: Decimal
        Share of the property value that may be financed. The higher ratio
        applies only when a credit score is known and reaches
        ``ltv_good_credit_threshold``.
    """

    foir: Decimal = Decimal("0.5")
    credit_score_bands: Tuple[Tuple[int, Decimal, str], ...] = (
        (800, Decimal("1.10"), "Excellent"),
        (750, Decimal("1.00"), "Good"),
        (700, Decimal("0.90"), "Fair"),
        (650, Decimal("0.80"), "Poor"),
        (0, Decimal("0.70"), "Very Poor"),
    )
    employment_multipliers: Dict[str, Decimal] = field(
        default_factory=lambda: {
            SALARIED: Decimal("1.00"),
            BUSINESS_OWNER: Decimal("0.90"),
            SELF_EMPLOYED: Decimal("0.85"),
        }
    )
    ltv_ratio: Decimal = Decimal("0.75")
    ltv_ratio_good_credit: Decimal = Decimal("0.85")
    ltv_good_credit_threshold: int = 750
    min_credit_score: int = 300
    max_credit_score: int = 900


@dataclass(frozen=True)
class ScoringWeights:
    """Weights of the scenario comparator's overall score (sum to one)."""

    emi: Decimal = Decimal("0.3")
    interest: Decimal = Decimal("0.5")
    tenure: Decimal = Decimal("0.2")


DEFAULT_POLICY = AffordabilityPolicy()
DEFAULT_WEIGHTS = ScoringWeights()
