"""Side-by-side comparison of loan scenarios.

Each scenario is simulated on its own, always without part payments, so
scenarios differ only in amount, rate and tenure. The EMI, total interest and
tenure of every scenario are then min-max normalized to a 0-100 scale where
100 is the lowest (best) value, and combined into a weighted score. The
highest score wins; on a tie the scenario listed first wins.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Sequence, Union

from .config import DEFAULT_WEIGHTS, MAX_SCENARIOS, ScoringWeights
from .data_models import ComparisonResult, LoanTerms, Scenario, ScenarioResult
from .engine import compute_schedule
from .errors import InvalidInputError

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def _as_scenarios(items: Sequence[Union[Scenario, LoanTerms]]) -> List[Scenario]:
    scenarios: List[Scenario] = []
    for index, item in enumerate(items):
        if isinstance(item, Scenario):
            scenarios.append(item)
        elif isinstance(item, LoanTerms):
            scenario_id = "base" if index == 0 else f"scenario-{index}"
            name = "Current" if index == 0 else f"Scenario {index}"
            scenarios.append(Scenario(id=scenario_id, name=name, terms=item))
        else:
            raise InvalidInputError(f"Cannot compare object of type {type(item).__name__}")
    ids = [s.id for s in scenarios]
    if len(set(ids)) != len(ids):
        raise InvalidInputError(f"Scenario ids must be unique; got {ids}")
    return scenarios


def normalized_scores(values: Sequence[Decimal]) -> List[Decimal]:
    """Scale ``values`` to 0-100 where the lowest value scores 100.

    When every value is equal, every value scores 100.
    """
    low, high = min(values), max(values)
    if high == low:
        return [HUNDRED for _ in values]
    return [(high - v) / (high - low) * HUNDRED for v in values]


def compare_scenarios(
    scenarios: Sequence[Union[Scenario, LoanTerms]],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> ComparisonResult:
    """Simulate and score up to four loan scenarios.

    Parameters
    ----------
    scenarios: sequence of Scenario or LoanTerms
        The base scenario first, then the alternatives. Bare ``LoanTerms``
        are named ``base``, ``scenario-1``, ``scenario-2``... by position.
    weights: ScoringWeights
        Weights of the EMI, interest and tenure scores.

    Raises
    ------
    InvalidInputError
        If no scenario or more than ``MAX_SCENARIOS`` are given, ids repeat,
        or any scenario's terms are invalid.
    """
    if not scenarios:
        raise InvalidInputError("At least one scenario is required")
    if len(scenarios) > MAX_SCENARIOS:
        raise InvalidInputError(f"At most {MAX_SCENARIOS} scenarios can be compared; got {len(scenarios)}")

    items = _as_scenarios(scenarios)
    runs = [compute_schedule(s.terms) for s in items]

    emi_scores = normalized_scores([r.emi for r in runs])
    interest_scores = normalized_scores([r.total_interest for r in runs])
    tenure_scores = normalized_scores([Decimal(r.tenure_months) for r in runs])

    results: List[ScenarioResult] = []
    for scenario, run, emi_score, interest_score, tenure_score in zip(
        items, runs, emi_scores, interest_scores, tenure_scores
    ):
        weighted = (
            weights.emi * emi_score
            + weights.interest * interest_score
            + weights.tenure * tenure_score
        )
        results.append(
            ScenarioResult(
                scenario_id=scenario.id,
                name=scenario.name,
                emi=run.emi,
                total_interest=run.total_interest,
                total_amount=run.total_amount,
                tenure_months=run.tenure_months,
                emi_score=emi_score,
                interest_score=interest_score,
                tenure_score=tenure_score,
                weighted_score=weighted,
            )
        )

    winner = results[0]
    for result in results[1:]:
        if result.weighted_score > winner.weighted_score:
            winner = result
    logger.debug("Scenario %s wins with score %s", winner.scenario_id, winner.weighted_score)

    return ComparisonResult(
        results=tuple(results),
        winner_id=winner.scenario_id,
        winner_score=winner.weighted_score,
        best_emi_id=_best(results, lambda r: r.emi),
        best_interest_id=_best(results, lambda r: r.total_interest),
        best_tenure_id=_best(results, lambda r: r.tenure_months),
    )


def _best(results: Sequence[ScenarioResult], metric) -> str:
    # min() keeps the first of equal values
    return min(results, key=metric).scenario_id
