from decimal import Decimal

import pytest

from emi_planner.comparison import compare_scenarios, normalized_scores
from emi_planner.data_models import LoanTerms, Scenario
from emi_planner.errors import InvalidInputError


def _terms(principal="5000000", rate="8.5", years=20):
    return LoanTerms(Decimal(principal), Decimal(rate), years, 1, 2025)


def test_identical_scenarios_all_score_100_and_first_wins():
    comparison = compare_scenarios([_terms(), _terms(), _terms()])

    assert [r.scenario_id for r in comparison.results] == ["base", "scenario-1", "scenario-2"]
    for result in comparison.results:
        assert result.emi_score == 100
        assert result.interest_score == 100
        assert result.tenure_score == 100
        assert result.weighted_score == 100
    assert comparison.winner_id == "base"
    assert comparison.winner_score == 100


def test_lower_rate_wins():
    comparison = compare_scenarios([_terms(rate="8.5"), _terms(rate="8")])

    base, cheaper = comparison.results
    assert cheaper.emi < base.emi
    assert cheaper.weighted_score == 100
    assert base.emi_score == 0
    assert base.interest_score == 0
    assert base.tenure_score == 100
    assert base.weighted_score == 20
    assert comparison.winner_id == "scenario-1"
    assert comparison.best_emi_id == "scenario-1"
    assert comparison.best_interest_id == "scenario-1"
    assert comparison.best_tenure_id == "base"


def test_interest_weighs_more_than_emi():
    comparison = compare_scenarios(
        [
            Scenario("long", "20 years", _terms(years=20)),
            Scenario("short", "15 years", _terms(years=15)),
        ]
    )

    long_run, short_run = comparison.results
    assert long_run.tenure_months == 240
    assert short_run.tenure_months == 180
    # long: best EMI only; short: best interest and tenure
    assert long_run.weighted_score == 30
    assert short_run.weighted_score == 70
    assert comparison.winner.name == "15 years"


def test_middle_scenario_scores_between_extremes():
    comparison = compare_scenarios([_terms(rate="9"), _terms(rate="8.5"), _terms(rate="8")])
    scores = [r.weighted_score for r in comparison.results]
    assert scores[0] < scores[1] < scores[2]
    assert comparison.winner_id == "scenario-2"


def test_normalized_scores():
    assert normalized_scores([Decimal(1), Decimal(2), Decimal(3)]) == [100, 50, 0]
    assert normalized_scores([Decimal(7), Decimal(7)]) == [100, 100]


def test_scenario_count_limits():
    with pytest.raises(InvalidInputError):
        compare_scenarios([])
    with pytest.raises(InvalidInputError):
        compare_scenarios([_terms()] * 5)


def test_duplicate_ids_rejected():
    with pytest.raises(InvalidInputError):
        compare_scenarios([Scenario("a", "A", _terms()), Scenario("a", "B", _terms(rate="8"))])


def test_invalid_scenario_terms_rejected():
    with pytest.raises(InvalidInputError):
        compare_scenarios([_terms(), _terms(principal="-1")])
