import pytest

from buildevo.evolution.fitness import FitnessEvaluator, ScoringRule


@pytest.fixture
def make_evaluator(make_setup):
    def _make(build_type="hybrid", **overrides):
        context, objective, priorities = make_setup(build_type, **overrides)
        return FitnessEvaluator(context, objective, priorities)

    return _make


def test_evaluation_is_pure(make_evaluator, allocation):
    evaluator = make_evaluator(weights={"critical_focus": 6, "minimum_hp": 800})
    alloc = allocation(str=40, ski=50, vit=40, luc=30, apt=38)
    snapshot = dict(alloc)

    first = evaluator.evaluate(alloc)
    second = evaluator.evaluate(alloc)

    assert first == second
    assert alloc == snapshot


def test_evaluate_is_sum_of_terms(make_evaluator, allocation):
    evaluator = make_evaluator(weights={"accuracy_focus": 5})
    alloc = allocation(ski=40, vit=30)
    assert evaluator.evaluate(alloc) == pytest.approx(sum(evaluator.score_terms(alloc).values()))


def test_unused_budget_is_penalized(make_evaluator, allocation):
    terms = make_evaluator().score_terms(allocation())
    assert terms["unused_budget"] == -5 * 240


def test_aptitude_efficiency_rewards_breakpoints(make_evaluator, allocation):
    evaluator = make_evaluator()
    # aptitude 4 + 38 = 42 -> bonus 7 to 11 attributes
    assert evaluator.score_terms(allocation(apt=38))["aptitude_efficiency"] == 7 * 11 * 2
    assert evaluator.score_terms(allocation())["aptitude_efficiency"] == 0


def test_hp_floor_uses_requested_minimum(make_evaluator, allocation):
    # vit 4 + Soldier 2 = 6 -> 60 HP with nothing allocated
    explicit = make_evaluator(weights={"minimum_hp": 750}).score_terms(allocation())
    default = make_evaluator().score_terms(allocation())
    assert explicit["hp_floor"] == -2 * (750 - 60)
    assert default["hp_floor"] == -2 * (700 - 60)


def test_meeting_thresholds_beats_missing_them(make_evaluator, allocation):
    evaluator = make_evaluator()
    weak = evaluator.score_terms(allocation())["thresholds"]
    strong = evaluator.score_terms(allocation(str=25, ski=40, vit=25, apt=26))["thresholds"]
    assert strong > weak


def test_faith_gate_is_hard_for_summoners(make_evaluator, allocation):
    evaluator = make_evaluator(
        main_class="Summoner", sub_class="Summoner", weights={"youkai_count": 12}
    )
    met = evaluator.evaluate(allocation(fai=35))
    missed = evaluator.evaluate(allocation(fai=34))

    assert "summon_capacity" in evaluator.score_terms(allocation(fai=35))
    assert met - missed >= 500


def test_summon_rule_skipped_for_other_classes(make_evaluator, allocation):
    evaluator = make_evaluator(weights={"youkai_count": 12})
    assert "summon_capacity" not in evaluator.score_terms(allocation())


def test_target_mode_scores_each_target(make_evaluator, allocation):
    evaluator = make_evaluator(mode="targets", targets={"ski": 10})
    # ski 4 + class 3 = 7 with nothing allocated
    missed = evaluator.score_terms(allocation())
    met = evaluator.score_terms(allocation(ski=3))
    overshot = evaluator.score_terms(allocation(ski=30))

    assert missed["base"] == 1000
    assert missed["targets"] == -30
    assert met["targets"] == 50
    assert overshot["targets"] == 50 - (37 - 20) * 2
    assert met["budget_usage"] == 0


def test_target_mode_rewards_spending_budget(make_evaluator, allocation):
    evaluator = make_evaluator(mode="targets", targets={"ski": 10})
    alloc = allocation(str=60, ski=60, vit=60, luc=57)
    assert evaluator.score_terms(alloc)["budget_usage"] == 25


def test_target_mode_faith_gate_ignores_class(make_evaluator, allocation):
    evaluator = make_evaluator(mode="targets", targets={"ski": 10}, weights={"youkai_count": 12})
    assert evaluator.score_terms(allocation())["faith_gate"] == -500
    assert evaluator.score_terms(allocation(fai=35))["faith_gate"] == 0


def test_custom_rules_can_be_supplied(make_setup, allocation):
    context, objective, priorities = make_setup()
    bonus = ScoringRule("flat_bonus", lambda snap: True, lambda snap: 10.0)
    evaluator = FitnessEvaluator(context, objective, priorities, weight_rules=(bonus,))

    terms = evaluator.score_terms(allocation())
    assert terms["flat_bonus"] == 10.0
    assert "hp_floor" not in terms
