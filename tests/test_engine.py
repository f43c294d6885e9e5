import numpy as np
import pydantic
import pytest

from buildevo.evolution.engine import EngineConfig, EvolutionEngine
from buildevo.evolution.fitness import FitnessEvaluator
from buildevo.evolution.generation import AllocationGenerator
from buildevo.evolution.mutation import AllocationMutationOperator
from buildevo.exceptions import EvaluationError, EvolutionError
from buildevo.stats.attributes import total_points


class ConstantEvaluator:
    def __init__(self, score=1.0):
        self.score = score
        self.calls = 0

    def evaluate(self, allocation):
        self.calls += 1
        return self.score


class FailingEvaluator:
    def evaluate(self, allocation):
        raise ValueError("boom")


@pytest.fixture
def make_engine(make_setup):
    def _make(evaluator=None, config=None, should_stop=None, **overrides):
        context, objective, priorities = make_setup(**overrides)
        rng = np.random.default_rng(5)
        return EvolutionEngine(
            evaluator or FitnessEvaluator(context, objective, priorities),
            AllocationGenerator(context, objective, priorities, rng),
            AllocationMutationOperator(context, objective, rng),
            budget=objective.budget,
            config=config or EngineConfig(population_size=10, max_generations=25, patience=8),
            should_stop=should_stop,
        )

    return _make


def test_engine_config_counts():
    config = EngineConfig()
    assert config.elite_count == 9
    assert config.mutation_count == 18


def test_engine_config_rejects_overfull_fractions():
    with pytest.raises(pydantic.ValidationError):
        EngineConfig(elite_fraction=0.5, mutation_fraction=0.6)
    with pytest.raises(pydantic.ValidationError):
        EngineConfig(population_size=3, elite_fraction=0.2)


def test_best_score_never_decreases(make_engine):
    engine = make_engine(weights={"physical_damage_focus": 7})
    best = engine.run()

    history = engine.metrics.best_score_history
    assert history
    assert all(later >= earlier for earlier, later in zip(history, history[1:]))
    assert best.score == history[-1]
    assert total_points(best.allocation) == 240
    assert engine.metrics.stop_reason in {"converged", "max_generations"}


def test_patience_stops_stale_search(make_engine):
    evaluator = ConstantEvaluator()
    engine = make_engine(
        evaluator=evaluator,
        config=EngineConfig(population_size=10, max_generations=100, patience=3),
    )
    engine.run()

    # generation 0 sets the best, generations 1-3 are stale
    assert engine.metrics.stop_reason == "converged"
    assert engine.metrics.total_generations == 4
    assert engine.metrics.improvements == 1


def test_max_generations_caps_search(make_engine):
    engine = make_engine(
        evaluator=ConstantEvaluator(),
        config=EngineConfig(population_size=10, max_generations=3, patience=50),
    )
    engine.run()
    assert engine.metrics.stop_reason == "max_generations"
    assert engine.metrics.total_generations == 3


def test_scores_are_cached_for_surviving_elites(make_engine):
    evaluator = ConstantEvaluator()
    config = EngineConfig(population_size=10, max_generations=2, patience=50)
    engine = make_engine(evaluator=evaluator, config=config)
    engine.run()

    # second generation only scores the 7 new candidates
    assert evaluator.calls == 10 + (10 - config.elite_count)
    assert engine.metrics.evaluations == evaluator.calls


def test_should_stop_cancels_after_first_generation(make_engine):
    engine = make_engine(should_stop=lambda: True)
    best = engine.run()

    assert engine.metrics.stop_reason == "cancelled"
    assert engine.metrics.total_generations == 1
    assert best.score is not None


def test_stop_request_is_honoured(make_engine):
    engine = make_engine()
    engine.stop()
    engine.run()
    assert engine.metrics.stop_reason == "cancelled"


def test_evaluation_failures_are_wrapped(make_engine):
    engine = make_engine(evaluator=FailingEvaluator())
    with pytest.raises(EvaluationError, match="boom") as excinfo:
        engine.run()
    assert isinstance(excinfo.value, EvolutionError)
    assert isinstance(excinfo.value.__cause__, ValueError)
