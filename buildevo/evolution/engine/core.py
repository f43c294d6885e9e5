from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from loguru import logger

from buildevo.evolution.engine.config import EngineConfig
from buildevo.evolution.engine.metrics import EngineMetrics
from buildevo.evolution.fitness.evaluator import FitnessEvaluator
from buildevo.evolution.generation import AllocationGenerator
from buildevo.evolution.mutation.operator import MutationOperator
from buildevo.exceptions import EvaluationError
from buildevo.stats.attributes import Allocation, total_points

__all__ = ["Candidate", "EvolutionEngine"]


@dataclass
class Candidate:
    allocation: Allocation
    score: float | None = None

    @property
    def total_points(self) -> int:
        return total_points(self.allocation)

    def copy(self) -> Candidate:
        return Candidate(dict(self.allocation), self.score)


class EvolutionEngine:
    """
    Generational search over allocations:
    - population seeded with one heuristic allocation plus random ones
    - elites survive unchanged, mutations of elites and fresh randoms fill the rest
    - stops at max_generations, after `patience` stale generations, or on request
    """

    def __init__(
        self,
        evaluator: FitnessEvaluator,
        generator: AllocationGenerator,
        mutation_operator: MutationOperator,
        budget: int,
        config: EngineConfig | None = None,
        should_stop: Callable[[], bool] | None = None,
    ):
        self.evaluator = evaluator
        self.generator = generator
        self.mutation_operator = mutation_operator
        self.budget = budget
        self.config = config or EngineConfig()
        self.should_stop = should_stop

        self._stop_requested = False
        self.metrics = EngineMetrics()
        self.best: Candidate | None = None

        logger.info(
            "[EvolutionEngine] Init | population={}, max_generations={}, patience={}, budget={}",
            self.config.population_size,
            self.config.max_generations,
            self.config.patience,
            budget,
        )

    def stop(self) -> None:
        """Request a stop at the next generation boundary."""
        self._stop_requested = True

    def _cancelled(self) -> bool:
        return self._stop_requested or bool(self.should_stop and self.should_stop())

    def run(self) -> Candidate:
        logger.info("[EvolutionEngine] Start")
        population = self._initial_population()
        stale = 0

        for generation in range(self.config.max_generations):
            ranked = self._rank(population)
            improved = self.best is None or ranked[0].score > self.best.score
            if improved:
                self.best = ranked[0].copy()
                stale = 0
            else:
                stale += 1
            self.metrics.record_generation(self.best.score, improved)
            logger.debug(
                "[EvolutionEngine] Gen {} | best={:.2f}, gen_best={:.2f}, stale={}",
                generation,
                self.best.score,
                ranked[0].score,
                stale,
            )

            if stale >= self.config.patience:
                self.metrics.stop_reason = "converged"
                break
            if self._cancelled():
                self.metrics.stop_reason = "cancelled"
                logger.info("[EvolutionEngine] Cancelled after {} generation(s)", generation + 1)
                break
            population = self._next_generation(ranked)
        else:
            self.metrics.stop_reason = "max_generations"

        logger.info(
            "[EvolutionEngine] Stopped | reason={}, generations={}, best={:.2f}",
            self.metrics.stop_reason,
            self.metrics.total_generations,
            self.best.score,
        )
        return self.best.copy()

    def _initial_population(self) -> list[Candidate]:
        population = [Candidate(self.generator.initial(self.budget))]
        while len(population) < self.config.population_size:
            population.append(Candidate(self.generator.random(self.budget)))
        return population

    def _rank(self, population: list[Candidate]) -> list[Candidate]:
        """Score unscored candidates and sort best first (stable)."""
        for candidate in population:
            if candidate.score is None:
                candidate.score = self._evaluate(candidate.allocation)
        return sorted(population, key=lambda c: c.score, reverse=True)

    def _evaluate(self, allocation: Allocation) -> float:
        try:
            score = self.evaluator.evaluate(allocation)
        except Exception as exc:
            raise EvaluationError(f"Evaluation failed: {exc}") from exc
        self.metrics.evaluations += 1
        return score

    def _next_generation(self, ranked: list[Candidate]) -> list[Candidate]:
        elites = [c.copy() for c in ranked[: self.config.elite_count]]
        population = list(elites)

        parents = self.config.parent_selector.create_parent_iterator(elites)
        mutations = 0
        for selected in parents:
            if mutations >= self.config.mutation_count:
                break
            child = self.mutation_operator.mutate(selected[0].allocation)
            population.append(Candidate(child))
            mutations += 1

        randoms = 0
        while len(population) < self.config.population_size:
            population.append(Candidate(self.generator.random(self.budget)))
            randoms += 1

        self.metrics.record_breeding_metrics(mutations, randoms)
        return population
