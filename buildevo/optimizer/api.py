from __future__ import annotations

import math
from typing import Any, Callable, Mapping

import numpy as np
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from buildevo.catalog.loader import load_catalog
from buildevo.catalog.models import BuildTypeProfile, GameCatalog
from buildevo.evolution.engine.config import EngineConfig
from buildevo.evolution.engine.core import EvolutionEngine
from buildevo.evolution.fitness.evaluator import FitnessEvaluator
from buildevo.evolution.generation import AllocationGenerator
from buildevo.evolution.mutation.operator import AllocationMutationOperator
from buildevo.exceptions import ConfigurationError
from buildevo.objectives.models import OptimizationParams
from buildevo.objectives.priorities import PriorityTable
from buildevo.optimizer.config import OptimizerConfig
from buildevo.optimizer.explain import explain_allocation
from buildevo.optimizer.result import OptimizationResult
from buildevo.stats.context import BuildContext

__all__ = ["StatOptimizer", "optimize"]

RandomSource = np.random.Generator | int | None


class StatOptimizer:
    """One optimization run: resolved build, objective, RNG and search parts.

    Construct a fresh instance per call; nothing here is shared between runs.
    """

    def __init__(
        self,
        build_type: BuildTypeProfile,
        params: OptimizationParams,
        *,
        catalog: GameCatalog | None = None,
        rng: RandomSource = None,
        config: OptimizerConfig | None = None,
        should_stop: Callable[[], bool] | None = None,
    ):
        self.catalog = catalog or load_catalog()
        self.build_type = build_type
        self.params = params
        self.config = config or OptimizerConfig()
        self.rng = np.random.default_rng(rng)

        self.context = BuildContext.from_selection(self.catalog, params)
        self.objective = params.objective(build_type)
        self.priorities = PriorityTable.build(
            self.catalog,
            self.context,
            build_type,
            params.weights,
            base_evade=params.base_evade,
            bonus_evade=params.bonus_evade,
        )
        self.evaluator = FitnessEvaluator(
            self.context, self.objective, self.priorities, blend=self.config.evaluator_blend
        )
        self.generator = AllocationGenerator(
            self.context,
            self.objective,
            self.priorities,
            self.rng,
            config=self.config.generator,
            blend=self.config.generator_blend,
        )
        self.mutation_operator = AllocationMutationOperator(
            self.context, self.objective, self.rng, config=self.config.mutation
        )
        self.engine = EvolutionEngine(
            self.evaluator,
            self.generator,
            self.mutation_operator,
            budget=self.objective.budget,
            config=self.config.engine,
            should_stop=should_stop,
        )

    def stop(self) -> None:
        self.engine.stop()

    def run(self) -> OptimizationResult:
        best = self.engine.run()
        reasoning, warnings = explain_allocation(
            self.context, self.objective, self.params, self.priorities, best.allocation
        )
        final_stats = self.context.final_stats(best.allocation)
        return OptimizationResult(
            build_type=self.build_type.key or self.build_type.name,
            race=self.params.race,
            subrace=self.params.subrace,
            main_class=self.params.main_class,
            sub_class=self.params.sub_class,
            allocation=best.allocation,
            final_stats={attr: math.floor(value) for attr, value in final_stats.items()},
            total_points=best.total_points,
            budget=self.objective.budget,
            score=best.score,
            generations=self.engine.metrics.total_generations,
            stop_reason=self.engine.metrics.stop_reason,
            reasoning=reasoning,
            warnings=warnings,
        )


def _coerce_params(params: OptimizationParams | Mapping[str, Any]) -> OptimizationParams:
    if isinstance(params, OptimizationParams):
        return params
    try:
        return OptimizationParams.model_validate(dict(params))
    except PydanticValidationError as exc:
        raise ConfigurationError(f"Invalid optimization parameters: {exc}") from exc


def optimize(
    build_type: str | BuildTypeProfile,
    params: OptimizationParams | Mapping[str, Any],
    *,
    catalog: GameCatalog | None = None,
    rng: RandomSource = None,
    config: OptimizerConfig | None = None,
    engine_config: EngineConfig | None = None,
    should_stop: Callable[[], bool] | None = None,
) -> OptimizationResult:
    """Search for the best point allocation for a build.

    ``engine_config`` replaces ``config.engine`` when given. Never raises:
    bad keys or internal failures come back as a result with
    ``success=False`` and the reason in ``reasoning``.
    """
    try:
        if engine_config is not None:
            config = (config or OptimizerConfig()).model_copy(update={"engine": engine_config})
        catalog = catalog or load_catalog()
        if not isinstance(build_type, BuildTypeProfile):
            build_type = catalog.build_type(build_type)
        params = _coerce_params(params)
        logger.info(
            "[optimize] {} | {}/{} {}/{} level={} mode={}",
            build_type.name,
            params.race,
            params.subrace,
            params.main_class,
            params.sub_class,
            params.target_level,
            params.mode,
        )
        optimizer = StatOptimizer(
            build_type, params, catalog=catalog, rng=rng, config=config, should_stop=should_stop
        )
        result = optimizer.run()
    except ConfigurationError as exc:
        logger.warning("[optimize] Configuration error: {}", exc)
        return OptimizationResult.failure(f"Configuration error: {exc}")
    except Exception as exc:  # pylint: disable=broad-except
        logger.error("[optimize] Optimization failed: {}", exc)
        return OptimizationResult.failure(f"Optimization failed: {exc}")

    logger.info(
        "[optimize] Done | score={:.2f}, points={}/{}, generations={}",
        result.score,
        result.total_points,
        result.budget,
        result.generations,
    )
    return result
