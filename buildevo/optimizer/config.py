from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from buildevo.evolution.engine.config import EngineConfig
from buildevo.evolution.generation import GeneratorConfig
from buildevo.evolution.mutation.operator import MutationConfig
from buildevo.objectives.priorities import EVALUATOR_BLEND, GENERATOR_BLEND, PriorityBlend


class OptimizerConfig(BaseModel):
    """All search tunables for one optimizer run."""

    engine: EngineConfig = Field(default_factory=EngineConfig)
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    mutation: MutationConfig = Field(default_factory=MutationConfig)
    evaluator_blend: PriorityBlend = EVALUATOR_BLEND
    generator_blend: PriorityBlend = GENERATOR_BLEND
    model_config = ConfigDict(arbitrary_types_allowed=True)
