from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field, model_validator

from buildevo.evolution.mutation.parent_selector import CyclicParentSelector, ParentSelector


class EngineConfig(BaseModel):
    """Configuration options controlling EvolutionEngine behaviour."""

    population_size: int = Field(default=30, gt=1)
    max_generations: int = Field(default=500, gt=0, description="Hard cap on generations")
    patience: int = Field(
        default=100,
        gt=0,
        description="Stop after this many consecutive generations without improvement",
    )
    elite_fraction: float = Field(default=0.3, gt=0, le=1)
    mutation_fraction: float = Field(default=0.6, ge=0, le=1)
    parent_selector: ParentSelector = Field(default_factory=CyclicParentSelector)
    model_config = ConfigDict(arbitrary_types_allowed=True)

    @model_validator(mode="after")
    def _validate_fractions(self) -> EngineConfig:
        if self.elite_fraction + self.mutation_fraction > 1:
            raise ValueError("elite_fraction + mutation_fraction must not exceed 1")
        if self.elite_count < 1:
            raise ValueError("population_size * elite_fraction must keep at least one elite")
        return self

    @property
    def elite_count(self) -> int:
        return math.floor(self.population_size * self.elite_fraction)

    @property
    def mutation_count(self) -> int:
        return math.floor(self.population_size * self.mutation_fraction)
