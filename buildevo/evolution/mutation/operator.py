from __future__ import annotations

from abc import ABC, abstractmethod
import math

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from buildevo.exceptions import MutationError
from buildevo.objectives.models import Objective
from buildevo.objectives.resources import gated_faith_floor
from buildevo.stats.attributes import (
    MAX_POINTS_PER_ATTRIBUTE,
    NON_APTITUDE,
    Allocation,
    Attribute,
    total_points,
)
from buildevo.stats.context import BuildContext

__all__ = ["AllocationMutationOperator", "MutationConfig", "MutationOperator"]


class MutationOperator(ABC):
    """Abstract base class for allocation mutation."""

    @abstractmethod
    def mutate(self, parent: Allocation) -> Allocation:
        """Return a perturbed copy of ``parent`` spending the same total."""


class MutationConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    rate: float = Field(default=0.1, ge=0, le=1, description="Per-attribute mutation probability")
    strength: int = Field(default=3, ge=0, description="Perturbation spans about +/- strength")


class AllocationMutationOperator(MutationOperator):
    """Randomly nudges non-aptitude attributes, then repairs the total.

    Aptitude is never touched, so the aptitude bonus is computed once per
    mutation. Repair removes points where they are worth least and adds them
    where they are worth most, never dropping faith below the summon floor.
    """

    def __init__(
        self,
        context: BuildContext,
        objective: Objective,
        rng: np.random.Generator,
        config: MutationConfig | None = None,
    ):
        self.context = context
        self.rng = rng
        self.config = config or MutationConfig()
        self.faith_floor = gated_faith_floor(objective.weights, context)

    def mutate(self, parent: Allocation) -> Allocation:
        child = dict(parent)
        floors = {attr: 0 for attr in NON_APTITUDE}
        floors[Attribute.FAI] = min(self.faith_floor, parent[Attribute.FAI])

        for attr in NON_APTITUDE:
            if self.rng.random() < self.config.rate:
                change = math.floor((self.rng.random() - 0.5) * self.config.strength * 2)
                child[attr] = max(floors[attr], min(MAX_POINTS_PER_ATTRIBUTE, child[attr] + change))

        apt_bonus = self.context.aptitude_bonus(parent)
        drift = total_points(child) - total_points(parent)
        while drift > 0:
            attr = self._cheapest_to_remove(child, floors, apt_bonus)
            child[attr] -= 1
            drift -= 1
        while drift < 0:
            attr = self._best_to_add(child, apt_bonus)
            child[attr] += 1
            drift += 1
        return child

    def _cheapest_to_remove(
        self, child: Allocation, floors: dict[Attribute, int], apt_bonus: int
    ) -> Attribute:
        reducible = [attr for attr in NON_APTITUDE if child[attr] > floors[attr]]
        if not reducible:
            raise MutationError("No attribute can give back points without breaching a floor")
        return min(
            reducible,
            key=lambda attr: -self.context.marginal_gain(child, attr, apt_bonus, step=-1),
        )

    def _best_to_add(self, child: Allocation, apt_bonus: int) -> Attribute:
        growable = [attr for attr in NON_APTITUDE if child[attr] < MAX_POINTS_PER_ATTRIBUTE]
        if not growable:
            raise MutationError("Every attribute is at the per-attribute cap")
        return max(growable, key=lambda attr: self.context.marginal_gain(child, attr, apt_bonus))
