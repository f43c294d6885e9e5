from __future__ import annotations

from buildevo.objectives.models import (
    Objective,
    OptimizationMode,
    OptimizationParams,
    TargetStatMap,
    WeightVector,
)
from buildevo.objectives.priorities import (
    EVALUATOR_BLEND,
    GENERATOR_BLEND,
    PriorityBlend,
    PriorityTable,
)
