from __future__ import annotations

from buildevo.evolution.fitness.evaluator import FitnessEvaluator
from buildevo.evolution.fitness.rules import (
    TARGET_MODE_RULES,
    WEIGHT_MODE_RULES,
    ScoringRule,
    ScoringSnapshot,
)
