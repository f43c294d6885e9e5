from __future__ import annotations

import math

from buildevo.evolution.fitness.rules import (
    TARGET_MODE_RULES,
    WEIGHT_MODE_RULES,
    ScoringRule,
    ScoringSnapshot,
)
from buildevo.objectives.models import Objective
from buildevo.objectives.priorities import EVALUATOR_BLEND, PriorityBlend, PriorityTable
from buildevo.stats.attributes import APTITUDE_NUMBER, Allocation, Attribute, total_points
from buildevo.stats.context import BuildContext

__all__ = ["FitnessEvaluator"]

TARGET_BASE_SCORE = 1000.0
TARGET_MET_BONUS = 50
TARGET_OVERSHOOT_SLACK = 10
BUDGET_SLACK = 5
APTITUDE_AFFECTED_ATTRIBUTES = 11


class FitnessEvaluator:
    """Scores allocations for one build and objective. Higher is better.

    Evaluation is pure: the same allocation always yields the same score, and
    nothing about the evaluator changes between calls.
    """

    def __init__(
        self,
        context: BuildContext,
        objective: Objective,
        priorities: PriorityTable,
        blend: PriorityBlend = EVALUATOR_BLEND,
        weight_rules: tuple[ScoringRule, ...] = WEIGHT_MODE_RULES,
        target_rules: tuple[ScoringRule, ...] = TARGET_MODE_RULES,
    ):
        self.context = context
        self.objective = objective
        self.blended = priorities.blend(blend)
        self.weight_rules = weight_rules
        self.target_rules = target_rules

    def evaluate(self, allocation: Allocation) -> float:
        return sum(self.score_terms(allocation).values())

    def score_terms(self, allocation: Allocation) -> dict[str, float]:
        """Named score components; ``evaluate`` is their sum."""
        snap = ScoringSnapshot(
            context=self.context,
            objective=self.objective,
            allocation=allocation,
            stats=self.context.final_stats(allocation),
        )
        if self.objective.target_mode:
            return self._target_terms(snap)
        return self._weight_terms(snap)

    # ---------- Weight mode ----------
    def _weight_terms(self, snap: ScoringSnapshot) -> dict[str, float]:
        terms = {
            "thresholds": self._threshold_score(snap),
            "priorities": sum(
                points * self.blended[attr] for attr, points in snap.allocation.items()
            ),
        }
        terms.update(self._apply_rules(self.weight_rules, snap))
        final_apt = snap.stats[Attribute.APT]
        terms["aptitude_efficiency"] = (
            math.floor(final_apt / APTITUDE_NUMBER) * APTITUDE_AFFECTED_ATTRIBUTES * 2
        )
        unused = max(0, self.objective.budget - total_points(snap.allocation))
        terms["unused_budget"] = -5 * unused
        return terms

    def _threshold_score(self, snap: ScoringSnapshot) -> float:
        score = 0.0
        for attr, threshold in self.objective.build_type.stat_thresholds.items():
            value = snap.stats[attr]
            if threshold.min is not None:
                if value >= threshold.min:
                    score += 100
                else:
                    score -= (threshold.min - value) * 10
            if threshold.ideal is not None:
                score += max(0.0, 50 - abs(value - threshold.ideal) * 2)
            if threshold.max is not None and value > threshold.max:
                score -= (value - threshold.max) * 5
        return score

    # ---------- Target mode ----------
    def _target_terms(self, snap: ScoringSnapshot) -> dict[str, float]:
        target_score = 0.0
        for attr, target in self.objective.targets.items():
            value = snap.stats[attr]
            if value >= target:
                target_score += TARGET_MET_BONUS
                if value > target + TARGET_OVERSHOOT_SLACK:
                    target_score -= (value - target - TARGET_OVERSHOOT_SLACK) * 2
            else:
                target_score -= (target - value) * 10

        spent = total_points(snap.allocation)
        budget = self.objective.budget
        if spent > budget:
            usage = -50.0 * (spent - budget)
        else:
            usage = 25.0 if budget - spent <= BUDGET_SLACK else 0.0

        terms = {"base": TARGET_BASE_SCORE, "targets": target_score, "budget_usage": usage}
        terms.update(self._apply_rules(self.target_rules, snap))
        return terms

    @staticmethod
    def _apply_rules(rules: tuple[ScoringRule, ...], snap: ScoringSnapshot) -> dict[str, float]:
        return {rule.name: rule.score(snap) for rule in rules if rule.applies(snap)}
