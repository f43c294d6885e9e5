"""Special-case bonus and penalty rules applied on top of the base score.

Each rule is a (predicate, scorer) pair evaluated independently against a
``ScoringSnapshot``. Order only matters for the breakdown a caller sees.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import Callable

from buildevo.objectives.models import Objective
from buildevo.objectives.resources import (
    SUSTAINED_FP_TARGET,
    hp_floor,
    minimum_faith_for_youkai,
    summon_gate_active,
    youkai_fp_requirement,
    youkai_slots,
)
from buildevo.stats.attributes import Allocation, Attribute
from buildevo.stats.context import BuildContext

__all__ = [
    "ScoringRule",
    "ScoringSnapshot",
    "TARGET_MODE_RULES",
    "WEIGHT_MODE_RULES",
]

FAITH_GATE_PENALTY = 500


@dataclass
class ScoringSnapshot:
    """One allocation with its final stats, shared by every rule."""

    context: BuildContext
    objective: Objective
    allocation: Allocation
    stats: dict[Attribute, float] = field(repr=False)

    @cached_property
    def hp(self) -> float:
        return self.context.hp(self.allocation, self.stats)

    @cached_property
    def fp(self) -> float:
        return self.context.fp(self.allocation, self.stats)

    @property
    def weights(self):
        return self.objective.weights

    def faith_gate_met(self) -> bool:
        target = self.weights.youkai_count or 0
        return self.stats[Attribute.FAI] >= minimum_faith_for_youkai(target)


@dataclass(frozen=True)
class ScoringRule:
    name: str
    applies: Callable[[ScoringSnapshot], bool]
    score: Callable[[ScoringSnapshot], float]


def _summon_capacity(snap: ScoringSnapshot) -> float:
    target = snap.weights.youkai_count
    slots = youkai_slots(snap.stats[Attribute.FAI])
    fp_met = snap.fp >= youkai_fp_requirement(snap.context, target)
    faith_met = snap.faith_gate_met()
    if fp_met and faith_met and slots >= target:
        return 50 * target
    shortfall = max(0, target - slots)
    return -(shortfall * 25 + (0 if fp_met else 30) + (0 if faith_met else FAITH_GATE_PENALTY))


def _hp_floor(snap: ScoringSnapshot) -> float:
    return -2 * max(0, hp_floor(snap.weights) - snap.hp)


def _critical_focus(snap: ScoringSnapshot) -> float:
    potential = snap.stats[Attribute.LUC] + snap.stats[Attribute.GUI] * 1.5
    return potential * snap.weights.critical_focus * 0.5


def _accuracy_focus(snap: ScoringSnapshot) -> float:
    return snap.stats[Attribute.SKI] * snap.weights.accuracy_focus * 2


def _fp_priority(snap: ScoringSnapshot) -> float:
    weight = snap.weights.fp_priority
    if snap.fp >= SUSTAINED_FP_TARGET:
        return 75 * weight
    return -(SUSTAINED_FP_TARGET - snap.fp) / 5 * weight


def _faith_gate(snap: ScoringSnapshot) -> float:
    return 0 if snap.faith_gate_met() else -FAITH_GATE_PENALTY


summon_capacity_rule = ScoringRule(
    "summon_capacity",
    lambda snap: summon_gate_active(snap.weights, snap.context),
    _summon_capacity,
)
hp_floor_rule = ScoringRule("hp_floor", lambda snap: True, _hp_floor)
critical_focus_rule = ScoringRule(
    "critical_focus", lambda snap: bool(snap.weights.critical_focus), _critical_focus
)
accuracy_focus_rule = ScoringRule(
    "accuracy_focus", lambda snap: bool(snap.weights.accuracy_focus), _accuracy_focus
)
fp_priority_rule = ScoringRule(
    "fp_priority", lambda snap: bool(snap.weights.fp_priority), _fp_priority
)
# Target mode gates on youkai count alone, whatever the classes.
faith_gate_rule = ScoringRule(
    "faith_gate", lambda snap: bool(snap.weights.youkai_count), _faith_gate
)

WEIGHT_MODE_RULES: tuple[ScoringRule, ...] = (
    summon_capacity_rule,
    hp_floor_rule,
    critical_focus_rule,
    accuracy_focus_rule,
    fp_priority_rule,
)
TARGET_MODE_RULES: tuple[ScoringRule, ...] = (faith_gate_rule, hp_floor_rule)
