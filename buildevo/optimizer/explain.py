"""Human-readable reasoning and warnings for an optimized allocation.

All numbers shown here are floored scaled values; the search itself works
with fractional ones.
"""

from __future__ import annotations

import math

from buildevo.objectives.models import Objective, OptimizationParams
from buildevo.objectives.priorities import PriorityTable
from buildevo.objectives.resources import (
    DEFAULT_MINIMUM_HP,
    minimum_faith_for_youkai,
    summon_profile_note,
    youkai_fp_requirement,
)
from buildevo.stats.attributes import APTITUDE_NUMBER, ATTRIBUTES, Allocation, Attribute
from buildevo.stats.context import BuildContext

__all__ = ["explain_allocation"]

LOW_COMPATIBILITY = 6
NOTABLE_ALLOCATION = 50
NOTABLE_WEIGHT = 5
FP_GOAL = 200

WEIGHT_LABELS = {
    "summon_survivability": "Summon survivability",
    "critical_focus": "Critical focus",
    "magic_damage_focus": "Magic damage",
    "physical_damage_focus": "Physical damage",
    "accuracy_focus": "Accuracy focus",
    "hp_priority": "HP priority",
    "minimum_hp": "Minimum HP",
    "fp_priority": "FP priority",
    "physical_defense": "Physical defense",
    "magical_defense": "Magical defense",
    "initiative_priority": "Initiative priority",
    "status_resistance": "Status resistance",
    "carry_capacity": "Carry capacity",
    "target_evade": "Target evade value",
    "target_apt": "Target APT",
}


def _fmt(value: float) -> int:
    return math.floor(value)


def _compatibility_warnings(objective: Objective, context: BuildContext) -> list[str]:
    build = objective.build_type
    warnings = []
    for class_name in dict.fromkeys(context.class_names):
        score = build.compatibility(class_name)
        if score < LOW_COMPATIBILITY:
            warnings.append(
                f"{class_name} has low compatibility ({score}/10) with {build.name} builds"
            )
    if "Tank" in build.name and context.subrace == "Lich":
        warnings.append("Lich race has reduced HP which conflicts with tank builds")
    return warnings


def _allocation_notes(
    context: BuildContext, allocation: Allocation, stats: dict[Attribute, float]
) -> list[str]:
    notes = []
    for attr in ATTRIBUTES:
        points = allocation[attr]
        if points <= 0:
            continue
        final = _fmt(stats[attr])
        if attr is Attribute.APT:
            efficient = final % APTITUDE_NUMBER == 0
            notes.append(
                f"APT: {points} points → {final} final "
                f"({final // APTITUDE_NUMBER} bonus to all stats, "
                f"{'efficient' if efficient else 'INEFFICIENT'} allocation)"
            )
        elif points > NOTABLE_ALLOCATION:
            notes.append(
                f"{attr.label}: {points} points → {final} final "
                f"(efficiency: {stats[attr] / points:.2f}, soft cap: {context.soft_cap(attr)})"
            )
    return notes


def _threshold_analysis(
    objective: Objective, stats: dict[Attribute, float]
) -> tuple[list[str], list[str]]:
    reasoning, warnings = [], []
    for attr, threshold in objective.build_type.stat_thresholds.items():
        final = _fmt(stats[attr])
        if threshold.min and final < threshold.min:
            warnings.append(
                f"{attr.label} ({final}) is below minimum threshold ({_fmt(threshold.min)})"
            )
        elif threshold.ideal and final >= threshold.ideal:
            reasoning.append(
                f"{attr.label} meets ideal threshold ({final}/{_fmt(threshold.ideal)})"
            )
        elif threshold.min and final >= threshold.min:
            reasoning.append(
                f"{attr.label} meets minimum requirement ({final}/{_fmt(threshold.min)})"
            )
    return reasoning, warnings


def _target_analysis(
    objective: Objective, stats: dict[Attribute, float]
) -> tuple[list[str], list[str]]:
    reasoning, warnings = [], []
    for attr, target in objective.targets.items():
        final = _fmt(stats[attr])
        if stats[attr] >= target:
            reasoning.append(f"{attr.label} meets target ({final}/{_fmt(target)})")
        else:
            warnings.append(f"{attr.label} ({final}) is below target ({_fmt(target)})")
    return reasoning, warnings


def _weight_analysis(
    context: BuildContext,
    params: OptimizationParams,
    allocation: Allocation,
    stats: dict[Attribute, float],
) -> list[str]:
    weights = params.weights
    reasoning = []

    labels = []
    for name, value in weights.active().items():
        if value <= NOTABLE_WEIGHT:
            continue
        if name == "youkai_count":
            labels.append(
                f"{_fmt(value)} Youkai slots ({_fmt(minimum_faith_for_youkai(value))} Faith min, "
                f"{_fmt(youkai_fp_requirement(context, value))} FP needed)"
            )
        else:
            labels.append(WEIGHT_LABELS.get(name, name))
    if labels:
        reasoning.append(f"Custom preferences: {', '.join(labels)}")
        if weights.youkai_count:
            note = summon_profile_note(context)
            if note:
                reasoning.append(note)

    if weights.minimum_hp:
        hp = _fmt(context.hp(allocation, stats))
        minimum = _fmt(weights.minimum_hp)
        status = "meets" if hp >= minimum else "below"
        reasoning.append(f"HP {status} minimum requirement ({hp}/{minimum})")
    else:
        estimated = _fmt(
            stats[Attribute.VIT] * 10
            + stats[Attribute.SAN] * 2
            + allocation[Attribute.STR] * 3
            + context.custom_hp
        )
        status = "achieved" if estimated >= DEFAULT_MINIMUM_HP else "below target"
        reasoning.append(f"HP Goal: {estimated} HP ({DEFAULT_MINIMUM_HP}+ target {status})")

    if weights.target_apt:
        apt = _fmt(stats[Attribute.APT])
        target = _fmt(weights.target_apt)
        status = "meets" if apt >= target else "below"
        reasoning.append(f"APT {status} target requirement ({apt}/{target})")

    if weights.fp_priority and weights.fp_priority > NOTABLE_WEIGHT:
        fp = _fmt(context.fp(allocation, stats))
        status = "achieved" if fp >= FP_GOAL else "below target"
        reasoning.append(f"FP Goal: {fp} FP ({FP_GOAL}+ target {status})")
    return reasoning


def explain_allocation(
    context: BuildContext,
    objective: Objective,
    params: OptimizationParams,
    priorities: PriorityTable,
    allocation: Allocation,
) -> tuple[list[str], list[str]]:
    """Build the (reasoning, warnings) lists shown next to a result."""
    build = objective.build_type
    stats = context.final_stats(allocation)

    warnings = _compatibility_warnings(objective, context)
    reasoning = [
        f"Build Type: {build.name} - {build.description}",
        f"Optimized for {context.main_class}/{context.sub_class} combination",
    ]
    reasoning.extend(_allocation_notes(context, allocation, stats))

    analysis = _target_analysis if objective.target_mode else _threshold_analysis
    met, missed = analysis(objective, stats)
    reasoning.extend(met)
    warnings.extend(missed)

    apt_bonus = _fmt(stats[Attribute.APT]) // APTITUDE_NUMBER
    if apt_bonus > 0:
        reasoning.append(
            f"APT investment provides +{apt_bonus} to all other stats "
            f"({_fmt(stats[Attribute.APT])}/{APTITUDE_NUMBER} ratio)"
        )

    if params.weights.active():
        reasoning.extend(_weight_analysis(context, params, allocation, stats))

    if params.prioritize_weapon_scaling:
        scaled = [attr.label for attr in ATTRIBUTES if priorities.weapon_scaling[attr] > 0]
        if scaled:
            reasoning.append(f"Weapon scaling prioritized: {', '.join(scaled)}")

    return reasoning, warnings
