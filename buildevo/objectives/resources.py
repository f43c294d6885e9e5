"""Summon capacity and survivability floors derived from a build."""

from __future__ import annotations

import math

from buildevo.objectives.models import WeightVector
from buildevo.stats.context import BuildContext

SUMMON_CLASSES = ("Summoner", "Grand Summoner", "Shapeshifter", "Bonder")
BASE_YOUKAI = 5
MAX_YOUKAI = 12
FAITH_PER_YOUKAI_SLOT = 14
FAITH_PER_EXTRA_YOUKAI = 5
DEFAULT_MINIMUM_HP = 700
SUSTAINED_FP_TARGET = 120


def minimum_faith_for_youkai(target: float) -> float:
    """Invested faith needed before ``target`` youkai become reachable."""
    if target <= BASE_YOUKAI:
        return 0
    return (target - BASE_YOUKAI) * FAITH_PER_EXTRA_YOUKAI


def youkai_slots(faith: float) -> int:
    return min(MAX_YOUKAI, BASE_YOUKAI + math.floor(faith / FAITH_PER_YOUKAI_SLOT))


def youkai_fp_requirement(context: BuildContext, target: float) -> float:
    """FP a class pair needs to keep ``target`` youkai useful.

    Summoners keep several youkai out at once; the other summon classes lean
    on skills, bonds or installs and need less sustained FP.
    """
    if context.has_class("Summoner"):
        active = min(4, math.ceil(target * 0.4))
        return max(120, active * 30)
    if context.has_class("Shapeshifter"):
        return max(60, target * 5)
    if context.has_class("Grand Summoner"):
        return max(100, target * 15)
    if context.has_class("Bonder"):
        return max(80, target * 10)
    return max(100, target * 20)


def summon_profile_note(context: BuildContext) -> str | None:
    if context.has_class("Summoner"):
        return "Summoner FP: Optimized for multiple active youkai (high sustained FP)"
    if context.has_class("Shapeshifter"):
        return "Shapeshifter FP: Optimized for Install skills (low sustained FP needs)"
    if context.has_class("Grand Summoner"):
        return "Grand Summoner FP: Optimized for youkai skills (moderate FP needs)"
    if context.has_class("Bonder"):
        return "Bonder FP: Optimized for bonds and utility (low-moderate FP needs)"
    return None


def summon_gate_active(weights: WeightVector, context: BuildContext) -> bool:
    """The faith minimum is a hard constraint only for summon classes."""
    return bool(weights.youkai_count) and context.has_class(*SUMMON_CLASSES)


def gated_faith_floor(weights: WeightVector, context: BuildContext) -> int:
    """Allocated-faith floor generators and mutation must respect."""
    if not summon_gate_active(weights, context):
        return 0
    return math.ceil(minimum_faith_for_youkai(weights.youkai_count))


def hp_floor(weights: WeightVector) -> float:
    return weights.minimum_hp or DEFAULT_MINIMUM_HP
