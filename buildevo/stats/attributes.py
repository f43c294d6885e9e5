from __future__ import annotations

from enum import Enum

from buildevo.exceptions import BudgetViolationError


class Attribute(str, Enum):
    """The twelve allocatable attributes of a character build."""

    STR = "str"
    WIL = "wil"
    SKI = "ski"
    CEL = "cel"
    DEF = "def"
    RES = "res"
    VIT = "vit"
    FAI = "fai"
    LUC = "luc"
    GUI = "gui"
    SAN = "san"
    APT = "apt"

    @property
    def label(self) -> str:
        return self.value.upper()


Allocation = dict[Attribute, int]

ATTRIBUTES: tuple[Attribute, ...] = tuple(Attribute)
NON_APTITUDE: tuple[Attribute, ...] = tuple(a for a in Attribute if a is not Attribute.APT)

POINTS_PER_LEVEL = 4
MAX_BUDGET = 240
MAX_POINTS_PER_ATTRIBUTE = 80
APTITUDE_NUMBER = 6


def empty_allocation() -> Allocation:
    return {attr: 0 for attr in ATTRIBUTES}


def total_points(allocation: Allocation) -> int:
    return sum(allocation.values())


def budget_for_level(level: int) -> int:
    """Points available at ``level``: four per level, capped at 240."""
    return max(0, min(int(level) * POINTS_PER_LEVEL, MAX_BUDGET))


def ensure_within_budget(allocation: Allocation, budget: int) -> Allocation:
    """Raise if ``allocation`` is malformed or spends more than ``budget``."""
    for attr, points in allocation.items():
        if points < 0 or points > MAX_POINTS_PER_ATTRIBUTE:
            raise BudgetViolationError(
                f"{attr.label} holds {points} points (allowed 0..{MAX_POINTS_PER_ATTRIBUTE})"
            )
    spent = total_points(allocation)
    if spent > budget:
        raise BudgetViolationError(f"Allocation spends {spent} points, budget is {budget}")
    return allocation
