"""Diminishing-returns stat transform shared by every scoring path.

Raw points convert 1:1 into scaled value up to a soft cap of
``baseline + 40`` (raised by percent-bonus sources). Past the cap every
3-point chunk is worth less than the previous one: the multiplier starts at
0.9 and decays by 0.08 per chunk down to a floor of 0.1.

The result stays fractional. Callers floor only when displaying a value.
"""

from __future__ import annotations

import math

from buildevo.stats.attributes import APTITUDE_NUMBER

SOFT_CAP_OFFSET = 40
MONOCLASS_MULTIPLIER = 1.1
PERCENT_BONUS_RATE = 0.05
CHUNK_SIZE = 3
INITIAL_MULTIPLIER = 0.9
MULTIPLIER_DECAY = 0.08
MULTIPLIER_FLOOR = 0.1


def diminishing_returns(
    baseline: float,
    added: float,
    class_contribution: float,
    custom_flat: float,
    aptitude_bonus: float,
    bonus_percent: float = 0,
    monoclass: bool = False,
) -> float:
    """Map raw stat inputs to the effective scaled value.

    Args:
        baseline: Racial (subrace) base value; anchors the soft cap.
        added: Allocated points plus flat bonuses (history, astrology, passives).
        class_contribution: Main + sub class flat bonus.
        custom_flat: Free-form flat bonus outside the racial baseline.
        aptitude_bonus: ``floor(final_aptitude / 6)``; 0 for aptitude itself.
        bonus_percent: Percent-bonus source strength (raises cap and total).
        monoclass: Whether main and sub class are the same class.
    """
    class_multiplier = MONOCLASS_MULTIPLIER if monoclass else 1.0
    soft_cap = baseline + SOFT_CAP_OFFSET + bonus_percent
    total = baseline + added + class_contribution * class_multiplier + custom_flat + aptitude_bonus

    if bonus_percent > 0:
        total += math.floor(total * PERCENT_BONUS_RATE * bonus_percent / 3)

    if total <= soft_cap:
        return total

    effective = soft_cap
    remaining = total - soft_cap
    multiplier = INITIAL_MULTIPLIER
    while remaining > CHUNK_SIZE:
        remaining -= CHUNK_SIZE
        effective += CHUNK_SIZE * multiplier
        multiplier = max(MULTIPLIER_FLOOR, multiplier - MULTIPLIER_DECAY)

    return effective + remaining * multiplier


def aptitude_bonus(final_aptitude: float) -> int:
    """Flat bonus every other attribute receives from aptitude."""
    return max(0, math.floor(final_aptitude / APTITUDE_NUMBER))
