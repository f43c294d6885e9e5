from __future__ import annotations

from buildevo.stats.attributes import (
    ATTRIBUTES,
    NON_APTITUDE,
    Allocation,
    Attribute,
    budget_for_level,
    empty_allocation,
    total_points,
)
from buildevo.stats.transform import aptitude_bonus, diminishing_returns
