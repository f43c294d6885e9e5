from __future__ import annotations

from buildevo.evolution.mutation.operator import (
    AllocationMutationOperator,
    MutationConfig,
    MutationOperator,
)
from buildevo.evolution.mutation.parent_selector import CyclicParentSelector, ParentSelector
