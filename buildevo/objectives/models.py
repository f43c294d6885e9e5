from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator

from buildevo.catalog.models import BuildTypeProfile
from buildevo.stats.attributes import Attribute, budget_for_level
from buildevo.stats.context import BuildSelection

__all__ = [
    "Objective",
    "OptimizationMode",
    "OptimizationParams",
    "TargetStatMap",
    "WeightVector",
]

OptimizationMode = Literal["weights", "targets"]


def _clamp_non_negative(value) -> float:
    """Coerce to a non-negative float; anything unusable becomes 0."""
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if number != number or number < 0:  # NaN or negative
        return 0.0
    return number


class WeightVector(BaseModel):
    """Named preference dimensions.

    Focus weights run 0-10. ``youkai_count``, ``minimum_hp``, ``target_evade``
    and ``target_apt`` are raw targets rather than weights. ``hp_priority`` is
    reported in the reasoning but does not change priorities or scoring;
    use ``minimum_hp`` to steer HP. Unset and zero
    values are both inactive.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    youkai_count: float | None = None
    summon_survivability: float | None = None
    critical_focus: float | None = None
    magic_damage_focus: float | None = None
    physical_damage_focus: float | None = None
    accuracy_focus: float | None = None
    hp_priority: float | None = None
    minimum_hp: float | None = None
    fp_priority: float | None = None
    physical_defense: float | None = None
    magical_defense: float | None = None
    initiative_priority: float | None = None
    status_resistance: float | None = None
    carry_capacity: float | None = None
    target_evade: float | None = None
    target_apt: float | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _clamp(cls, value):
        if value is None:
            return None
        return _clamp_non_negative(value)

    def active(self) -> dict[str, float]:
        """Weights that are set to a positive value, in declaration order."""
        return {
            name: value
            for name, value in self.model_dump().items()
            if value is not None and value > 0
        }


class TargetStatMap(RootModel[dict[Attribute, float]]):
    """Desired final scaled value per attribute; bad values clamp to 0."""

    root: dict[Attribute, float] = Field(default_factory=dict)

    @field_validator("root", mode="before")
    @classmethod
    def _clamp_targets(cls, value):
        if value is None:
            return {}
        return {key: _clamp_non_negative(raw) for key, raw in dict(value).items()}

    def items(self):
        return self.root.items()

    def __contains__(self, attr: object) -> bool:
        return attr in self.root

    def __getitem__(self, attr: Attribute) -> float:
        return self.root[attr]

    def __len__(self) -> int:
        return len(self.root)


class OptimizationParams(BuildSelection):
    """Selection plus objective settings for one ``optimize()`` call."""

    model_config = ConfigDict(extra="forbid")

    target_level: int = Field(default=60, ge=1)
    mode: OptimizationMode = "weights"
    weights: WeightVector = Field(default_factory=WeightVector)
    targets: TargetStatMap = Field(default_factory=TargetStatMap)
    base_evade: float = 0
    bonus_evade: float = 0
    prioritize_weapon_scaling: bool = False

    @property
    def budget(self) -> int:
        return budget_for_level(self.target_level)

    def objective(self, build_type: BuildTypeProfile) -> Objective:
        return Objective(
            build_type=build_type,
            mode=self.mode,
            weights=self.weights,
            targets=self.targets,
            budget=self.budget,
        )


class Objective(BaseModel):
    """What a candidate allocation is scored against during one run."""

    model_config = ConfigDict(frozen=True)

    build_type: BuildTypeProfile
    mode: OptimizationMode = "weights"
    weights: WeightVector = Field(default_factory=WeightVector)
    targets: TargetStatMap = Field(default_factory=TargetStatMap)
    budget: int = Field(ge=0)

    @property
    def target_mode(self) -> bool:
        return self.mode == "targets"

    def ceiling(self, attr: Attribute) -> float | None:
        """Scaled value past which the generator stops investing in ``attr``."""
        if self.target_mode and attr in self.targets:
            return self.targets[attr] + 10
        threshold = self.build_type.stat_thresholds.get(attr)
        return threshold.max if threshold else None
