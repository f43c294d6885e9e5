from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from buildevo.catalog.models import BuildTypeProfile, GameCatalog
from buildevo.objectives.models import WeightVector
from buildevo.objectives.resources import BASE_YOUKAI, minimum_faith_for_youkai
from buildevo.stats.attributes import ATTRIBUTES, Attribute
from buildevo.stats.context import BuildContext

__all__ = [
    "EVALUATOR_BLEND",
    "GENERATOR_BLEND",
    "PriorityBlend",
    "PriorityTable",
    "class_synergy_priorities",
    "custom_weight_priorities",
    "weapon_scaling_priorities",
]

Priorities = dict[Attribute, float]


def _zeros() -> Priorities:
    return {attr: 0.0 for attr in ATTRIBUTES}


def class_synergy_priorities(catalog: GameCatalog, context: BuildContext) -> Priorities:
    """Main class bonuses count double, sub class bonuses once."""
    priorities = _zeros()
    for class_name, factor in ((context.main_class, 2), (context.sub_class, 1)):
        for attr, value in catalog.character_class(class_name).stats.items():
            if value > 0:
                priorities[attr] += value * factor
    return priorities


def weapon_scaling_priorities(catalog: GameCatalog, context: BuildContext) -> Priorities:
    """Ranked scaling attributes of every weapon either class can wield."""
    priorities = _zeros()
    weapons: list[str] = []
    for class_name in context.class_names:
        for weapon in catalog.character_class(class_name).valid_weapons:
            if weapon not in weapons:
                weapons.append(weapon)
    for weapon in weapons:
        scaling = catalog.weapon_scaling_for(weapon)
        for index, attr in enumerate(scaling):
            priorities[attr] += (len(scaling) - index) * 2
    return priorities


def custom_weight_priorities(
    weights: WeightVector, base_evade: float = 0, bonus_evade: float = 0
) -> Priorities:
    priorities = _zeros()
    a = Attribute

    if weights.youkai_count:
        target = weights.youkai_count
        youkai_weight = max(0, target - BASE_YOUKAI) / 7
        faith_bonus = min(1.0, minimum_faith_for_youkai(target) / 35)
        priorities[a.WIL] += youkai_weight * 15
        priorities[a.FAI] += youkai_weight * 25 + faith_bonus * 15

    # (weight name, {attribute: points per full weight of 10})
    scaled_focus = (
        ("summon_survivability", {a.WIL: 8}),
        ("critical_focus", {a.LUC: 15, a.GUI: 12, a.SKI: 8}),
        ("magic_damage_focus", {a.WIL: 18, a.SKI: 10, a.FAI: 6}),
        ("physical_damage_focus", {a.STR: 18, a.SKI: 12, a.GUI: 8}),
        ("accuracy_focus", {a.SKI: 20, a.LUC: 5}),
        ("fp_priority", {a.WIL: 20, a.FAI: 5}),
        ("physical_defense", {a.DEF: 18, a.VIT: 8}),
        ("magical_defense", {a.RES: 18, a.WIL: 6}),
        ("initiative_priority", {a.CEL: 16, a.LUC: 6}),
        ("status_resistance", {a.SAN: 15, a.FAI: 8, a.WIL: 5}),
        ("carry_capacity", {a.STR: 12}),
    )
    for name, contributions in scaled_focus:
        value = getattr(weights, name)
        if not value:
            continue
        for attr, points in contributions.items():
            priorities[attr] += value / 10 * points

    if weights.minimum_hp:
        priorities[a.VIT] += 50
        priorities[a.STR] += 5

    if weights.target_evade:
        cel_needed = max(0, (weights.target_evade - base_evade - bonus_evade) / 2)
        priorities[a.CEL] += min(50, cel_needed)
        priorities[a.LUC] += 10

    if weights.target_apt:
        priorities[a.APT] += 50

    return priorities


class PriorityBlend(BaseModel):
    """Mixing weights for the four priority sources. Opaque tunables."""

    model_config = ConfigDict(frozen=True)

    class_synergy: float = Field(ge=0)
    build_type: float = Field(ge=0)
    weapon_scaling: float = Field(ge=0)
    custom_weight: float = Field(ge=0)


EVALUATOR_BLEND = PriorityBlend(
    class_synergy=0.8, build_type=0.6, weapon_scaling=0.4, custom_weight=0.7
)
GENERATOR_BLEND = PriorityBlend(
    class_synergy=3.5, build_type=2.5, weapon_scaling=1.5, custom_weight=2.0
)


class PriorityTable(BaseModel):
    """Per-attribute priority sources for one build, computed once per run."""

    model_config = ConfigDict(frozen=True)

    class_synergy: Priorities
    build_type: Priorities
    weapon_scaling: Priorities
    custom_weight: Priorities

    @classmethod
    def build(
        cls,
        catalog: GameCatalog,
        context: BuildContext,
        build_type: BuildTypeProfile,
        weights: WeightVector,
        base_evade: float = 0,
        bonus_evade: float = 0,
    ) -> PriorityTable:
        return cls(
            class_synergy=class_synergy_priorities(catalog, context),
            build_type={attr: build_type.stat_priorities.get(attr, 0) for attr in ATTRIBUTES},
            weapon_scaling=weapon_scaling_priorities(catalog, context),
            custom_weight=custom_weight_priorities(weights, base_evade, bonus_evade),
        )

    def blend(self, weights: PriorityBlend) -> Priorities:
        return {
            attr: weights.class_synergy * self.class_synergy[attr]
            + weights.build_type * self.build_type[attr]
            + weights.weapon_scaling * self.weapon_scaling[attr]
            + weights.custom_weight * self.custom_weight[attr]
            for attr in ATTRIBUTES
        }

    def ranked(self, weights: PriorityBlend) -> list[Attribute]:
        """Attributes by blended priority, highest first; ties keep slot order."""
        blended = self.blend(weights)
        return sorted(ATTRIBUTES, key=lambda attr: -blended[attr])
