from __future__ import annotations

import math

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator

from buildevo.catalog.models import GameCatalog
from buildevo.exceptions import ConfigurationError
from buildevo.stats.attributes import ATTRIBUTES, Allocation, Attribute, total_points
from buildevo.stats.transform import SOFT_CAP_OFFSET, aptitude_bonus, diminishing_returns

__all__ = ["AttributeProfile", "BuildContext", "BuildSelection"]

HP_PER_VIT = 10
HP_PER_SAN = 2
HP_PER_ALLOCATED_STR = 3
FP_PER_WIL = 2
FP_PER_SAN = 1
PERCENT_BONUS_PER_PIECE = 3


def _non_negative_stats(value) -> dict:
    if not value:
        return {}
    cleaned = {}
    for key, raw in dict(value).items():
        try:
            cleaned[key] = max(0, int(raw))
        except (TypeError, ValueError):
            cleaned[key] = 0
    return cleaned


class BuildSelection(BaseModel):
    """The player's race/class/bonus choices, independent of allocation."""

    race: str
    subrace: str
    main_class: str
    sub_class: str
    history: str | None = None
    astrology: str | None = None
    legend_extends: dict[str, bool] = Field(default_factory=dict)
    main_class_passive: int = Field(default=0, ge=0)
    sub_class_passive: int = Field(default=0, ge=0)
    include_custom_stats: bool = False
    custom_stats: dict[Attribute, int] = Field(default_factory=dict)
    custom_base_stats: dict[Attribute, int] = Field(default_factory=dict)
    custom_hp: int = 0
    custom_fp: int = 0
    dragon_king: int = Field(default=0, ge=0, description="Pieces boosting STR")
    dragon_queen: int = Field(default=0, ge=0, description="Pieces boosting WIL")

    @field_validator("custom_stats", "custom_base_stats", mode="before")
    @classmethod
    def _clamp_custom(cls, value):
        return _non_negative_stats(value)


class AttributeProfile(BaseModel):
    """Everything except allocated points that feeds one attribute's transform."""

    model_config = ConfigDict(frozen=True)

    baseline: int = 0
    added: int = 0
    class_value: int = 0
    custom_flat: int = 0
    bonus_percent: int = 0


class BuildContext(BaseModel):
    """Immutable per-run view of a resolved build.

    Aptitude is resolved first and its bonus passed explicitly into every
    other attribute, so one evaluation never recomputes it.
    """

    model_config = ConfigDict(frozen=True)

    race: str
    subrace: str
    main_class: str
    sub_class: str
    profiles: dict[Attribute, AttributeProfile]
    homunculi: bool = False
    custom_hp: int = 0
    custom_fp: int = 0

    @property
    def monoclass(self) -> bool:
        return self.main_class == self.sub_class

    @property
    def class_names(self) -> tuple[str, str]:
        return self.main_class, self.sub_class

    def has_class(self, *names: str) -> bool:
        return self.main_class in names or self.sub_class in names

    @classmethod
    def from_selection(cls, catalog: GameCatalog, selection: BuildSelection) -> BuildContext:
        race = catalog.race(selection.race)
        subrace = catalog.subrace(selection.subrace)
        if subrace.allowed_races and selection.race not in subrace.allowed_races:
            raise ConfigurationError(
                f"Subrace {selection.subrace!r} is not available to race {selection.race!r}"
            )
        main_class = catalog.character_class(selection.main_class)
        sub_class = catalog.character_class(selection.sub_class)
        history = catalog.history(selection.history)

        added = {attr: history.stats.get(attr, 0) for attr in ATTRIBUTES}
        if selection.astrology:
            added[catalog.astrology_attribute(selection.astrology)] += 1
        for key, enabled in selection.legend_extends.items():
            entry = catalog.legend_extend(key)
            if enabled:
                added[entry.attribute] += 1
        for class_name, rank in (
            (selection.main_class, selection.main_class_passive),
            (selection.sub_class, selection.sub_class_passive),
        ):
            passive = catalog.class_passive(class_name)
            if passive is None or rank == 0:
                continue
            rank = min(rank, passive.max_rank)
            for attr, per_rank in passive.stats.items():
                added[attr] += per_rank * rank

        custom = selection.include_custom_stats
        bonus_percent = {
            Attribute.STR: selection.dragon_king * PERCENT_BONUS_PER_PIECE,
            Attribute.WIL: selection.dragon_queen * PERCENT_BONUS_PER_PIECE,
        }
        profiles = {
            attr: AttributeProfile(
                baseline=subrace.stats[attr]
                + (selection.custom_base_stats.get(attr, 0) if custom else 0),
                added=added[attr],
                class_value=main_class.stats[attr] + sub_class.stats[attr],
                custom_flat=selection.custom_stats.get(attr, 0) if custom else 0,
                bonus_percent=bonus_percent.get(attr, 0),
            )
            for attr in ATTRIBUTES
        }
        context = cls(
            race=selection.race,
            subrace=selection.subrace,
            main_class=selection.main_class,
            sub_class=selection.sub_class,
            profiles=profiles,
            homunculi=race.homunculi or subrace.homunculi,
            custom_hp=selection.custom_hp,
            custom_fp=selection.custom_fp,
        )
        logger.debug(
            "[BuildContext] Resolved {}/{} {}/{} | monoclass={}",
            selection.race,
            selection.subrace,
            selection.main_class,
            selection.sub_class,
            context.monoclass,
        )
        return context

    # ---------- Scaled values ----------
    def scaled(self, attr: Attribute, points: int, apt_bonus: int = 0) -> float:
        """Scaled value of ``attr`` with ``points`` allocated to it."""
        profile = self.profiles[attr]
        return diminishing_returns(
            baseline=profile.baseline,
            added=profile.added + points,
            class_contribution=profile.class_value,
            custom_flat=profile.custom_flat,
            aptitude_bonus=0 if attr is Attribute.APT else apt_bonus,
            bonus_percent=profile.bonus_percent,
            monoclass=self.monoclass,
        )

    def final_aptitude(self, allocation: Allocation) -> float:
        return self.scaled(Attribute.APT, allocation[Attribute.APT])

    def aptitude_bonus(self, allocation: Allocation) -> int:
        return aptitude_bonus(self.final_aptitude(allocation))

    def final_stat(
        self, allocation: Allocation, attr: Attribute, apt_bonus: int | None = None
    ) -> float:
        if apt_bonus is None:
            apt_bonus = self.aptitude_bonus(allocation)
        return self.scaled(attr, allocation[attr], apt_bonus)

    def final_stats(self, allocation: Allocation) -> dict[Attribute, float]:
        final_apt = self.final_aptitude(allocation)
        bonus = aptitude_bonus(final_apt)
        stats = {
            attr: self.scaled(attr, allocation[attr], bonus)
            for attr in ATTRIBUTES
            if attr is not Attribute.APT
        }
        stats[Attribute.APT] = final_apt
        return stats

    def marginal_gain(
        self, allocation: Allocation, attr: Attribute, apt_bonus: int, step: int = 1
    ) -> float:
        """Change in ``attr``'s own scaled value when moving ``step`` points."""
        current = allocation[attr]
        return self.scaled(attr, current + step, apt_bonus) - self.scaled(attr, current, apt_bonus)

    def baseline(self, attr: Attribute) -> int:
        return self.profiles[attr].baseline

    def soft_cap(self, attr: Attribute) -> int:
        profile = self.profiles[attr]
        return profile.baseline + SOFT_CAP_OFFSET + profile.bonus_percent

    # ---------- Derived resources ----------
    def hp(self, allocation: Allocation, stats: dict[Attribute, float] | None = None) -> float:
        stats = stats or self.final_stats(allocation)
        vit, san = stats[Attribute.VIT], stats[Attribute.SAN]
        vit_hp = math.floor(vit * HP_PER_VIT)
        if self.homunculi:
            vit_hp -= math.floor(vit / 2)
        return (
            vit_hp
            + math.floor(san * HP_PER_SAN)
            + allocation[Attribute.STR] * HP_PER_ALLOCATED_STR
            + total_points(allocation)
            + self.custom_hp
        )

    def fp(self, allocation: Allocation, stats: dict[Attribute, float] | None = None) -> float:
        stats = stats or self.final_stats(allocation)
        return (
            stats[Attribute.WIL] * FP_PER_WIL
            + stats[Attribute.SAN] * FP_PER_SAN
            + self.custom_fp
        )
