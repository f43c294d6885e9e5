from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from buildevo.exceptions import ConfigurationError
from buildevo.stats.attributes import ATTRIBUTES, Attribute

__all__ = [
    "BuildTypeProfile",
    "ClassEntry",
    "ClassPassiveEntry",
    "GameCatalog",
    "HistoryEntry",
    "LegendExtendEntry",
    "RaceEntry",
    "StatThreshold",
    "SubraceEntry",
]

DEFAULT_CLASS_COMPATIBILITY = 5


def _fill_stats(value: dict | None) -> dict:
    """Complete a partial attribute mapping with zeros."""
    value = dict(value or {})
    for attr in ATTRIBUTES:
        if attr not in value and attr.value not in value:
            value[attr] = 0
    return value


class _StatBlockModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    stats: dict[Attribute, int] = Field(default_factory=dict)

    @field_validator("stats", mode="before")
    @classmethod
    def _complete_stats(cls, value):
        return _fill_stats(value)


class RaceEntry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    homunculi: bool = False


class SubraceEntry(_StatBlockModel):
    allowed_races: list[str] = Field(default_factory=list)
    homunculi: bool = False


class ClassEntry(_StatBlockModel):
    valid_weapons: list[str] = Field(default_factory=list)


class ClassPassiveEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_rank: int = Field(ge=0)
    stats: dict[Attribute, int] = Field(
        default_factory=dict, description="Bonus granted per passive rank"
    )
    description: str = ""


class HistoryEntry(_StatBlockModel):
    description: str = ""


class LegendExtendEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    attribute: Attribute
    name: str


class StatThreshold(BaseModel):
    """Scaled-value goals for one attribute of a build type."""

    model_config = ConfigDict(frozen=True)

    min: float | None = None
    ideal: float | None = None
    max: float | None = None


class BuildTypeProfile(BaseModel):
    """A playstyle archetype: priorities, thresholds and class affinity."""

    model_config = ConfigDict(frozen=True)

    key: str = ""
    name: str
    description: str = ""
    stat_priorities: dict[Attribute, float]
    stat_thresholds: dict[Attribute, StatThreshold] = Field(default_factory=dict)
    weapon_types: list[str] = Field(default_factory=list)
    class_compatibility: dict[str, int] = Field(default_factory=dict)

    @field_validator("stat_priorities", mode="before")
    @classmethod
    def _complete_priorities(cls, value):
        return _fill_stats(value)

    def compatibility(self, class_name: str) -> int:
        return self.class_compatibility.get(class_name, DEFAULT_CLASS_COMPATIBILITY)


class GameCatalog(BaseModel):
    """Read-only game data consumed by the optimizer.

    Every accessor raises ``ConfigurationError`` for keys the catalog does not
    know, so a bad selection fails before the search starts.
    """

    model_config = ConfigDict(frozen=True)

    races: dict[str, RaceEntry]
    subraces: dict[str, SubraceEntry]
    classes: dict[str, ClassEntry]
    class_passives: dict[str, ClassPassiveEntry] = Field(default_factory=dict)
    histories: dict[str, HistoryEntry] = Field(default_factory=dict)
    legend_extends: dict[str, LegendExtendEntry] = Field(default_factory=dict)
    astrology: dict[str, Attribute] = Field(default_factory=dict)
    weapon_scaling: dict[str, list[Attribute]] = Field(default_factory=dict)
    build_types: dict[str, BuildTypeProfile] = Field(default_factory=dict)

    @field_validator("build_types", mode="before")
    @classmethod
    def _stamp_build_type_keys(cls, value):
        if not isinstance(value, dict):
            return value
        return {
            key: ({**entry, "key": key} if isinstance(entry, dict) else entry)
            for key, entry in value.items()
        }

    @staticmethod
    def _lookup(table: dict, key: str, kind: str):
        try:
            return table[key]
        except (KeyError, TypeError):
            raise ConfigurationError(f"Unknown {kind}: {key!r}") from None

    def race(self, key: str) -> RaceEntry:
        return self._lookup(self.races, key, "race")

    def subrace(self, key: str) -> SubraceEntry:
        return self._lookup(self.subraces, key, "subrace")

    def character_class(self, key: str) -> ClassEntry:
        return self._lookup(self.classes, key, "class")

    def class_passive(self, key: str) -> ClassPassiveEntry | None:
        """Passive for ``key``; classes without a stat passive return None."""
        self.character_class(key)
        return self.class_passives.get(key)

    def history(self, key: str | None) -> HistoryEntry:
        return self._lookup(self.histories, key or "None", "history")

    def legend_extend(self, key: str) -> LegendExtendEntry:
        return self._lookup(self.legend_extends, key, "legend extend")

    def astrology_attribute(self, planet: str) -> Attribute:
        return self._lookup(self.astrology, planet, "astrology planet")

    def weapon_scaling_for(self, category: str) -> list[Attribute]:
        return self.weapon_scaling.get(category, [])

    def build_type(self, key: str) -> BuildTypeProfile:
        return self._lookup(self.build_types, key, "build type")
