import pytest

from buildevo.catalog import load_catalog_from
from buildevo.catalog.loader import DATA_DIR, read_catalog_data
from buildevo.exceptions import ConfigurationError
from buildevo.stats.attributes import ATTRIBUTES, Attribute


def test_packaged_catalog_has_every_build_type(catalog):
    assert set(catalog.build_types) == {
        "evade", "tank", "glass_cannon", "hybrid", "support", "critical",
    }
    hybrid = catalog.build_type("hybrid")
    assert hybrid.key == "hybrid"
    assert hybrid.name == "Balanced Hybrid"
    assert set(hybrid.stat_priorities) == set(ATTRIBUTES)


def test_subrace_stats_are_complete(catalog):
    imperialist = catalog.subrace("Imperialist")
    assert imperialist.stats[Attribute.STR] == 4
    assert imperialist.stats[Attribute.FAI] == 0
    assert set(imperialist.stats) == set(ATTRIBUTES)
    assert imperialist.allowed_races == ["Human"]


def test_class_compatibility_defaults_to_five(catalog):
    tank = catalog.build_type("tank")
    assert tank.compatibility("Soldier") == 10
    assert tank.compatibility("Nonexistent") == 5


@pytest.mark.parametrize(
    "accessor, key",
    [
        ("race", "Dwarf"),
        ("subrace", "Highlander"),
        ("character_class", "Paladin"),
        ("history", "Pirate"),
        ("legend_extend", "Unknown"),
        ("astrology_attribute", "Pluto"),
        ("build_type", "speedrun"),
    ],
)
def test_unknown_keys_raise_configuration_error(catalog, accessor, key):
    with pytest.raises(ConfigurationError):
        getattr(catalog, accessor)(key)


def test_lookups_for_optional_sources(catalog):
    assert catalog.history(None).stats[Attribute.STR] == 0
    assert catalog.astrology_attribute("Mars") is Attribute.STR
    assert catalog.legend_extend("Holymr").attribute is Attribute.FAI
    assert catalog.class_passive("Soldier") is None
    assert catalog.class_passive("Kensei").max_rank == 3
    assert catalog.weapon_scaling_for("Unknown weapon") == []


def test_missing_catalog_file_is_reported(tmp_path):
    with pytest.raises(ConfigurationError, match="Missing catalog file"):
        load_catalog_from(tmp_path)


def test_duplicate_sections_are_rejected(tmp_path):
    for name in ("races.yaml", "classes.yaml", "bonuses.yaml", "build_types.yaml"):
        (tmp_path / name).write_text((DATA_DIR / name).read_text(encoding="utf-8"), encoding="utf-8")
    (tmp_path / "bonuses.yaml").write_text("races: {}\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="redefines"):
        read_catalog_data(tmp_path)


def test_invalid_catalog_data_is_wrapped(tmp_path):
    for name in ("races.yaml", "classes.yaml", "bonuses.yaml", "build_types.yaml"):
        (tmp_path / name).write_text((DATA_DIR / name).read_text(encoding="utf-8"), encoding="utf-8")
    (tmp_path / "races.yaml").write_text(
        "races: {Human: {}}\nsubraces: {Broken: {stats: {str: not-a-number}}}\n",
        encoding="utf-8",
    )

    with pytest.raises(ConfigurationError, match="Invalid catalog data"):
        load_catalog_from(tmp_path)


def test_unknown_race_flags_are_rejected(tmp_path):
    for name in ("classes.yaml", "bonuses.yaml", "build_types.yaml"):
        (tmp_path / name).write_text((DATA_DIR / name).read_text(encoding="utf-8"), encoding="utf-8")
    races = (DATA_DIR / "races.yaml").read_text(encoding="utf-8")
    (tmp_path / "races.yaml").write_text(
        races.replace("Human: {}", "Human: {human: true}"), encoding="utf-8"
    )

    with pytest.raises(ConfigurationError, match="Invalid catalog data"):
        load_catalog_from(tmp_path)
