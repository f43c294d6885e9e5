import pytest

from buildevo import OptimizationResult, StatOptimizer, optimize
from buildevo.evolution.engine import EngineConfig
from buildevo.objectives import OptimizationParams
from buildevo.stats.attributes import ATTRIBUTES, MAX_POINTS_PER_ATTRIBUTE, Attribute

SOLDIER = {
    "race": "Human",
    "subrace": "Imperialist",
    "main_class": "Soldier",
    "sub_class": "Kensei",
    "history": "Warrior",
    "astrology": "Mars",
}


def test_weight_mode_run_produces_valid_build(fast_config):
    params = {**SOLDIER, "weights": {"physical_damage_focus": 7, "minimum_hp": 750}}
    result = optimize("hybrid", params, rng=42, config=fast_config)

    assert result.success
    assert result.build_type == "hybrid"
    assert result.total_points == result.budget == 240
    assert all(0 <= points <= MAX_POINTS_PER_ATTRIBUTE for points in result.allocation.values())
    assert set(result.final_stats) == set(ATTRIBUTES)
    assert all(isinstance(value, int) for value in result.final_stats.values())
    assert result.reasoning[0].startswith("Build Type: Balanced Hybrid")
    assert "Optimized for Soldier/Kensei combination" in result.reasoning
    assert 0 < result.generations <= 40


def test_same_seed_same_result(fast_config):
    first = optimize("critical", SOLDIER, rng=3, config=fast_config)
    second = optimize("critical", SOLDIER, rng=3, config=fast_config)
    assert first.allocation == second.allocation
    assert first.score == second.score


def test_target_mode_meets_reachable_targets(fast_config):
    targets = {"ski": 45, "vit": 45, "str": 40}
    params = {
        "race": "Human",
        "subrace": "Imperialist",
        "main_class": "Soldier",
        "sub_class": "Soldier",
        "mode": "targets",
        "targets": targets,
    }
    result = optimize("hybrid", params, rng=11, config=fast_config)

    assert result.success
    for key, target in targets.items():
        assert result.final_stats[Attribute(key)] >= target
    assert not any("below target" in warning for warning in result.warnings)


def test_summoner_meets_faith_gate(fast_config):
    params = {
        "race": "Human",
        "subrace": "Lispoolian",
        "main_class": "Summoner",
        "sub_class": "Summoner",
        "weights": {"youkai_count": 12},
    }
    result = optimize("support", params, rng=8, config=fast_config)

    assert result.success
    assert result.allocation[Attribute.FAI] >= 35
    assert any("Youkai slots" in line for line in result.reasoning)


def test_low_compatibility_is_warned_once(fast_config):
    params = {**SOLDIER, "main_class": "Rogue", "sub_class": "Rogue"}
    result = optimize("tank", params, rng=1, config=fast_config)

    warnings = [w for w in result.warnings if "low compatibility" in w]
    assert warnings == ["Rogue has low compatibility (3/10) with Defense Tank builds"]


def test_unknown_build_type_degrades(fast_config):
    result = optimize("speedrun", SOLDIER, config=fast_config)
    assert isinstance(result, OptimizationResult)
    assert not result.success
    assert result.total_points == 0
    assert "Unknown build type" in result.reasoning[0]


@pytest.mark.parametrize(
    "override",
    [
        {"main_class": "Paladin"},
        {"race": "Kaelensia"},
        {"history": "Pirate"},
        {"favourite_colour": "blue"},
        {"target_level": 0},
    ],
)
def test_bad_params_degrade(fast_config, override):
    result = optimize("hybrid", {**SOLDIER, **override}, config=fast_config)
    assert not result.success
    assert result.reasoning[0].startswith("Configuration error")


def test_stat_optimizer_can_be_cancelled(catalog, fast_config):
    params = OptimizationParams.model_validate(SOLDIER)
    optimizer = StatOptimizer(catalog.build_type("evade"), params, rng=0, config=fast_config)
    optimizer.stop()
    result = optimizer.run()

    assert result.success
    assert result.stop_reason == "cancelled"
    assert result.generations == 1
    assert result.total_points == 240


def test_should_stop_callback_reaches_engine(fast_config):
    result = optimize("evade", SOLDIER, rng=0, config=fast_config, should_stop=lambda: True)
    assert result.stop_reason == "cancelled"


def test_result_allocated_hides_zeroes():
    result = OptimizationResult(allocation={attr: 0 for attr in ATTRIBUTES} | {Attribute.STR: 5})
    assert result.allocated == {Attribute.STR: 5}


def test_engine_config_override():
    result = optimize(
        "hybrid",
        SOLDIER,
        rng=2,
        engine_config=EngineConfig(population_size=6, max_generations=3, patience=10),
    )
    assert result.success
    assert result.generations == 3
    assert result.stop_reason == "max_generations"
