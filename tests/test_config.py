from pathlib import Path

from hydra import compose, initialize_config_dir
from omegaconf import OmegaConf
import pytest

from buildevo.config.resolvers import register_resolvers
from buildevo.objectives import OptimizationParams
from buildevo.optimizer import OptimizerConfig

CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"


@pytest.fixture(scope="module", autouse=True)
def resolvers():
    register_resolvers()


def _compose(overrides=()):
    with initialize_config_dir(version_base=None, config_dir=str(CONFIG_DIR)):
        return compose(config_name="config", overrides=list(overrides))


def test_budget_resolver():
    cfg = OmegaConf.create({"level": 70, "points": "${budget:${level}}"})
    assert cfg.points == 240


@pytest.mark.parametrize("preset", ["hybrid_soldier", "summoner", "targets"])
def test_param_presets_validate(preset):
    cfg = _compose([f"params={preset}"])
    params = OptimizationParams.model_validate(OmegaConf.to_container(cfg.params, resolve=True))
    assert params.budget == cfg.budget == 240


def test_optimizer_section_validates():
    cfg = _compose(["optimizer.engine.patience=5"])
    config = OptimizerConfig.model_validate(OmegaConf.to_container(cfg.optimizer, resolve=True))
    assert config.engine.patience == 5
    assert config.engine.population_size == 30
    assert config.evaluator_blend.class_synergy == 0.8
