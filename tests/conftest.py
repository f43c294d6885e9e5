import numpy as np
import pytest

from buildevo.catalog import load_catalog
from buildevo.evolution.engine import EngineConfig
from buildevo.objectives import OptimizationParams, PriorityTable
from buildevo.optimizer import OptimizerConfig
from buildevo.stats.attributes import Attribute, empty_allocation
from buildevo.stats.context import BuildContext


@pytest.fixture(scope="session")
def catalog():
    return load_catalog()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def make_params():
    """Factory for OptimizationParams with a Human soldier as the default build."""
    def _make(**overrides):
        fields = {
            "race": "Human",
            "subrace": "Imperialist",
            "main_class": "Soldier",
            "sub_class": "Kensei",
        }
        fields.update(overrides)
        return OptimizationParams.model_validate(fields)

    return _make


@pytest.fixture
def make_context(catalog, make_params):
    def _make(**overrides):
        return BuildContext.from_selection(catalog, make_params(**overrides))

    return _make


@pytest.fixture
def make_setup(catalog, make_params):
    """Returns (context, objective, priorities) for a build type and params."""
    def _make(build_type="hybrid", **overrides):
        params = make_params(**overrides)
        context = BuildContext.from_selection(catalog, params)
        objective = params.objective(catalog.build_type(build_type))
        priorities = PriorityTable.build(catalog, context, objective.build_type, params.weights)
        return context, objective, priorities

    return _make


@pytest.fixture
def allocation():
    """Factory for a full allocation from a few non-zero attributes."""
    def _make(**points):
        result = empty_allocation()
        for key, value in points.items():
            result[Attribute(key)] = value
        return result

    return _make


@pytest.fixture
def fast_config():
    """Small search so end-to-end tests stay quick."""
    return OptimizerConfig(
        engine=EngineConfig(population_size=12, max_generations=40, patience=10)
    )
