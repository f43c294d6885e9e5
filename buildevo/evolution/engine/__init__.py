from __future__ import annotations

from buildevo.evolution.engine.config import EngineConfig
from buildevo.evolution.engine.core import Candidate, EvolutionEngine
from buildevo.evolution.engine.metrics import EngineMetrics
