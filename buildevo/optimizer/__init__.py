from __future__ import annotations

from buildevo.optimizer.api import StatOptimizer, optimize
from buildevo.optimizer.config import OptimizerConfig
from buildevo.optimizer.result import OptimizationResult
