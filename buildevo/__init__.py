"""buildevo – evolutionary stat allocation for character builds."""

from buildevo.optimizer import OptimizationResult, OptimizerConfig, StatOptimizer, optimize
