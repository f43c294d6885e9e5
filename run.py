from datetime import datetime, timezone
import time

import hydra
from hydra.core.hydra_config import HydraConfig
from loguru import logger
from omegaconf import DictConfig, OmegaConf

from buildevo.config.resolvers import register_resolvers
from buildevo.optimizer import OptimizationResult, OptimizerConfig, optimize
from buildevo.utils.logger_setup import setup_logger


def log_result(result: OptimizationResult) -> None:
    if not result.success:
        logger.error("Optimization failed: {}", "; ".join(result.reasoning))
        return

    logger.info(
        "Best allocation: {}/{} points, score {:.2f} after {} generation(s) ({})",
        result.total_points,
        result.budget,
        result.score,
        result.generations,
        result.stop_reason,
    )
    logger.info("  {:<4} {:>6} {:>6}", "STAT", "POINTS", "FINAL")
    for attr, points in result.allocation.items():
        logger.info("  {:<4} {:>6} {:>6}", attr.label, points, result.final_stats[attr])
    logger.info("")

    logger.info("Reasoning:")
    for line in result.reasoning:
        logger.info("  - {}", line)
    if result.warnings:
        logger.info("Warnings:")
        for line in result.warnings:
            logger.warning("  - {}", line)


def run_optimization(cfg: DictConfig) -> OptimizationResult:
    start_time = time.time()
    params = OmegaConf.to_container(cfg.params, resolve=True)
    config = OptimizerConfig.model_validate(
        OmegaConf.to_container(cfg.optimizer, resolve=True)
    )

    logger.info("=" * 80)
    logger.info("buildevo stat optimization")
    logger.info("=" * 80)
    logger.info(f"Build type: {cfg.build_type}")
    logger.info(
        f"Build: {params['race']}/{params['subrace']} "
        f"{params['main_class']}/{params['sub_class']}"
    )
    logger.info(f"Mode: {params.get('mode', 'weights')}, budget: {cfg.budget} points")
    logger.info(f"Seed: {cfg.seed}")
    logger.info(f"Start time: {datetime.now(timezone.utc).isoformat()}")
    logger.info("")

    try:
        result = optimize(cfg.build_type, params, rng=cfg.seed, config=config)
        log_result(result)
        return result
    except KeyboardInterrupt:
        logger.info("Optimization interrupted by user")
        raise
    finally:
        duration = time.time() - start_time
        logger.info(f"Total duration: {duration:.2f} seconds")
        logger.info("=" * 80)


@hydra.main(version_base=None, config_path="config", config_name="config")
def main(cfg: DictConfig) -> None:
    """Optimize one build from the composed Hydra config."""
    log_file_path = setup_logger(
        log_dir=cfg.logging.log_dir,
        level=cfg.logging.level,
        rotation=cfg.logging.rotation,
        retention=cfg.logging.retention,
    )
    logger.info(
        "Run directory: {}",
        HydraConfig.get().runtime.output_dir,
    )
    logger.info(f"Log file: {log_file_path}")
    run_optimization(cfg)


if __name__ == "__main__":
    register_resolvers()
    main()
