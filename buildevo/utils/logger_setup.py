"""
Logging setup for optimizer runs.

Library modules only emit through ``loguru.logger``; sinks are attached here,
once per process, by the command-line runner.
"""

from datetime import datetime, timezone
import os
import sys

from loguru import logger

PLAIN_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{line} | {message}"
COLOR_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<yellow>{line}</yellow> | "
    "<level>{message}</level>"
)


def setup_logger(
    log_dir: str = "logs",
    level: str = "INFO",
    rotation: str = "10 MB",
    retention: str = "14 days",
    enable_colors: bool = True,
    console: bool = True,
) -> str:
    """
    Attach a console sink and a rotating run log to loguru.

    Args:
        log_dir: Directory for the run log (created if missing)
        level: Minimum level for both sinks
        rotation: File rotation policy (e.g., "10 MB", "1 day")
        retention: How long rotated files are kept (e.g., "14 days")
        enable_colors: Colorize console output when stdout is a terminal
        console: Whether to log to stdout at all

    Returns:
        Path to the run log file
    """
    os.makedirs(log_dir, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"optimize_{stamp}.log")

    logger.remove()

    colorize = enable_colors and sys.stdout.isatty()
    if console:
        logger.add(
            sys.stdout,
            level=level,
            format=COLOR_FORMAT if colorize else PLAIN_FORMAT,
            colorize=colorize,
        )
    logger.add(
        log_file,
        level=level,
        format=PLAIN_FORMAT,
        rotation=rotation,
        retention=retention,
        encoding="utf-8",
        backtrace=True,
        diagnose=False,
    )

    logger.debug("[Logger] Ready | level={}, colors={}, file={}", level, colorize, log_file)
    return log_file
