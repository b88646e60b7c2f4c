"""
Logging configuration for the thumbnail tester.

Sets up loguru with appropriate levels and formatting.
"""

import sys
from pathlib import Path

from loguru import logger
from typing import Any


def setup_logging(
    level: str = "INFO", debug: bool = False, log_dir: Path | None = None
) -> None:
    """
    Configure loguru logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        debug: If True, enable debug logging and more verbose output
        log_dir: Directory for log files (default: current directory)
    """
    # Remove default handler
    logger.remove()

    log_level = "DEBUG" if debug else level
    log_dir = Path(log_dir) if log_dir is not None else Path(".")

    logger.add(
        sys.stderr,
        level=log_level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}:{function}:{line}</cyan> - <level>{message}</level>",
    )

    # Test creation, deletion and leaderboard rewrites end up here
    logger.add(
        log_dir / "thumbnail_tester.log",
        level="INFO",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        rotation="10 MB",
        retention="7 days",
        compression="zip",
    )

    if debug:
        logger.add(
            log_dir / "thumbnail_tester_debug.log",
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation="50 MB",
            retention="3 days",
            compression="zip",
        )


def get_logger(name: str | None = None) -> Any:
    """
    Get a logger instance.

    Args:
        name: Optional name for the logger (defaults to calling module)

    Returns:
        Logger instance
    """
    if name:
        return logger.bind(name=name)
    return logger
