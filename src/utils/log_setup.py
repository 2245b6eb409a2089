"""Loguru configuration shared by the CLI and the API."""

import sys
from pathlib import Path

from loguru import logger

from src.config import Settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level>"
)
LOG_FILE_PATTERN = "scraper_{time:YYYY-MM-DD}.log"


def setup_logging(
    verbose: bool = False,
    log_dir: str | None = "logs",
    retention_days: int = 30,
) -> None:
    """Configure loguru logging.

    Args:
        verbose: Whether to enable debug logging on stderr
        log_dir: Directory for the rotating debug log, or None to skip it
        retention_days: How long rotated log files are kept
    """
    logger.remove()  # Remove default handler

    log_level = "DEBUG" if verbose else "INFO"
    logger.add(sys.stderr, format=LOG_FORMAT, level=log_level, colorize=True)

    if log_dir:
        logger.add(
            str(Path(log_dir) / LOG_FILE_PATTERN),
            format=LOG_FORMAT,
            level="DEBUG",
            rotation="1 day",
            retention=f"{retention_days} days",
        )


def configure_logging(settings: Settings, verbose: bool = False) -> None:
    """Apply the logging section of Settings; verbose=True forces debug output."""
    setup_logging(
        verbose=verbose or settings.log_verbose,
        log_dir=settings.log_dir,
        retention_days=settings.log_retention_days,
    )
