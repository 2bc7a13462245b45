"""Structured logging setup using loguru."""
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger as _logger

if TYPE_CHECKING:
    from .config import LoggingConfig

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def setup_logging(
    log_file: str = "bitstamp.log",
    level: str = "INFO",
    enable_console: bool = True,
    json_file: bool = False,
) -> None:
    """Configure logging for the Bitstamp client.

    Args:
        log_file: Path to log file, rotated at 100 MB and kept for 7 days
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_console: Also log to stdout
        json_file: Write the file sink as one JSON record per line
    """
    _logger.remove()

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    _logger.add(
        str(log_path),
        format=LOG_FORMAT,
        level=level,
        rotation="100 MB",
        retention="7 days",
        serialize=json_file,
    )

    if enable_console:
        _logger.add(sys.stdout, format=LOG_FORMAT, level=level, colorize=True)


def setup_logging_from_config(config: "LoggingConfig", enable_console: bool = True) -> None:
    setup_logging(log_file=config.log_file, level=config.log_level, enable_console=enable_console)


# Shared logger for the package modules
logger = _logger
