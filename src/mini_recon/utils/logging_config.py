"""Logging configuration for the reconciliation tool."""

from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union
import logging

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
)


def _resolve_level(level: Union[int, str]) -> int:
    """Accept either a logging constant or a level name such as "INFO"."""
    if isinstance(level, int):
        return level

    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown logging level: {level}")
    return resolved


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
    log_format: Optional[str] = None,
) -> logging.Logger:
    """
    Configure logging for the ``mini_recon`` package.

    Args:
        level: Logging level, as a constant or a name from the config file
        log_file: Optional path to a rotating log file
        log_format: Optional console format string

    Returns:
        The package root logger
    """
    numeric_level = _resolve_level(level)

    logger = logging.getLogger("mini_recon")
    logger.setLevel(numeric_level)

    # Reconfiguring replaces handlers instead of stacking them
    logger.handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter(log_format or DEFAULT_LOG_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        logger.addHandler(file_handler)

    return logger
