"""Logging setup for the comment canvas server."""

import os
import sys
from pathlib import Path

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level:^7} | {file.name}:{line} | {message}"


def configure_logger(source: str, level: str = None, log_dir: str = None) -> Path:
    """Configure Loguru logging.

    Args:
        source: Name used for the log file, e.g. "server".
        level: Console level; defaults to $LOG_LEVEL or INFO.
        log_dir: Directory for the file sink; defaults to $LOG_DIR or "logs".

    Returns:
        Path pattern of the file sink.
    """
    level = level or os.getenv("LOG_LEVEL", "INFO")
    logs_dir = Path(log_dir or os.getenv("LOG_DIR", "logs"))

    # Clear any previously added handlers
    logger.remove()

    logger.add(sink=sys.stderr, level=level, format=LOG_FORMAT)

    # File handler: DEBUG+, rotated daily, kept 7 days, zipped
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"{source}_{'{time:YYYYMMDD}'}.log"
    logger.add(
        sink=str(log_path),
        level="DEBUG",
        format=LOG_FORMAT,
        rotation="00:00",
        retention="7 days",
        compression="zip",
    )

    logger.info(f"Logger configured for '{source}': stderr ({level}+), file (DEBUG+) at '{log_path}'")
    return log_path
