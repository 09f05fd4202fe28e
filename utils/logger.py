"""Logging configuration for MCP Manager."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from utils import constants


def setup_logging(level: int = logging.INFO, log_file: Optional[Path] = None) -> None:
    """
    Set up logging with rotating file handler.

    Args:
        level: Logging level (default: INFO)
        log_file: Override for the log file location
    """
    log_file = log_file or constants.LOG_FILE
    log_file.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # File handler with rotation (3 files, 1MB each)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=1048576,  # 1MB
        backupCount=3,
        encoding="utf-8"
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    # Console handler for warnings and errors
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.info("=" * 60)
    logging.info(f"{constants.APP_NAME} - Logging initialized")
    logging.info(f"Log file: {log_file}")
    logging.info("=" * 60)


def get_log_folder() -> Path:
    """
    Get the folder holding the log file.

    Returns:
        Path to the storage directory
    """
    return constants.LOG_FILE.parent


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
