"""
Logging utilities for the filesystem tools.

This module provides utilities for setting up logging with rotation.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional


def setup_logging(
    log_dir: Optional[str] = None,
    log_level: int = logging.INFO,
    log_file_name: str = "filesystem.log",
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 10
) -> None:
    """
    Set up console logging and, when a directory is given, a rotating log file.

    Args:
        log_dir: The directory to store log files in, None for console only
        log_level: The logging level (default: logging.INFO)
        log_file_name: The name of the log file (default: "filesystem.log")
        max_bytes: The maximum size of each log file in bytes (default: 10 MB)
        backup_count: The number of backup files to keep (default: 10)
    """
    console_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(message)s"
    )
    # Console output goes to stderr so command output on stdout stays clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(console_formatter)

    handlers = [console_handler]

    log_file = None
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, log_file_name)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))
        handlers.append(file_handler)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove any existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    for handler in handlers:
        root_logger.addHandler(handler)

    logging.debug(f"Logging configured with level {logging.getLevelName(log_level)}")
    if log_file:
        logging.debug(f"Log file: {log_file}")
