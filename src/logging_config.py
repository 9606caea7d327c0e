"""
Centralized logging configuration for the scene alignment scripts.

Library modules only call logging.getLogger(__name__); handlers are attached
here by entry points.
Log levels:
    DEBUG: Per-scene detail (pool sizes, cluster counts, anchor updates)
    INFO: Request progress (scenes processed, matches found)
    WARNING: Zero-match scenes that trigger an auto-resync
    ERROR: Per-scene failures, fallback failures

Usage:
    from logging_config import setup_logging

    logger = setup_logging("align_scenes")
    logger.info("Alignment started")
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(
    name: Optional[str] = None,
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    console_output: bool = True
) -> logging.Logger:
    """
    Configure and return a logger instance.

    Pass name=None to configure the root logger so that records from
    alignment.*, library.* and util.* propagate to the same handlers.

    Args:
        name: Logger name, or None for the root logger
        level: Logging level (default: INFO)
        log_file: Optional path to write logs to file
        console_output: Whether to output to console (default: True)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
