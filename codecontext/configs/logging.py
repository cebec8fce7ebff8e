"""
CodeContext Logging Configuration

Configures logging based on environment variables:
- CODECONTEXT_DEBUG: Enable debug logging (default: false)
- CODECONTEXT_LOG_FILE: Log file path (default: $CODECONTEXT_DATA_PATH/codecontext.log)
- CODECONTEXT_DATA_PATH: Data directory (default: ~/.codecontext)

stdout carries the MCP stdio transport, so nothing here writes to it.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from codecontext.configs.paths import get_data_path


def setup_logging(
    debug: Optional[bool] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure logging for CodeContext.

    Args:
        debug: Enable debug level. Defaults to CODECONTEXT_DEBUG env var.
        log_file: Log file path. Defaults to CODECONTEXT_LOG_FILE env var,
                  or $CODECONTEXT_DATA_PATH/codecontext.log if not set.

    Returns:
        Root logger for codecontext
    """
    if debug is None:
        debug = os.environ.get("CODECONTEXT_DEBUG", "").lower() in ("true", "1", "yes")
    if log_file is None:
        log_file = os.environ.get("CODECONTEXT_LOG_FILE")
        if not log_file:
            log_file = str(get_data_path() / "codecontext.log")

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    level = logging.DEBUG if debug else logging.INFO

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logger = logging.getLogger("codecontext")
    logger.setLevel(level)
    logger.handlers.clear()

    # stderr only shows warnings when a log file is in use
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    if log_file:
        stderr_handler.setLevel(logging.WARNING)
    else:
        stderr_handler.setLevel(level)
    logger.addHandler(stderr_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        logger.addHandler(file_handler)
        logger.info(f"Logging to file: {log_file}")

    return logger


def get_logger(component: str) -> logging.Logger:
    """
    Get a logger for a specific component.

    Args:
        component: Component name (e.g., "analyzer.builder", "tools", "server")

    Returns:
        Logger instance for the component
    """
    return logging.getLogger(f"codecontext.{component}")
