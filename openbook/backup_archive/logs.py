"""
Logging setup for applications embedding the backup archive core.

Library modules only create module loggers and attach context through
``extra``; handlers are installed once, by the application, through
setup_logging().
"""

from __future__ import annotations

import logging

import json_log_formatter

from .config import BackupConfig


def setup_logging(config: BackupConfig) -> None:
    """Configure logging based on configuration.

    Args:
        config: Backup configuration
    """
    level = getattr(logging, config.observability.log_level.upper(), logging.INFO)

    if config.observability.log_format == "json":
        formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]
