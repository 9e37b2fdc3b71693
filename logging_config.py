"""
Logging configuration for the marketplace ledger.

This module provides a centralized configuration for all loggers in the application.
It allows setting different log levels for different components and configuring
formatters and handlers.
"""

import os
import logging
from typing import Dict


# Component loggers and the env var that overrides each one's level
_COMPONENT_LEVEL_VARS = {
    "services.domain.settlement_service": "LOG_LEVEL_SETTLEMENT",
    "services.domain.deposit_service": "LOG_LEVEL_DEPOSIT",
    "services.domain.reporting_service": "LOG_LEVEL_REPORTING",
    "repositories": "LOG_LEVEL_STORE",
    "marketplace.api": "LOG_LEVEL_API",
}


def configure_logging():
    """Configure logging for the application."""
    log_level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_name, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    loggers_config = {
        name: os.getenv(var, log_level_name).upper()
        for name, var in _COMPONENT_LEVEL_VARS.items()
    }
    # Library loggers - always WARNING to reduce noise
    loggers_config["sqlalchemy.engine"] = os.getenv("LOG_LEVEL_SQL", "WARNING").upper()
    loggers_config["uvicorn.access"] = os.getenv("LOG_LEVEL_ACCESS", "INFO").upper()

    for logger_name, level_name in loggers_config.items():
        logger = logging.getLogger(logger_name)
        logger.setLevel(getattr(logging, level_name, log_level))


def get_logger_levels() -> Dict[str, str]:
    """Get current log levels for all configured loggers."""
    result = {"root": logging.getLevelName(logging.getLogger().level)}
    for logger_name in list(_COMPONENT_LEVEL_VARS) + ["sqlalchemy.engine"]:
        logger = logging.getLogger(logger_name)
        result[logger_name] = logging.getLevelName(logger.level)
    return result
