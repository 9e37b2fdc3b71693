"""Startup orchestration package.

Provides small, testable units for app initialization.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from shared.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def run_startup_tasks(config, engine) -> Dict[str, Any]:
    """
    Validate configuration, then make sure the schema exists.

    Configuration errors abort startup in production and are only
    logged elsewhere.
    """
    # Lazy import to avoid import-time graph issues
    from startup.db_init import ensure_db_ready

    errors = config.validate()
    if errors:
        if config.is_production:
            raise ConfigurationError(errors)
        for error in errors:
            logger.warning(f"Configuration: {error}")

    db_ready = ensure_db_ready(engine)
    logger.info(f"Startup complete (environment={config.environment}, database={db_ready})")
    return {"config_errors": errors, "database": db_ready}
