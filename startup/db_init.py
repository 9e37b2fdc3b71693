from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.engine import Engine  # type: ignore

from core.persistence import init_db

logger = logging.getLogger(__name__)


def ensure_db_ready(engine: Optional[Engine]) -> bool:
    """Create missing tables; False when no database is configured."""
    if engine is None:
        logger.warning("No database engine configured; skipping schema creation")
        return False
    return init_db(engine)
