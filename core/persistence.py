from __future__ import annotations

import logging as _log
from typing import Optional

from sqlalchemy.engine import Engine  # type: ignore
from sqlalchemy.exc import SQLAlchemyError  # type: ignore

from core.models import Base
from shared.exceptions import StoreUnavailableError

logger = _log.getLogger(__name__)


def init_db(engine: Optional[Engine]) -> bool:
    """Create tables when an engine is configured; return True if ready."""
    if engine is None:
        return False
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as exc:
        raise StoreUnavailableError("init_db", original_exception=exc)
    logger.info("Database ready: %s", engine.url.render_as_string(hide_password=True))
    return True


def reset_db(engine: Engine) -> None:
    """Drop and recreate every marketplace table."""
    try:
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as exc:
        raise StoreUnavailableError("reset_db", original_exception=exc)
