from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import create_engine  # type: ignore
from sqlalchemy.engine import Engine  # type: ignore
from sqlalchemy.orm import sessionmaker, declarative_base  # type: ignore
from sqlalchemy.pool import StaticPool  # type: ignore


Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def make_engine(
    url: str,
    *,
    timeout_seconds: float = 5,
    pool_size: int = 20,
    max_overflow: int = 40,
    echo: bool = False,
) -> Optional[Engine]:
    """Build an engine for `url`; None when no url is configured.

    `timeout_seconds` bounds how long a caller waits for a connection
    (pool checkout on server databases, lock wait on SQLite).
    """
    if not url:
        return None
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": timeout_seconds}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every session sees an empty db
            return create_engine(
                url,
                echo=echo,
                future=True,
                connect_args=connect_args,
                poolclass=StaticPool,
            )
        return create_engine(url, echo=echo, future=True, connect_args=connect_args)
    # Values are conservative; can be adjusted via env if needed later
    return create_engine(
        url,
        pool_pre_ping=True,
        echo=echo,
        future=True,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=timeout_seconds,
        pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "1800")),
    )


def make_session_factory(engine: Optional[Engine]):
    if engine is None:
        return None
    return sessionmaker(bind=engine, expire_on_commit=False)
