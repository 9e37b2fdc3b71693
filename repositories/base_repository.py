"""
Base Repository class providing common database operations.
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar
from sqlalchemy import text
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging

from shared.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

R = TypeVar('R')


@contextmanager
def translate_store_errors(operation: str) -> Iterator[None]:
    """Re-raise any SQLAlchemy failure as StoreUnavailableError."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Store error during {operation}: {e}")
        raise StoreUnavailableError(operation, original_exception=e) from e


class BaseRepository:
    """Base repository class holding an injected session factory."""

    def __init__(self, session_factory, timeout_seconds: float = 5):
        self.session_factory = session_factory
        self.timeout_seconds = timeout_seconds

    def get_session(self) -> Session:
        """Open a new database session."""
        if self.session_factory is None:
            raise StoreUnavailableError("get_session")
        with translate_store_errors("get_session"):
            return self.session_factory()

    def apply_statement_timeout(self, session: Session) -> None:
        """Bound statement time for the current transaction where supported."""
        if session.get_bind().dialect.name == "postgresql":
            # SET does not take bind parameters
            millis = int(self.timeout_seconds * 1000)
            session.execute(text(f"SET LOCAL statement_timeout = {millis}"))

    def execute_query(self, query_func: Callable[..., R], *args, operation: str = None, **kwargs) -> R:
        """Execute a read with session management; store errors propagate."""
        operation = operation or getattr(query_func, "__name__", "query")
        session = self.get_session()
        try:
            with translate_store_errors(operation):
                self.apply_statement_timeout(session)
                return query_func(session, *args, **kwargs)
        finally:
            session.close()
