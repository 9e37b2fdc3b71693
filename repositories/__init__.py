"""
Repository layer for data access abstraction.

This module provides a clean separation between business logic and database operations,
following the Repository pattern for better testability and maintainability.
"""

from repositories.base_repository import BaseRepository, translate_store_errors
from repositories.ledger_repository import (
    LedgerRepository,
    LedgerTransaction,
    PartyTotal,
)

__all__ = [
    "BaseRepository",
    "translate_store_errors",
    "LedgerRepository",
    "LedgerTransaction",
    "PartyTotal",
]
