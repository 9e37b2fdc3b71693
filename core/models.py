"""Facade re-export for ORM models.

All real model definitions live under core/db_models/.
"""

# flake8: noqa

from core.db import Base

from core.db_models.profile import Profile
from core.db_models.contract import Contract
from core.db_models.job import Job

__all__ = [
    # Base
    "Base",
    # Marketplace
    "Profile",
    "Contract",
    "Job",
]
