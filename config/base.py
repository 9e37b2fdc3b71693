"""
Base configuration class with all application settings.

Every setting is read from the environment once, when a config object is
built, and grouped into small dataclasses by concern.
"""

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import List


def _get_bool(name: str, default: bool) -> bool:
    """Parse boolean environment variable."""
    val = os.getenv(name)
    if val is None:
        return default
    v = val.strip().lower()
    return v in ("1", "true", "yes", "on")


def _get_int(name: str, default: int) -> int:
    """Parse integer environment variable."""
    try:
        return int(os.getenv(name, str(default)))
    except (ValueError, TypeError):
        return default


def _get_float(name: str, default: float) -> float:
    """Parse float environment variable."""
    try:
        return float(os.getenv(name, str(default)))
    except (ValueError, TypeError):
        return default


def _get_decimal(name: str, default: str) -> Decimal:
    """Parse decimal environment variable (money ratios stay exact)."""
    try:
        return Decimal(os.getenv(name, default).strip())
    except (InvalidOperation, AttributeError):
        return Decimal(default)


@dataclass
class DatabaseConfig:
    """Database connection configuration."""
    url: str = "sqlite:///./database.sqlite3"
    pool_size: int = 20
    max_overflow: int = 40
    echo: bool = False

    @classmethod
    def from_env(cls) -> 'DatabaseConfig':
        return cls(
            url=os.getenv("DATABASE_URL", "sqlite:///./database.sqlite3"),
            pool_size=_get_int("DB_POOL_SIZE", 20),
            max_overflow=_get_int("DB_MAX_OVERFLOW", 40),
            echo=_get_bool("DB_ECHO", False),
        )


@dataclass
class LedgerConfig:
    """Settlement, deposit and reporting rules."""
    deposit_cap_ratio: Decimal = Decimal("1.25")
    store_timeout_seconds: float = 5.0
    best_clients_default_limit: int = 2

    @classmethod
    def from_env(cls) -> 'LedgerConfig':
        return cls(
            deposit_cap_ratio=_get_decimal("DEPOSIT_CAP_RATIO", "1.25"),
            store_timeout_seconds=_get_float("STORE_TIMEOUT_SECONDS", 5.0),
            best_clients_default_limit=_get_int("BEST_CLIENTS_DEFAULT_LIMIT", 2),
        )


@dataclass
class AuthConfig:
    """Caller identification."""
    profile_header: str = "profile_id"

    @classmethod
    def from_env(cls) -> 'AuthConfig':
        return cls(
            profile_header=os.getenv("PROFILE_HEADER", "profile_id").strip().lower(),
        )


class BaseConfig:
    """
    Base configuration class that consolidates all application settings.
    """

    def __init__(self):
        # Core app configuration
        self.app_name: str = "Marketplace Ledger"
        self.app_version: str = "1.0.0"
        self.debug: bool = _get_bool("DEBUG", False)
        self.environment: str = os.getenv("MARKETPLACE_ENV", "development")

        # Configuration groups
        self.database = DatabaseConfig.from_env()
        self.ledger = LedgerConfig.from_env()
        self.auth = AuthConfig.from_env()

        # Initialize environment-specific settings
        self._setup_environment()

    def _setup_environment(self):
        """Setup environment-specific configuration. Override in subclasses."""
        pass

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")

    @property
    def is_testing(self) -> bool:
        return self.environment.lower() in ("testing", "test")

    def validate(self) -> List[str]:
        """
        Validate configuration and return list of validation errors.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if not self.database.url:
            errors.append("DATABASE_URL is required")

        if self.ledger.deposit_cap_ratio <= 0:
            errors.append("DEPOSIT_CAP_RATIO must be positive")

        if self.ledger.store_timeout_seconds <= 0:
            errors.append("STORE_TIMEOUT_SECONDS must be positive")

        if self.ledger.best_clients_default_limit < 1:
            errors.append("BEST_CLIENTS_DEFAULT_LIMIT must be at least 1")

        if not self.auth.profile_header:
            errors.append("PROFILE_HEADER cannot be empty")

        return errors
