"""Testing environment configuration."""

import os
from config.base import BaseConfig, DatabaseConfig


class TestingConfig(BaseConfig):
    """Configuration for testing environment."""

    def _setup_environment(self):
        """Setup testing-specific configuration."""
        self.debug = True
        self.environment = "testing"

        # In-memory database unless a test run points somewhere else
        self.database = DatabaseConfig(
            url=os.getenv("TEST_DATABASE_URL", "sqlite://"),
            pool_size=self.database.pool_size,
            max_overflow=self.database.max_overflow,
        )

        # Short timeouts for tests
        self.ledger.store_timeout_seconds = 1.0

        os.environ.setdefault("LOG_LEVEL", "DEBUG")

    def validate(self):
        """Testing-specific validation (very permissive)."""
        errors = []
        if not self.database.url:
            errors.append("Test database url is required")
        return errors
