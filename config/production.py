"""Production environment configuration."""

import os
from config.base import BaseConfig


class ProductionConfig(BaseConfig):
    """Configuration for production environment."""

    def _setup_environment(self):
        """Setup production-specific configuration."""
        self.debug = False
        self.environment = "production"

        # Production logging
        os.environ.setdefault("LOG_LEVEL", "INFO")

    def validate(self):
        """Production-specific validation (strict)."""
        errors = super().validate()

        if self.database.url.startswith("sqlite"):
            errors.append("SQLite cannot serialize concurrent payments in production")

        if self.ledger.store_timeout_seconds > 30:
            errors.append("STORE_TIMEOUT_SECONDS above 30 would hold request workers too long")

        return errors
