"""
Runtime Environment Validation Module

Validates the required environment variables at application startup.
If validation fails, the application refuses to start (hard fail).
"""

import logging
import os
import sys
from typing import Optional

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class ProductionSettings(BaseSettings):
    """
    Strict validation schema for deployment environment variables.

    All required fields MUST be present and valid, or the application will not start.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================================================
    # CRITICAL: Database Configuration
    # ========================================================================
    database_url: str

    # ========================================================================
    # CRITICAL: Firebase Authentication
    # ========================================================================
    firebase_project_id: str
    google_application_credentials: Optional[str] = None

    # ========================================================================
    # CRITICAL: CORS Configuration
    # ========================================================================
    allowed_origins: str

    # ========================================================================
    # Application Configuration
    # ========================================================================
    app_name: str = "EcoPermit Administration"
    debug: bool = False


def _fail(message: str) -> None:
    print(f"❌ FATAL: {message}", file=sys.stderr)
    sys.exit(1)


def validate_environment() -> ProductionSettings:
    """
    Validate all required environment variables at startup.

    Returns:
        ProductionSettings: Validated settings object

    Raises:
        SystemExit: If validation fails (exit code 1)
    """
    try:
        settings = ProductionSettings()
    except ValidationError as e:
        print("❌ FATAL: Environment validation failed", file=sys.stderr)
        print("\nMissing or invalid environment variables:", file=sys.stderr)
        for error in e.errors():
            field = " -> ".join(str(loc) for loc in error["loc"])
            print(f"   • {field}: {error['msg']}", file=sys.stderr)
        print("\nThe application cannot start with invalid configuration.", file=sys.stderr)
        sys.exit(1)

    # 1. CORS: wildcard only allowed in debug
    if not settings.debug:
        origins = [o.strip() for o in settings.allowed_origins.split(",")]
        if "*" in origins:
            _fail("Wildcard CORS origin (*) detected in production mode. Set ALLOWED_ORIGINS to specific domains.")

    # 2. Firebase: credentials path must exist when provided
    if settings.google_application_credentials:
        if not os.path.exists(settings.google_application_credentials):
            _fail(f"Firebase credentials file not found: {settings.google_application_credentials}")

    # 3. Database URL: PostgreSQL outside debug
    if not settings.debug and not settings.database_url.startswith("postgresql"):
        _fail("DATABASE_URL must be a PostgreSQL connection string (postgresql:// or postgresql+asyncpg://)")

    logger.info(
        "Environment validation passed (app=%s, debug=%s, origins=%s)",
        settings.app_name,
        settings.debug,
        settings.allowed_origins,
    )
    return settings


if __name__ == "__main__":
    validate_environment()
    print("\n✅ All environment variables are valid!")
