"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App
    app_name: str = "EcoPermit Administration"
    debug: bool = False
    api_v1_prefix: str = "/v1"
    log_level: str = "INFO"

    # Database
    database_url: str
    database_echo: bool = False

    # Firebase Auth
    firebase_project_id: str
    google_application_credentials: Optional[str] = None

    # CORS
    allowed_origins: str = "http://localhost:5173"

    # Workflow
    initial_assessment_list_limit: int = 100
    approval_outcome: str = "Approved for Next Stage"

    # Fees
    default_processing_days: int = 30

    # Realtime audit trail
    realtime_queue_size: int = 100

    @property
    def cors_origins(self) -> list[str]:
        """Split ALLOWED_ORIGINS into a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
