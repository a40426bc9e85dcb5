"""
Application configuration using Pydantic settings.
"""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # App
    app_name: str = "Cadence"
    log_level: str = "info"

    # Database
    database_url: str = "sqlite:///./data/db.sqlite"

    # Recurring detection
    detection_lookback_days: int = 365  # Trailing window fed to the detector
    whole_group_min_confidence: float = 0.7
    existing_match_amount_tolerance: Decimal = Decimal("5.00")

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    frontend_url: str = "http://localhost:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
