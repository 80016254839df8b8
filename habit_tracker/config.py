"""Application configuration using Pydantic Settings."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # MongoDB (local store)
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "habit_tracker"

    # Remote backend defaults (may be overridden by credentials saved at runtime)
    remote_url: Optional[str] = None
    remote_api_key: Optional[str] = None
    remote_timeout_seconds: float = 15.0

    # Connectivity probe; unset means assume online
    connectivity_check_url: Optional[str] = None
    connectivity_timeout_seconds: float = 3.0

    # Sync
    sync_debounce_seconds: float = 3.0
    initial_sync_delay_seconds: float = 3.0
    sync_push_batch_size: int = 50
    sync_pull_limit: int = 1000

    # PIN hashing
    pin_salt: str = "HabitTracker_PIN_Salt_v1"

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False

    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:8000"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]


settings = Settings()
