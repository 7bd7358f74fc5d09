"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration.

    Values are read from environment variables (or a `.env` file).
    """

    # App
    app_name: str = "Contudo API"
    app_version: str = "1.0.0"
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000"

    # Storage
    data_file: str = "contudo-data.json"
    seed_sample_data: bool = False

    # Scheduling
    enable_scheduler: bool = True
    scheduler_interval_seconds: int = 60
    timezone: str = "UTC"

    # Ledger
    upcoming_window_days: int = 7

    # Performance tuning
    slow_request_log_threshold_ms: int = 0

    @property
    def origins_list(self) -> list[str]:
        """Parse comma-separated ALLOWED_ORIGINS into a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
