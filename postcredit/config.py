"""POSTCREDIT — Central Configuration via Pydantic Settings."""

import os
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Database ──
    database_url: str = ""

    # ── App ──
    log_level: str = "INFO"
    scheduler_enabled: bool = True
    recompute_hour: int = 3  # Nightly rollup refresh at 3 AM UTC

    # ── Attribution ──
    # Used when a client has no AttributionSettings row
    default_attribution_window_days: int = 7
    default_use_soft_attribution: bool = True
    rollup_schema_version: str = "1.0.0"

    @property
    def effective_database_url(self) -> str:
        """Return PostgreSQL URL if set, otherwise fall back to SQLite."""
        if self.database_url:
            return self.database_url
        if os.environ.get("VERCEL"):
            return "sqlite:////tmp/postcredit.db"
        return "sqlite:///./postcredit.db"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
