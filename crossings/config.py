"""Crossing Times — Central Configuration via Pydantic Settings."""

import os
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Upstream Feed ──
    feed_url: str = "https://panynj.gov/bin/portauthority/crossingtimesapi.json"
    feed_timeout_seconds: float = 30.0
    feed_timezone: str = "America/New_York"

    # ── Database ──
    database_url: str = ""

    # ── Ingestion ──
    schema_variant: str = "normalized"  # normalized | denormalized
    atomic_commit: bool = True
    upsert_batch_size: int = 500

    # ── App ──
    log_level: str = "INFO"

    @property
    def effective_database_url(self) -> str:
        """Return PostgreSQL URL if set, otherwise fall back to SQLite."""
        if self.database_url:
            return self.database_url
        # Serverless hosts have a read-only filesystem; use /tmp for SQLite
        if os.environ.get("VERCEL") or os.environ.get("AWS_LAMBDA_FUNCTION_NAME"):
            return "sqlite:////tmp/crossings.db"
        return "sqlite:///./crossings.db"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
