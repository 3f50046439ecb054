"""Process settings and logging setup.

WHAT:
    pydantic-settings model for engine-wide defaults (period length and
    historical window) and telemetry configuration.

WHY:
    Account-level knobs live in AccountConfig (funnelscope/schemas.py);
    these are the process defaults the orchestrator falls back to.
"""

import logging
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment or .env."""

    DEFAULT_PERIOD_DAYS: int = 7
    DEFAULT_HISTORICAL_PERIODS: int = 4

    SENTRY_DSN: Optional[str] = None
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()  # type: ignore[call-arg]


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once for CLI/worker entrypoints."""
    logging.basicConfig(
        level=(level or get_settings().LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
