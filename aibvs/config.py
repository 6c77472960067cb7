"""Application configuration settings."""
from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Runtime toggles -----------------------------------------------------
# Environnement d'exécution: "dev" | "staging" | "prod"
ENV = os.getenv("AIBVS_ENV", "dev").lower()

PLACEHOLDER_SECRET = "change-me"


class Settings(BaseSettings):
    """Environment configuration for the AIBVS console backend."""

    app_env: str = ENV
    database_url: str = "sqlite:///aibvs.db"
    LOG_LEVEL: str = "INFO"

    JWT_SECRET_KEY: str = PLACEHOLDER_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_HOURS: int = 24

    CORS_ALLOW_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    SENTRY_DSN: str | None = None
    PROMETHEUS_ENABLED: bool = True

    # --- Database bootstrap ----------------------------------------------
    ALLOW_DB_CREATE_ALL: bool = True
    SEED_DEFAULTS: bool = True
    DEFAULT_ADMIN_PASSWORD: str = "admin123"
    DEFAULT_ATSEP_PASSWORD: str = "atsep123"

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("JWT_SECRET_KEY")
    @classmethod
    def _strip_secret(cls, value: str) -> str:
        """Normalise blank secrets back to the placeholder so the startup check catches them."""

        cleaned = value.strip()
        return cleaned or PLACEHOLDER_SECRET


class AppInfo(BaseModel):
    name: str = "aibvs-console"
    version: str = "1.0.0"


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()


__all__ = [
    "ENV",
    "PLACEHOLDER_SECRET",
    "Settings",
    "AppInfo",
    "get_settings",
]
