# busfleet/core/config.py
from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Process configuration, read from the environment (and .env if present).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Storage ---
    STORAGE_BACKEND: Literal["sql", "memory"] = "sql"
    DATABASE_URL: str = "sqlite:///./busfleet.db"
    DATABASE_ECHO: bool = False
    ENABLE_CREATE_ALL: bool = True

    # --- Scheduler (daily expiry scan) ---
    ENABLE_SCHEDULER: bool = True
    APP_TIMEZONE: str = "UTC"
    APP_SCHEDULER_HOUR: int = 6
    APP_SCHEDULER_MINUTE: int = 0

    # --- Bootstrap account ---
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "admin"
    ADMIN_NAME: str = "Administrator"

    # --- Expiry alert delivery (optional; logged only if missing) ---
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASS: Optional[str] = None
    SMTP_TIMEOUT_SEC: int = 20
    ALERT_EMAIL_TO: Optional[str] = None

    LOG_LEVEL: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
