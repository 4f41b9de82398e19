"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

BackendKind = Literal["sqlite", "supabase"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    admin_secret: str
    session_secret: str
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    storage_bucket: str = "site-data"
    database_path: str = "data/customers.db"
    data_dir: str = "data"
    uploads_dir: str = "uploads"
    read_only_filesystem: bool = False
    session_max_age_days: int = 7
    cookie_secure: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def supabase_configured(self) -> bool:
        """Return true when both the Supabase URL and service key are set."""
        return bool(self.supabase_url and self.supabase_service_key)


def select_backend(settings: Settings) -> BackendKind:
    """Pick the persistence backend from configuration presence."""
    if settings.supabase_url and settings.supabase_url.strip():
        return "supabase"
    return "sqlite"
