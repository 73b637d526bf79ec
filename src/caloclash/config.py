"""Application configuration."""

import os
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    storage_backend: Literal["memory", "file", "supabase"] = "memory"
    storage_path: Path = Path("caloclash-store.json")
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_table: str = "kv_store"
    key_prefix: str = "caloclash"
    timezone: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_timezone(raw: str | None) -> str | None:
    """Normalize a configured timezone; blank or ``local`` means device time."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if cleaned in {"", "local"}:
        return None
    return cleaned
