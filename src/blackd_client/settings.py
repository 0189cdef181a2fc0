from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "BLACKD_CLIENT_"


class Settings(BaseSettings):
    """Runtime overrides sourced from ``BLACKD_CLIENT_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")

    config_path: Path | None = None
    host: str | None = None
    port: int | None = None
    connect_timeout_s: float | None = None
    read_timeout_s: float | None = None
    log_file: Path | None = None


def get_settings() -> Settings:
    return Settings()


__all__ = ["ENV_PREFIX", "Settings", "get_settings"]
