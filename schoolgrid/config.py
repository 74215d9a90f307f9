"""Configuration management for SchoolGrid.

Defaults live next to the package (data/ for the JSON snapshots) and can be
overridden with environment variables or a .env file:

    SCHOOLGRID_DATA_DIR       snapshot directory
    SCHOOLGRID_SUPABASE_URL   backend base URL (https://<project>.supabase.co)
    SCHOOLGRID_SUPABASE_KEY   backend API key
    SCHOOLGRID_TIMEOUT        HTTP timeout in seconds (default 30)
    SCHOOLGRID_LOG_LEVEL      logging level name (default WARNING)

CLI flags override the environment.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "WARNING"


def _default_data_dir() -> Path:
    """
    Return the default snapshot directory inside the package.

    A function instead of a constant so tests can point elsewhere.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data"


class Settings(BaseSettings):
    """Runtime settings, read from SCHOOLGRID_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SCHOOLGRID_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    data_dir: Path = Field(default_factory=_default_data_dir)
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    @field_validator("supabase_url")
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip().rstrip("/")
        return v or None

    @field_validator("supabase_key")
    @classmethod
    def validate_key(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("SCHOOLGRID_TIMEOUT must be a positive number of seconds")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        return v.strip().upper() or DEFAULT_LOG_LEVEL


def load_settings() -> Settings:
    """
    Load settings from the environment.

    Raises pydantic.ValidationError (a ValueError) for invalid values.
    """
    return Settings()


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
