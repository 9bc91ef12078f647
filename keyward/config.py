"""Keyward configuration management.

Configuration sources (in priority order):
1. Config file (config.yaml), passed as init values
2. Environment variables (KEYWARD_ prefix, ENCRYPTION_SECRET without prefix)
3. .env file
4. Defaults
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Environment variable holding the server-wide HMAC key
ENCRYPTION_SECRET_ENV = "ENCRYPTION_SECRET"


class DatabaseConfig(BaseModel):
    """Database configuration."""

    # SQLite by default; postgresql+asyncpg:// or mysql+asyncmy:// also work
    url: str = "sqlite+aiosqlite:///./keyward.db"
    echo: bool = False


class ApiKeyConfig(BaseModel):
    """API key issuance policy."""

    # Length of generated plaintext keys
    length: int = Field(default=128, gt=0)


class Settings(BaseSettings):
    """Keyward settings."""

    model_config = SettingsConfigDict(
        env_prefix="KEYWARD_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    api_key: ApiKeyConfig = Field(default_factory=ApiKeyConfig)

    # Read from ENCRYPTION_SECRET (no prefix). Emptiness is checked by
    # TokenDigester, not here, so settings can load without it.
    encryption_secret: str = Field(
        default="",
        validation_alias=AliasChoices(ENCRYPTION_SECRET_ENV, "encryption_secret"),
    )


def _load_config_file() -> dict:
    """Load configuration from YAML file if exists.

    Looks for config file in order:
    1. KEYWARD_CONFIG_FILE environment variable
    2. ./config.yaml
    3. /etc/keyward/config.yaml
    """
    import os

    config_paths = [
        os.environ.get("KEYWARD_CONFIG_FILE"),
        Path("config.yaml"),
        Path("/etc/keyward/config.yaml"),
    ]

    for path in config_paths:
        if path is None:
            continue
        path = Path(path)
        if path.exists():
            with open(path) as f:
                return yaml.safe_load(f) or {}

    return {}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings(**_load_config_file())
