"""
Configuration and settings for the feedback board store.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings (``FEEDBOARD_*`` variables or a .env file)."""

    model_config = SettingsConfigDict(
        env_prefix="FEEDBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    storage_backend: Literal["memory", "sql", "redis", "object"] = Field(default="sql")
    storage_key_prefix: str = Field(default="feedback-board")

    # SQLAlchemy URL; a local SQLite file unless pointed at Postgres.
    database_url: Optional[str] = Field(default="sqlite+pysqlite:///feedback-board.db")

    # Redis
    redis_url: Optional[str] = Field(default=None)

    # S3-compatible object storage
    object_endpoint: Optional[str] = Field(default=None)
    object_region: Optional[str] = Field(default=None)
    object_bucket: Optional[str] = Field(default=None)
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        # logging only accepts upper-case level names.
        return value.strip().upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
