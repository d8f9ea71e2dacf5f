"""Configuration models for ClipLink."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cliplink.sync.facade import DEFAULT_WELCOME_TEXT
from cliplink.sync.models import DEFAULT_PAGE_SIZE, MAX_CHANNEL_ID_LENGTH, MAX_FAVORITES_LIMIT, MAX_PAGE_SIZE

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=1, le=65535)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class DatabaseConfig(BaseModel):
    """Storage configuration. Empty url means the default SQLite file."""

    url: str = Field(default="", description="sqlite:// or postgresql:// URL.")
    echo: bool = Field(default=False)
    create_schema: bool = Field(default=True, description="Create missing tables on startup.")


class SyncConfig(BaseModel):
    """Synchronization limits and seed data."""

    default_page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    max_page_size: int = Field(default=MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    max_channel_id_length: int = Field(default=MAX_CHANNEL_ID_LENGTH, ge=1, le=MAX_CHANNEL_ID_LENGTH)
    max_favorites_limit: int = Field(default=MAX_FAVORITES_LIMIT, ge=1, le=MAX_FAVORITES_LIMIT)
    seed_welcome_item: bool = Field(default=False)
    welcome_text: str = Field(default=DEFAULT_WELCOME_TEXT, min_length=1)


class LoggingConfig(BaseModel):
    """Log output configuration."""

    level: str = Field(default="INFO")

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in LOG_LEVELS:
            raise ValueError(f"level must be one of {', '.join(LOG_LEVELS)}")
        return normalized


class ClipLinkConfig(BaseSettings):
    """Root configuration model for ClipLink."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="CLIPLINK_",
        env_nested_delimiter="__",
        extra="ignore",
    )
