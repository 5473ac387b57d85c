"""
Configuration settings for the forum client.

This module handles environment variable loading and configuration management
using Pydantic for validation and type safety.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Forum client configuration settings.

    All settings can be overridden via environment variables prefixed with
    ``FORUM_`` (for example ``FORUM_API_BASE_URL``).
    """

    # Forum API Configuration
    api_base_url: str = Field(
        default="http://localhost:8080",
        description="Base URL for the forum service API"
    )
    api_timeout: int = Field(
        default=30,
        description="Timeout in seconds for API requests"
    )
    session_header: str = Field(
        default="X-Session-Id",
        description="Header carrying the session identifier on authenticated calls"
    )

    # Feed Settings
    feed_scope: str = Field(
        default="GLOBAL",
        description="Scope query parameter sent with feed requests"
    )
    feed_page_size: int = Field(
        default=25,
        description="Default page size for feed queries"
    )
    community_listing_size: int = Field(
        default=100,
        description="Feed page size used to derive the community list"
    )

    # Session Storage
    session_file: Path = Field(
        default=Path.home() / ".forum_client" / "session.json",
        description="File holding the persisted session record"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="text",
        description="Logging format (json or text)"
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Rotating log file; stderr only when unset"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    model_config = SettingsConfigDict(
        env_prefix="FORUM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Configured settings instance
    """
    return Settings()
