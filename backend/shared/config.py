"""
Centralized configuration for the Ledgerly backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings are namespaced by prefix (e.g., SUPABASE_*, CHAT_*).
"""

from functools import lru_cache
from typing import Literal
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Ledgerly API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Persistence
    storage_backend: Literal["memory", "supabase"] = "memory"
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_timeout_seconds: int = 10
    database_url: str = ""  # Direct Postgres URL, used by run_migrations.py only

    # Web tokens. The first secret signs; every listed secret verifies.
    jwt_secrets: list[str] = Field(default_factory=list)
    web_token_ttl_seconds: int = 7 * 24 * 60 * 60

    # Chat relay. Same ordering rule as jwt_secrets.
    chat_relay_secrets: list[str] = Field(default_factory=list)
    bind_request_ttl_minutes: int = 15
    chat_bind_url: str = "http://localhost:5173/chat-bind"

    # Tier enforcement
    approaching_limit_ratio: float = Field(default=0.8, gt=0, le=1)
    default_cycle_start_day: int = Field(default=1, ge=1, le=28)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
