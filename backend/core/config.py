"""
LPAR Inventory — Configuration settings.

Loads from environment variables with sensible defaults.
"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Database
    database_url: str = "sqlite:///./lpar_inventory.db"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False  # echoes SQL when true
    log_level: str = "INFO"

    # Frontend - comma-separated list in .env, e.g. CORS_ORIGINS=http://localhost:5173,http://example.com
    # Default is empty (no cross-origin).
    cors_origins: str = ""

    # Rate limiting for bulk mutations (deploy, clone)
    rate_limit_enabled: bool = True
    mutation_rate_limit: str = "30/minute"

    # Dashboard: warn about current versions whose support ends within this window
    end_of_support_window_days: int = 90

    # List endpoints
    default_page_size: int = 20
    max_page_size: int = 100

    # Optional banner shown by /health, e.g. "staging"
    environment: Optional[str] = None

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
