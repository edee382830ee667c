"""
Configuration settings for the Commerce Ledger Backend.

This module handles application configuration using Pydantic settings.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "Commerce Ledger Backend"
    api_version: str = "v1"
    debug: bool = False
    log_level: str = "INFO"

    # Database Configuration (embedded SQLite file)
    database_url: str = "sqlite+aiosqlite:///./commerce_ledger.db"
    db_echo: bool = False
    db_busy_timeout: float = 5.0  # seconds a writer waits for the lock

    # Ledger
    default_currency: str = "DZD"

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
