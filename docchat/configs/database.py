"""
Database configuration settings.

Connection parameters for the document metadata store.

Dependencies: pydantic, pydantic_settings
System role: Database connection configuration for ORM
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from docchat.configs.base import BaseSettings


class DatabaseSettings(BaseSettings):
    """Relational metadata store configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DATABASE_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(
        default="sqlite+aiosqlite:///./docchat.db",
        description="SQLAlchemy async database URL (sqlite+aiosqlite or postgresql+asyncpg)",
    )
    echo_sql: bool = Field(default=False, description="Echo SQL statements to logs")
    create_tables: bool = Field(
        default=True,
        description="Create missing tables at startup",
    )
