"""
Database configuration settings.

PostgreSQL connection parameters for the asyncpg-backed SQLAlchemy
engine, including pool sizing and the server-side statement timeout that
bounds how long a session write may wait on resource row locks.

Dependencies: pydantic, pydantic_settings
System role: Database connection configuration for ORM
"""

from typing import Any

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from training_erp.configs.base import BaseSettings


class DatabaseSettings(BaseSettings):
    """PostgreSQL database configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POSTGRES_",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = Field(default="localhost", description="PostgreSQL host")
    port: int = Field(default=5432, description="PostgreSQL port")
    user: str = Field(default="postgres", description="PostgreSQL user")
    password: str = Field(default="postgres", description="PostgreSQL password")
    db: str = Field(default="training_erp", description="PostgreSQL database name")
    sslmode: str = Field(default="prefer", description="'require' enforces TLS")

    pool_size: int = Field(default=10, description="Connection pool size")
    max_overflow: int = Field(default=20, description="Connections allowed above pool_size")
    pool_timeout: int = Field(default=30, description="Seconds to wait for a pooled connection")
    statement_timeout_ms: int = Field(
        default=15000,
        description="Server-side statement timeout; 0 disables it",
    )
    echo_sql: bool = Field(default=False, description="Echo SQL statements to logs")

    @property
    def async_database_url(self) -> str:
        """
        SQLAlchemy URL for the asyncpg driver.

        asyncpg takes "ssl=require" rather than libpq's sslmode.
        """
        ssl_param = "ssl=require" if self.sslmode == "require" else ""
        return (
            f"postgresql+asyncpg://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.db}?{ssl_param}"
        )

    @property
    def connect_args(self) -> dict[str, Any]:
        """asyncpg connect() keyword arguments."""
        if self.statement_timeout_ms <= 0:
            return {}
        return {"server_settings": {"statement_timeout": str(self.statement_timeout_ms)}}
