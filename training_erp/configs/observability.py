"""
Observability configuration settings.

Settings for logging output.

Dependencies: pydantic_settings
System role: Observability configuration for logging
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from training_erp.configs.base import BaseSettings


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LOG_",
        case_sensitive=False,
        extra="ignore",
    )

    level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s",
        description="Log record format",
    )
