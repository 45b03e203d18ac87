"""
Shared settings base.

Every settings group reads the same .env file; groups add their own
env_prefix on top of this.

Dependencies: pydantic, pydantic_settings
System role: Foundation for all configuration classes
"""

from pydantic import Field
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Settings common to the whole service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="Training ERP API", description="Service name shown in OpenAPI")
    environment: str = Field(
        default="development",
        description="Deployment environment (development, staging, production)",
    )
    debug: bool = Field(default=False, description="FastAPI debug mode (tracebacks in 500s)")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by CORS (JSON list in the environment)",
    )
