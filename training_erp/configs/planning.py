"""
Session planning configuration settings.

Controls which deal products produce training sessions, the business
time zone used when rendering timestamps, and resource locking during
session mutations.

Dependencies: pydantic, pydantic_settings
System role: Business rules configuration for session provisioning
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from training_erp.configs.base import BaseSettings


class PlanningSettings(BaseSettings):
    """Session provisioning and scheduling configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PLANNING_",
        case_sensitive=False,
        extra="ignore",
    )

    plannable_prefixes: list[str] = Field(
        default=["form-", "pci-", "ces-", "prev-"],
        description="Product code prefixes that generate training sessions",
    )
    excluded_prefix: str = Field(
        default="ext-",
        description="Product code prefix that never generates sessions",
    )
    time_zone: str = Field(
        default="Europe/Madrid",
        description="Business time zone for rendering and naive input dates",
    )
    lock_resources: bool = Field(
        default=True,
        description="Lock assigned resource rows (SELECT ... FOR UPDATE) before conflict checks",
    )
