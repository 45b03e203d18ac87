"""
Application settings root.

Settings nests one group per concern so callers can depend on just the
slice they need (services take PlanningSettings, the engine takes
DatabaseSettings).

Dependencies: training_erp.configs.*
System role: Configuration entry point
"""

from functools import lru_cache

from training_erp.configs.base import BaseSettings
from training_erp.configs.database import DatabaseSettings
from training_erp.configs.observability import ObservabilitySettings
from training_erp.configs.planning import PlanningSettings


class Settings(BaseSettings):
    database: DatabaseSettings = DatabaseSettings()
    planning: PlanningSettings = PlanningSettings()
    observability: ObservabilitySettings = ObservabilitySettings()


@lru_cache
def get_settings() -> Settings:
    """Process-wide Settings, read from the environment on first call."""
    return Settings()
