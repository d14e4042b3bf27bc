from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Process-level configuration.

    Generators are configured per instance (see GeneratorConfig); this class
    only covers what is shared by the whole process:
    - environment selection
    - logging behavior
    """

    model_config = SettingsConfigDict(
        env_prefix="NUMGEN_",
        env_file=".env",
        extra="ignore",
    )

    # ---- Environment -------------------------------------------------

    env: Literal["local", "staging", "prod"] = "local"

    # ---- Logging -----------------------------------------------------

    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured log output",
    )


# Singleton settings object
settings = AppSettings()
