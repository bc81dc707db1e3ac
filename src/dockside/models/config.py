"""Tool settings."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LABEL_PROJECT = "io.compose-spec.project"
LABEL_SERVICE = "io.compose-spec.service"
LABEL_CONFIG = "io.compose-spec.config"


class DocksideSettings(BaseSettings):
    """Settings read from ``DOCKSIDE_*`` environment variables."""
    model_config = SettingsConfigDict(env_prefix="DOCKSIDE_", extra="ignore")

    log_level: str = Field(default="INFO")
    compose_file: str = Field(default="compose.yaml")
    stop_timeout: int = Field(default=10, ge=0, description="Seconds to wait before killing on stop")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()
