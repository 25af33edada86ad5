"""Application settings powered by Pydantic BaseSettings."""

import logging
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    ranker_config_path: Path | None = Field(
        default=None, validation_alias="RANKER_CONFIG_PATH"
    )
    agency_rating_path: Path | None = Field(
        default=None, validation_alias="AGENCY_RATING_PATH"
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    json_logs: bool = Field(default=True, validation_alias="JSON_LOGS")

    def log_level_number(self) -> int:
        """Return the numeric logging level, INFO when unrecognized."""
        levels = {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "ERROR": logging.ERROR,
            "CRITICAL": logging.CRITICAL,
        }
        return levels.get(self.log_level.upper(), logging.INFO)


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
