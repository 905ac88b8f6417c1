"""Event manager settings."""

import logging
import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, field_validator


class EventManagerSettings(BaseModel):
    """Settings for an event manager and its logging."""

    log_level: str = "INFO"
    log_file: Path | None = None
    handler_id_prefix: str = "handler_"

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, value: str | None) -> str:
        """Ensure the level is one the logging module knows."""
        if value is None:
            return "INFO"
        level = str(value).strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("log_file", mode="before")
    @classmethod
    def validate_log_file(cls, value: str | Path | None) -> Path | None:
        if value is None or str(value).strip() == "":
            return None
        return Path(value)

    @field_validator("handler_id_prefix")
    @classmethod
    def validate_handler_id_prefix(cls, value: str) -> str:
        if not value:
            raise ValueError("Handler id prefix cannot be empty")
        return value

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "EventManagerSettings":
        """Build settings from the environment.

        Values from ``env_file`` (or a ``.env`` found from the working
        directory) never override variables already set in the environment.

        Args:
            env_file: Optional path to a dotenv file

        Returns:
            EventManagerSettings: Validated settings
        """
        load_dotenv(dotenv_path=env_file or find_dotenv(usecwd=True), override=False)
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("EVENTMANAGER_LOG_FILE"),
            handler_id_prefix=os.getenv("EVENTMANAGER_HANDLER_ID_PREFIX", "handler_"),
        )
