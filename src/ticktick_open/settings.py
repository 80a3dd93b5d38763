"""
Configuration for the TickTick Open API client.

Values are read from ``TICKTICK_*`` environment variables and an optional
``.env`` file in the working directory:

    TICKTICK_CLIENT_ID
    TICKTICK_CLIENT_SECRET
    TICKTICK_REDIRECT_URI
    TICKTICK_ACCESS_TOKEN
    TICKTICK_TIMEOUT
    TICKTICK_REDIRECT_TIMEOUT
    TICKTICK_LOG_LEVEL
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ticktick_open.constants import (
    DEFAULT_REDIRECT_TIMEOUT,
    DEFAULT_REDIRECT_URI,
    DEFAULT_TIMEOUT,
)
from ticktick_open.exceptions import TickTickConfigurationError


class TickTickSettings(BaseSettings):
    """Client and OAuth2 settings."""

    model_config = SettingsConfigDict(
        env_prefix="TICKTICK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    client_id: str | None = None
    client_secret: SecretStr | None = None
    redirect_uri: str = DEFAULT_REDIRECT_URI
    access_token: SecretStr | None = None

    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    redirect_timeout: float = Field(default=DEFAULT_REDIRECT_TIMEOUT, gt=0)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"Unknown log level {value!r}")
        return value


_settings: TickTickSettings | None = None


def _load(**overrides: Any) -> TickTickSettings:
    try:
        return TickTickSettings(**overrides)
    except ValidationError as e:
        raise TickTickConfigurationError(f"Invalid TICKTICK_* settings: {e}") from e


def get_settings() -> TickTickSettings:
    """
    Get the process-wide settings, loading them on first use.

    Raises:
        TickTickConfigurationError: If a TICKTICK_* value is invalid
    """
    global _settings
    if _settings is None:
        _settings = _load()
    return _settings


def configure_settings(**overrides: Any) -> TickTickSettings:
    """Replace the process-wide settings with explicit values."""
    global _settings
    _settings = _load(**overrides)
    return _settings


def reset_settings() -> None:
    """Forget loaded settings so the next access re-reads the environment."""
    global _settings
    _settings = None
