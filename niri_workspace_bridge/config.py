"""Runtime configuration for the niri workspace bridge.

Settings come from the environment only. The socket path is resolved on every
connect attempt rather than cached, so a restarted compositor with a new
socket is picked up by the next session.
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .constants import (
    DEFAULT_CHANNEL_CAPACITY,
    DEFAULT_LOG_LEVEL,
    MAX_CHANNEL_CAPACITY,
    EnvVars,
)
from .errors import ConfigError, ErrorCode


def get_socket_path(environ: Optional[Mapping[str, str]] = None) -> str:
    """Resolve the niri IPC socket path from the environment.

    Args:
        environ: Mapping to read from (default: os.environ)

    Returns:
        Socket path string

    Raises:
        ConfigError: If NIRI_SOCKET is unset or empty
    """
    env = os.environ if environ is None else environ
    socket_path = env.get(EnvVars.SOCKET_PATH, "").strip()
    if not socket_path:
        raise ConfigError(
            f"{EnvVars.SOCKET_PATH} is not set",
            suggestion="Run inside a niri session or export NIRI_SOCKET",
        )
    return socket_path


class BridgeSettings(BaseModel):
    """Settings for the bridge, read once by the CLI at startup."""

    channel_capacity: int = Field(
        default=DEFAULT_CHANNEL_CAPACITY,
        ge=1,
        le=MAX_CHANNEL_CAPACITY,
        description="Delivery channel capacity (updates buffered before the session waits)",
    )
    log_level: str = Field(default=DEFAULT_LOG_LEVEL, description="Root log level")

    model_config = {"frozen": True}

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {v}")
        return level

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BridgeSettings":
        """Build settings from environment variables.

        Raises:
            ConfigError: If a variable is present but invalid
        """
        env = os.environ if environ is None else environ
        data = {}
        if env.get(EnvVars.CHANNEL_CAPACITY):
            data["channel_capacity"] = env[EnvVars.CHANNEL_CAPACITY]
        if env.get(EnvVars.LOG_LEVEL):
            data["log_level"] = env[EnvVars.LOG_LEVEL]

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(
                f"Invalid bridge settings: {e.errors()[0]['msg']}",
                code=ErrorCode.INVALID_SETTING,
            ) from e
