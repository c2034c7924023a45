"""Configuration contract for accesscore.

This module provides the Pydantic-validated configuration model used by
:class:`~accesscore.permissions.AccessControl` and :func:`~accesscore.logging.setup_logging`.

Hosts construct :class:`AccessConfig` directly or call
:func:`load_config_from_env`. Direct os.environ/os.getenv usage
elsewhere in the package is not allowed.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AccessConfig(BaseModel):
    """Settings for one access-control context.

    Logging settings are consumed by :func:`~accesscore.logging.setup_logging`;
    the rest by :class:`~accesscore.permissions.AccessControl`.
    """

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level for the host",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )
    service_name: Optional[str] = Field(
        default=None,
        description="Host name used as an extra logger (e.g., 'gameserver')",
    )

    # Access graph
    root_group: str = Field(
        default="user",
        description="Name under which the root group is registered",
    )
    log_denials: bool = Field(
        default=True,
        description="Log every denied check_access call at INFO",
    )
    redact_args: bool = Field(
        default=True,
        description="Redact secret-looking raw arguments in denial logs",
    )

    @field_validator("root_group")
    @classmethod
    def validate_root_group(cls, v: str) -> str:
        """Root group name must contain non-whitespace text."""
        if not v.strip():
            raise ValueError("root_group must not be empty")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",  # Prevent accidental extra fields
    }


_TRUTHY = ("true", "1", "yes", "on")


def load_config_from_env() -> AccessConfig:
    """Load configuration from environment variables.

    This is the ONLY place where os.getenv is allowed.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - SERVICE_NAME: Host name for logger identification
    - ACCESS_ROOT_GROUP: Name of the root group (default: user)
    - ACCESS_LOG_DENIALS: Log denied checks (default: true)
    - ACCESS_REDACT_ARGS: Redact raw arguments in logs (default: true)

    Returns:
        AccessConfig instance with values from environment or defaults.

    Raises:
        ConfigurationError: If a variable holds an invalid value.
    """
    import os

    try:
        return AccessConfig(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=os.getenv("LOG_JSON", "false").lower() in _TRUTHY,
            service_name=os.getenv("SERVICE_NAME"),
            root_group=os.getenv("ACCESS_ROOT_GROUP", "user"),
            log_denials=os.getenv("ACCESS_LOG_DENIALS", "true").lower() in _TRUTHY,
            redact_args=os.getenv("ACCESS_REDACT_ARGS", "true").lower() in _TRUTHY,
        )
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid access configuration in environment: {e.error_count()} error(s)",
            errors=e.errors(include_url=False),
        ) from e


__all__ = [
    "AccessConfig",
    "LogLevel",
    "load_config_from_env",
]
