"""Centralized logging utilities for accesscore.

This module provides:
- Logging configuration from AccessConfig
- Safe preview utilities for raw command arguments
- Secret redaction
- Structured logging with alias/access context
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from .config import AccessConfig, LogLevel


# Console arguments that carry credentials: "rcon_password hunter2",
# "password=hunter2", and the JSON list form '"rcon_password", "hunter2"'.
# The key is kept so the log still shows which setting was touched.
_SECRET_KEYS = r"rcon_password|sv_password|password|passwd"
SECRET_PATTERNS = [
    re.compile(
        r"\b(" + _SECRET_KEYS + r")"
        r"""(\s*[:=]\s*|",\s*|\s+)"""
        r"""["']?[^"'\s,\]]+["']?""",
        re.IGNORECASE,
    ),
]

_RESERVED_RECORD_KEYS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "taskName", "exc_info", "exc_text", "stack_info",
    "alias", "access",
})


def safe_preview(value: Any, limit: int = 240) -> str:
    """Render ``value`` as one bounded line for a log record.

    Argument lists and tuples are rendered as JSON so token boundaries stay
    visible; ``None`` renders as an empty string.
    """
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        text = json.dumps(list(value), default=str, ensure_ascii=False)
    else:
        text = str(value)

    text = " ".join(text.split())
    if len(text) > limit:
        text = text[: limit - 1] + "…"
    return text


def redact_secrets(text: str, replacement: str = "[REDACTED]") -> str:
    """Replace the value following a credential-looking key with ``replacement``."""
    if not isinstance(text, str):
        return text
    for pattern in SECRET_PATTERNS:
        text = pattern.sub(lambda m: m.group(1) + m.group(2) + replacement, text)
    return text


def safe_log_value(value: Any, limit: int = 240, redact: bool = True) -> str:
    """Preview raw command arguments for logging, redacted unless ``redact`` is off."""
    preview = safe_preview(value, limit=limit)
    return redact_secrets(preview) if redact else preview


class AccessFormatter(logging.Formatter):
    """Formatter that includes alias/access context and optional JSON output."""

    def __init__(
        self,
        include_context: bool = True,
        json_format: bool = True,
        redact_secrets: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        """Initialize the formatter.

        Args:
            include_context: Whether to include alias and access tag in logs
            json_format: Whether to output JSON (True) or plain text (False)
            redact_secrets: Whether to redact secrets from log messages
        """
        super().__init__(*args, **kwargs)
        self.include_context = include_context
        self.json_format = json_format
        self.redact_secrets = redact_secrets

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record."""
        alias = getattr(record, "alias", None)
        access = getattr(record, "access", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_context:
            if alias:
                log_data["alias"] = str(alias)
            if access:
                log_data["access"] = str(access)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_data[key] = safe_log_value(value, redact=self.redact_secrets)

        if self.redact_secrets:
            log_data["message"] = redact_secrets(log_data["message"])

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        if "alias" in log_data:
            parts.append(f"alias={log_data['alias']}")
        if "access" in log_data:
            parts.append(f"access={log_data['access']}")
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class AccessLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds alias and access tag to log records.

    Usage:
        logger = get_access_logger(__name__, alias="STEAM_0:1:123")
        logger.info("command denied", access="slap")
    """

    def __init__(
        self,
        logger: logging.Logger,
        alias: Optional[str] = None,
        access: Optional[str] = None,
    ):
        super().__init__(logger, {})
        self.alias = alias
        self.access = access

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        """Move alias/access keyword arguments into ``extra``."""
        alias = kwargs.pop("alias", self.alias)
        access = kwargs.pop("access", self.access)

        extra = kwargs.get("extra", {})
        if alias:
            extra["alias"] = alias
        if access:
            extra["access"] = access
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[AccessConfig] = None,
    json_format: Optional[bool] = None,
    redact_secrets: bool = True,
) -> None:
    """Configure root logging for a host embedding accesscore.

    Args:
        config: AccessConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json`` when given
        redact_secrets: Whether to redact secrets (default: True)
    """
    if config is None:
        from .config import load_config_from_env
        config = load_config_from_env()

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(LogLevel(config.log_level), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        AccessFormatter(
            include_context=True,
            json_format=config.log_json if json_format is None else json_format,
            redact_secrets=redact_secrets,
        )
    )
    root_logger.addHandler(console_handler)

    if config.service_name:
        logging.getLogger(config.service_name).setLevel(log_level)


def get_access_logger(
    name: str,
    alias: Optional[str] = None,
    access: Optional[str] = None,
) -> AccessLoggerAdapter:
    """Get a logger adapter carrying alias/access context.

    Example:
        logger = get_access_logger(__name__)
        logger.info("command run", alias="123", access="slap")
    """
    return AccessLoggerAdapter(logging.getLogger(name), alias=alias, access=access)


__all__ = [
    "safe_preview",
    "redact_secrets",
    "safe_log_value",
    "AccessFormatter",
    "AccessLoggerAdapter",
    "setup_logging",
    "get_access_logger",
]
