"""Tests for accesscore.logging module."""

from __future__ import annotations

import json
import logging

import pytest

from accesscore import (
    AccessConfig,
    LogLevel,
    get_access_logger,
    redact_secrets,
    safe_log_value,
    safe_preview,
    setup_logging,
)
from accesscore.logging import AccessFormatter


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSafePreview:
    """Tests for safe_preview function."""

    def test_none_value(self) -> None:
        """Test that None returns empty string."""
        assert safe_preview(None) == ""

    def test_string_with_whitespace(self) -> None:
        """Test that whitespace is normalized."""
        assert safe_preview("slap\n\tbob  50") == "slap bob 50"

    def test_string_truncation(self) -> None:
        """Test that long strings are truncated."""
        result = safe_preview("a" * 300, limit=100)
        assert len(result) == 100
        assert result.endswith("…")

    def test_argument_list(self) -> None:
        """Test that argument lists are rendered as JSON."""
        assert safe_preview(["bob", 50]) == '["bob", 50]'


class TestRedactSecrets:
    """Tests for redact_secrets function."""

    def test_password_pattern(self) -> None:
        """Test password redaction."""
        result = redact_secrets('password: "secret123"')
        assert "[REDACTED]" in result
        assert "secret123" not in result

    def test_rcon_password(self) -> None:
        """Test console password commands are redacted."""
        result = redact_secrets("rcon_password hunter2")
        assert "hunter2" not in result

    def test_setting_name_is_kept(self) -> None:
        """Only the value is replaced."""
        assert redact_secrets("sv_password=hunter2") == "sv_password=[REDACTED]"

    def test_argument_list_form(self) -> None:
        """Denial logs render arguments as a JSON list."""
        result = safe_log_value(["rcon_password", "hunter2"])
        assert result == '["rcon_password", [REDACTED]]'

    def test_similar_words_untouched(self) -> None:
        text = "kick passwordless_bob now"
        assert redact_secrets(text) == text

    def test_no_secrets(self) -> None:
        """Test that normal text is not modified."""
        text = "slap bob 50"
        assert redact_secrets(text) == text

    def test_custom_replacement(self) -> None:
        """Test custom replacement string."""
        assert "[HIDDEN]" in redact_secrets("password: secret123", replacement="[HIDDEN]")


class TestSafeLogValue:
    """Tests for safe_log_value function."""

    def test_with_redaction(self) -> None:
        assert "hunter2" not in safe_log_value("rcon_password hunter2", redact=True)

    def test_without_redaction(self) -> None:
        assert "hunter2" in safe_log_value("rcon_password hunter2", redact=False)

    def test_truncation(self) -> None:
        assert len(safe_log_value("a" * 500, limit=100)) <= 100


@pytest.mark.usefixtures("restore_root_logger")
class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_with_config(self) -> None:
        """Test logging setup with AccessConfig."""
        setup_logging(config=AccessConfig(log_level=LogLevel.DEBUG), json_format=False)
        assert logging.getLogger().level == logging.DEBUG

    def test_setup_with_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test logging setup loading from environment."""
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        setup_logging(json_format=False)
        assert logging.getLogger().level == logging.WARNING

    def test_service_logger_level(self) -> None:
        setup_logging(config=AccessConfig(log_level="ERROR", service_name="gameserver"))
        assert logging.getLogger("gameserver").level == logging.ERROR

    def test_json_format(self, capsys: pytest.CaptureFixture) -> None:
        """Test JSON format output with alias context."""
        setup_logging(config=AccessConfig(log_level=LogLevel.INFO), json_format=True)

        get_access_logger("test", alias="123").info("Test message", access="slap")

        data = json.loads(capsys.readouterr().err.strip())
        assert data["level"] == "INFO"
        assert data["message"] == "Test message"
        assert data["logger"] == "test"
        assert data["alias"] == "123"
        assert data["access"] == "slap"

    def test_json_from_config(self, capsys: pytest.CaptureFixture) -> None:
        """Test log_json selects JSON output when no override is given."""
        setup_logging(config=AccessConfig(log_json=True))
        logging.getLogger("test").info("hello")
        assert capsys.readouterr().err.strip().startswith("{")

    def test_plain_format(self, capsys: pytest.CaptureFixture) -> None:
        """Test plain text format output."""
        setup_logging(config=AccessConfig(log_level=LogLevel.INFO), json_format=False)

        logging.getLogger("test").info("Test message")

        output = capsys.readouterr().err.strip()
        assert "INFO" in output
        assert "Test message" in output
        assert not output.startswith("{")


class TestAccessLogger:
    """Tests for the alias/access logger adapter."""

    def test_adapter_defaults(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_access_logger("test", alias="123", access="slap")
        with caplog.at_level(logging.INFO):
            logger.info("Test message")
        record = caplog.records[-1]
        assert record.alias == "123"
        assert record.access == "slap"

    def test_adapter_per_call_override(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_access_logger("test", alias="123")
        with caplog.at_level(logging.INFO):
            logger.info("Test message", alias="456", extra={"condition": "too_high"})
        record = caplog.records[-1]
        assert record.alias == "456"
        assert record.condition == "too_high"
        assert not hasattr(record, "access")


class TestAccessFormatter:
    """Tests for AccessFormatter."""

    def _record(self) -> logging.LogRecord:
        record = logging.LogRecord(
            name="test",
            level=logging.INFO,
            pathname="",
            lineno=0,
            msg="denied: %s",
            args=("access denied",),
            exc_info=None,
        )
        record.alias = "123"
        record.access = "slap"
        record.raw_args = "rcon_password hunter2"
        return record

    def test_json_format(self) -> None:
        data = json.loads(AccessFormatter(json_format=True).format(self._record()))
        assert data["message"] == "denied: access denied"
        assert data["alias"] == "123"
        assert data["access"] == "slap"
        assert "hunter2" not in data["raw_args"]

    def test_plain_format(self) -> None:
        result = AccessFormatter(json_format=False).format(self._record())
        assert "INFO" in result
        assert "alias=123" in result
        assert "access=slap" in result
        assert "denied: access denied" in result
