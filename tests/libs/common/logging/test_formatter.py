"""Tests for JSON log formatter.

Tests verify that logs are formatted correctly with:
- Required schema fields (timestamp, level, service, logger, message)
- Context fields, with credentials redacted
- Exception information
"""

import json
import logging
from datetime import UTC, datetime

import pytest

from libs.common.logging.formatter import REDACTED, JSONFormatter, redact


def _record(msg: str = "Test message", exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="libs.vault_client.auth",
        level=logging.INFO,
        pathname="/path/to/auth.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestJSONFormatter:
    """Test suite for JSONFormatter."""

    @pytest.fixture
    def formatter(self) -> JSONFormatter:
        return JSONFormatter(service_name="vault_client")

    def test_basic_log_format(self, formatter: JSONFormatter) -> None:
        log_dict = json.loads(formatter.format(_record()))

        assert log_dict["level"] == "INFO"
        assert log_dict["service"] == "vault_client"
        assert log_dict["logger"] == "libs.vault_client.auth"
        assert log_dict["message"] == "Test message"
        assert "context" not in log_dict

    def test_timestamp_format(self, formatter: JSONFormatter) -> None:
        record = _record()
        record.created = datetime(2025, 10, 21, 10, 30, 0, tzinfo=UTC).timestamp()

        log_dict = json.loads(formatter.format(record))

        assert log_dict["timestamp"] == "2025-10-21T10:30:00.000Z"

    def test_extra_fields_become_context(self, formatter: JSONFormatter) -> None:
        record = _record()
        record.auth_method = "approle"
        record.secret_path = "myapp/database"

        log_dict = json.loads(formatter.format(record))

        assert log_dict["context"] == {"auth_method": "approle", "secret_path": "myapp/database"}

    def test_sensitive_extra_fields_redacted(self, formatter: JSONFormatter) -> None:
        record = _record()
        record.context = {
            "token": "s.live",
            "X-Vault-Token": "s.header",
            "headers": {"Authorization": "AWS4-HMAC-SHA256 ...", "X-Amz-Date": "20240101"},
            "aws_session_token": "FwoG",
            "vault_url": "http://vault.test:8200",
        }

        formatted = formatter.format(record)
        log_dict = json.loads(formatted)

        assert log_dict["context"]["token"] == REDACTED
        assert log_dict["context"]["X-Vault-Token"] == REDACTED
        assert log_dict["context"]["headers"]["Authorization"] == REDACTED
        assert log_dict["context"]["headers"]["X-Amz-Date"] == "20240101"
        assert log_dict["context"]["aws_session_token"] == REDACTED
        assert log_dict["context"]["vault_url"] == "http://vault.test:8200"
        assert "s.live" not in formatted

    def test_context_excluded_when_disabled(self) -> None:
        formatter = JSONFormatter(service_name="vault_client", include_context=False)
        record = _record()
        record.auth_method = "token"

        assert "context" not in json.loads(formatter.format(record))

    def test_exception_info(self, formatter: JSONFormatter) -> None:
        try:
            raise ValueError("bad config")
        except ValueError:
            import sys

            record = _record(exc_info=sys.exc_info())

        log_dict = json.loads(formatter.format(record))

        assert log_dict["exception"]["type"] == "ValueError"
        assert log_dict["exception"]["message"] == "bad config"
        assert "Traceback" in log_dict["exception"]["traceback"]


class TestRedact:
    @pytest.mark.parametrize(
        "key",
        [
            "token",
            "secret_id",
            "secret_key",
            "client_token",
            "x-amz-security-token",
            "approle_secret_id",
            "aws_secret_key",
            "aws_access_key",
            "aws_session_token",
            "db_password",
        ],
    )
    def test_sensitive_keys(self, key: str) -> None:
        assert redact({key: "value"}) == {key: REDACTED}

    @pytest.mark.parametrize("key", ["aws_role", "approle_role_id", "auth_method", "secret_path"])
    def test_non_sensitive_keys_kept(self, key: str) -> None:
        assert redact({key: "value"}) == {key: "value"}

    def test_lists_and_scalars(self) -> None:
        assert redact([{"password": "x"}, "plain", 3]) == [{"password": REDACTED}, "plain", 3]
        assert redact("plain") == "plain"
