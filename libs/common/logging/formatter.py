"""JSON log formatter with credential redaction.

Formats log records as one JSON object per line. Context fields passed via
``extra=`` are included, with values under sensitive keys (tokens, secret
ids, AWS keys, Authorization headers) replaced by a fixed marker.

Example log output:
    {
        "timestamp": "2025-10-21T10:30:00.000Z",
        "level": "INFO",
        "service": "vault_client",
        "logger": "libs.vault_client.auth",
        "message": "Authenticated to Vault",
        "context": {"auth_method": "approle"}
    }
"""

import json
import logging
import traceback
from datetime import UTC, datetime
from types import TracebackType
from typing import Any, Final

REDACTED: Final[str] = "***REDACTED***"

SENSITIVE_KEYS: Final[frozenset[str]] = frozenset(
    {
        "token",
        "secret_id",
        "secret_key",
        "authorization",
        "password",
    }
)

SENSITIVE_SUFFIXES: Final[tuple[str, ...]] = (
    "_token",
    "_secret_id",
    "_secret_key",
    "_access_key",
    "_password",
)

_RESERVED_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "context",
        "exc_info",
        "exc_text",
        "stack_info",
        "message",
        "asctime",
    }
)


def _is_sensitive(key: str) -> bool:
    # header spellings (X-Vault-Token) and prefixed fields (aws_secret_key) match too
    normalized = key.lower().replace("-", "_")
    return normalized in SENSITIVE_KEYS or normalized.endswith(SENSITIVE_SUFFIXES)


def redact(value: Any) -> Any:
    """Recursively replace values stored under sensitive keys."""
    if isinstance(value, dict):
        return {
            key: REDACTED if isinstance(key, str) and _is_sensitive(key) else redact(item)
            for key, item in value.items()
        }
    if isinstance(value, list | tuple):
        return [redact(item) for item in value]
    return value


class JSONFormatter(logging.Formatter):
    """Formatter that outputs logs as redacted JSON.

    Attributes:
        service_name: Name of the service emitting logs
        include_context: Whether to include extra context fields
    """

    def __init__(
        self, service_name: str, include_context: bool = True, *args: Any, **kwargs: Any
    ) -> None:
        super().__init__(*args, **kwargs)
        self.service_name = service_name
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self._format_timestamp(record.created),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_context:
            context = self._extract_context(record)
            if context:
                log_entry["context"] = redact(context)

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self._format_exception(record.exc_info),
            }

        return json.dumps(log_entry, default=str)

    def _format_timestamp(self, created: float) -> str:
        """ISO 8601 UTC timestamp with millisecond precision."""
        dt = datetime.fromtimestamp(created, tz=UTC)
        return dt.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

    def _extract_context(self, record: logging.LogRecord) -> dict[str, Any] | None:
        context = getattr(record, "context", None)
        if context and isinstance(context, dict):
            return dict(context)

        extra = {
            key: value for key, value in record.__dict__.items() if key not in _RESERVED_FIELDS
        }
        return extra if extra else None

    def _format_exception(
        self,
        exc_info: tuple[type[BaseException] | None, BaseException | None, TracebackType | None],
    ) -> str:
        return "".join(traceback.format_exception(*exc_info))
