"""Logging setup for hosts embedding the Vault client.

Library modules only call ``logging.getLogger(__name__)``; the host decides
where records go. configure_logging() is the standard way to send them to
stdout as redacted JSON.

Example:
    >>> from libs.common.logging import configure_logging
    >>> configure_logging(service_name="vault_client", log_level="INFO")
    >>> logging.getLogger("libs.vault_client").info("ready", extra={"auth_method": "token"})
"""

import logging
import sys

from libs.common.logging.formatter import JSONFormatter


def configure_logging(
    service_name: str,
    log_level: str = "INFO",
    include_context: bool = True,
) -> logging.Logger:
    """Configure structured JSON logging on the root logger.

    Replaces existing root handlers with a single stdout handler using
    JSONFormatter. Call once at startup.

    Args:
        service_name: Name recorded in every log entry
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        include_context: Whether to include ``extra`` fields in output

    Returns:
        Configured root logger

    Raises:
        ValueError: If log_level is invalid
    """
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {log_level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(JSONFormatter(service_name=service_name, include_context=include_context))
    root_logger.addHandler(handler)

    return root_logger
