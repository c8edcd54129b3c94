"""Structured JSON logging with credential redaction.

Usage:
    from libs.common.logging import configure_logging
    configure_logging(service_name="vault_client", log_level="INFO")
"""

from libs.common.logging.config import configure_logging
from libs.common.logging.formatter import REDACTED, JSONFormatter, redact

__all__ = [
    "configure_logging",
    "JSONFormatter",
    "redact",
    "REDACTED",
]
