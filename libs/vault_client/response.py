"""
Decoding of Vault JSON envelopes into flat secret records.

Envelope shapes:
    read  (KV v2):  {"data": {"data": {...fields}, "metadata": {...}}}
    login:          {"auth": {"client_token": "...", ...}}

Null values are dropped, strings are kept verbatim and every other JSON value
is serialised back to compact JSON ("true", "3", '{"a":1}').

Decoding never raises. Malformed JSON or an unexpected shape yields an empty
record so that secret consumers degrade instead of crashing the host process.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from libs.vault_client.exceptions import DecodeError

logger = logging.getLogger(__name__)

SecretRecord = Mapping[str, str]

EMPTY_RECORD: SecretRecord = MappingProxyType({})


class OperationKind(str, Enum):
    READ = "read"
    LOGIN = "login"


@dataclass(frozen=True)
class VaultResponse:
    """Decoded fields plus KV v2 metadata (empty for login responses)."""

    data: SecretRecord = field(default_factory=lambda: EMPTY_RECORD)
    metadata: SecretRecord = field(default_factory=lambda: EMPTY_RECORD)


def _flatten(obj: Any, where: str) -> SecretRecord:
    if not isinstance(obj, dict):
        raise DecodeError(f"expected JSON object at '{where}'")
    flat: dict[str, str] = {}
    for name, value in obj.items():
        if value is None:
            continue
        if isinstance(value, str):
            flat[name] = value
        else:
            flat[name] = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return MappingProxyType(flat)


def _parse(raw_body: str | bytes, operation: OperationKind) -> VaultResponse:
    try:
        document = json.loads(raw_body)
    except (ValueError, TypeError) as e:
        raise DecodeError(f"malformed JSON: {e}") from e
    if not isinstance(document, dict):
        raise DecodeError("expected JSON object at top level")

    if operation is OperationKind.LOGIN:
        return VaultResponse(data=_flatten(document.get("auth"), "auth"))

    envelope = document.get("data")
    if not isinstance(envelope, dict):
        raise DecodeError("expected JSON object at 'data'")
    metadata = envelope.get("metadata")
    return VaultResponse(
        data=_flatten(envelope.get("data"), "data.data"),
        metadata=_flatten(metadata, "data.metadata") if metadata is not None else EMPTY_RECORD,
    )


def parse_response(raw_body: str | bytes, operation: OperationKind) -> VaultResponse:
    """Decode a Vault response body; an empty VaultResponse on any decode failure."""
    operation = OperationKind(operation)
    try:
        return _parse(raw_body, operation)
    except DecodeError as e:
        logger.debug(
            "Discarding undecodable Vault response",
            extra={"operation": operation.value, "reason": e.message},
        )
        return VaultResponse()


def decode(raw_body: str | bytes, operation: OperationKind) -> SecretRecord:
    """
    Decode a Vault response body into a flat, read-only record.

    Args:
        raw_body: Raw HTTP response body
        operation: OperationKind.READ for KV v2 reads, OperationKind.LOGIN for
            auth endpoints

    Returns:
        Field name → string value; empty when the body cannot be decoded
    """
    return parse_response(raw_body, operation).data
