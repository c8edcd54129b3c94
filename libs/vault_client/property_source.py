"""
Resolution of ``vault:<path>#<field>`` placeholders for a host configuration.

A host (application server, config loader) asks for property values by key.
Keys starting with ``vault:`` are resolved from Vault through a SecretCache;
every other key is left to the host's other property sources.

Lookups never raise into the host: malformed placeholders, missing secrets,
missing fields and Vault failures all resolve to None and are logged.

Example:
    >>> source = VaultPropertySource(client)
    >>> source.get_property("vault:myapp/database#password")
    '...'
    >>> source.get_property("vault:myapp/database")  # no '#'
    None
"""

import logging
from typing import Final

from libs.vault_client.cache import SecretCache
from libs.vault_client.client import VaultClient
from libs.vault_client.exceptions import VaultClientError

logger = logging.getLogger(__name__)

VAULT_PREFIX: Final[str] = "vault:"


def parse_placeholder(key: str | None) -> tuple[str, str] | None:
    """
    Split a placeholder into (path, field).

    Returns None for non-Vault keys and for malformed placeholders (missing
    '#', empty path or empty field). Only the first '#' separates; the field
    may itself contain '#'.

    Example:
        >>> parse_placeholder("vault:secret/app#password")
        ('secret/app', 'password')
        >>> parse_placeholder("vault:#") is None
        True
    """
    if key is None or not key.startswith(VAULT_PREFIX):
        return None
    path, sep, field = key[len(VAULT_PREFIX) :].partition("#")
    if not sep or not path or not field:
        return None
    return path, field


class VaultPropertySource:
    """Property lookup backed by a VaultClient and a per-path SecretCache."""

    def __init__(self, client: VaultClient, cache: SecretCache | None = None) -> None:
        self._client = client
        self._cache = cache if cache is not None else SecretCache(fetch=client.get_secret)

    @property
    def cache(self) -> SecretCache:
        return self._cache

    def get_property(self, key: str | None) -> str | None:
        if key is None or not key.startswith(VAULT_PREFIX):
            return None

        parsed = parse_placeholder(key)
        if parsed is None:
            logger.error("Invalid Vault placeholder format", extra={"placeholder": key})
            return None
        path, field = parsed

        try:
            record = self._cache.get(path)
        except VaultClientError as e:
            logger.error(
                "Error retrieving Vault secret",
                extra={"placeholder": key, "secret_path": path, "error": str(e)},
            )
            return None

        if not record:
            logger.error("Vault secret not found", extra={"secret_path": path})
            return None

        value = record.get(field)
        if value is None:
            logger.error(
                "Vault secret field not found",
                extra={"secret_path": path, "secret_field": field},
            )
        return value

    def close(self) -> None:
        self._client.close()
