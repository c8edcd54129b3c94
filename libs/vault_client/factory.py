"""
Factory functions for building Vault clients and property sources.

Configuration file selection:
    1. Explicit ``config_path`` argument
    2. VAULT_CONFIG_PATH environment variable (file must exist)
    3. ./conf/vault.properties (if present)
    4. No file: environment variables only

Environment Variables:
    VAULT_CONFIG_PATH (str, optional):
        Path to a vault.properties file
    VAULT_ADDR, VAULT_TOKEN, VAULT_AUTH_METHOD, ... :
        Override individual properties (see libs.vault_client.config)

Example Usage:
    >>> source = create_property_source()
    >>> source.get_property("vault:myapp/database#password")
"""

import logging
import os
from pathlib import Path
from typing import Final

from libs.vault_client.client import VaultClient
from libs.vault_client.config import VaultConfig, load_vault_config
from libs.vault_client.exceptions import ConfigError
from libs.vault_client.property_source import VaultPropertySource

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_RELATIVE_PATH: Final[Path] = Path("conf") / "vault.properties"


def resolve_config_path(config_path: str | Path | None = None) -> Path | None:
    """
    Resolve the properties file to load.

    Raises:
        ConfigError: VAULT_CONFIG_PATH points at a file that does not exist
    """
    if config_path is not None:
        return Path(config_path).expanduser()

    override_path = os.getenv("VAULT_CONFIG_PATH")
    if override_path:
        candidate = Path(override_path).expanduser().resolve()
        if not candidate.is_file():
            raise ConfigError(
                f"VAULT_CONFIG_PATH is set to '{candidate}', but the file does not exist."
            )
        return candidate

    default_path = Path.cwd() / DEFAULT_CONFIG_RELATIVE_PATH
    return default_path if default_path.is_file() else None


def create_vault_client(config: VaultConfig | None = None) -> VaultClient:
    """
    Build an authenticated VaultClient.

    Args:
        config: Explicit configuration. If None, loaded from the resolved
            properties file plus environment.

    Raises:
        ConfigError: Invalid configuration
        AuthError: Authentication failed
    """
    if config is None:
        path = resolve_config_path()
        if path is not None:
            logger.info("Loading Vault configuration", extra={"config_path": str(path)})
        config = load_vault_config(path)
    return VaultClient(config)


def create_property_source(config_path: str | Path | None = None) -> VaultPropertySource:
    """
    Build a VaultPropertySource with its own client and cache.

    Raises:
        ConfigError: Invalid configuration
        AuthError: Authentication failed
    """
    config = load_vault_config(resolve_config_path(config_path))
    return VaultPropertySource(create_vault_client(config))
