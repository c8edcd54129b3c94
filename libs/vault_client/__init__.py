"""
Vault KV v2 Client Library.

This package authenticates to a Vault-compatible server with a pluggable auth
strategy and serves KV v2 secrets through a per-path cache.

Architecture (Strategy Pattern):
    - AuthStrategy: Abstract interface (auth.py)
    - Strategies: TokenAuthStrategy, AppRoleAuthStrategy, AwsIamAuthStrategy
    - SigV4 signing for the AWS IAM method (sigv4.py, credentials.py)
    - VaultClient: one-shot authentication + KV v2 reads (client.py)
    - SecretCache: thread-safe path → record cache, no TTL (cache.py)
    - VaultPropertySource: ``vault:<path>#<field>`` placeholder lookups

Quick Start:
    >>> from libs.vault_client import create_property_source
    >>> source = create_property_source("conf/vault.properties")
    >>> db_password = source.get_property("vault:myapp/database#password")

Auth method selection (vault.auth.method / VAULT_AUTH_METHOD):
    - "token"   → TokenAuthStrategy (also the default when only a token is set)
    - "approle" → AppRoleAuthStrategy
    - "awsiam"  → AwsIamAuthStrategy
"""

from libs.vault_client.auth import (
    AppRoleAuthStrategy,
    AuthStrategy,
    AwsIamAuthStrategy,
    TokenAuthStrategy,
    get_auth_strategy,
)
from libs.vault_client.cache import SecretCache
from libs.vault_client.client import VaultClient
from libs.vault_client.config import VaultConfig, load_vault_config
from libs.vault_client.credentials import AwsCredentials, resolve_credentials
from libs.vault_client.exceptions import (
    AuthError,
    ConfigError,
    DecodeError,
    TransportError,
    VaultClientError,
)
from libs.vault_client.factory import create_property_source, create_vault_client
from libs.vault_client.property_source import VaultPropertySource, parse_placeholder
from libs.vault_client.response import OperationKind, SecretRecord, decode, parse_response
from libs.vault_client.sigv4 import sign_request
from libs.vault_client.transport import HttpTransport, Timeouts, TransportResponse

__all__ = [
    # Client and lookup
    "VaultClient",
    "VaultPropertySource",
    "SecretCache",
    "parse_placeholder",
    # Factories (recommended for most use cases)
    "create_vault_client",
    "create_property_source",
    # Configuration
    "VaultConfig",
    "load_vault_config",
    # Authentication
    "AuthStrategy",
    "TokenAuthStrategy",
    "AppRoleAuthStrategy",
    "AwsIamAuthStrategy",
    "get_auth_strategy",
    "AwsCredentials",
    "resolve_credentials",
    "sign_request",
    # Transport and decoding
    "HttpTransport",
    "Timeouts",
    "TransportResponse",
    "OperationKind",
    "SecretRecord",
    "decode",
    "parse_response",
    # Exceptions (callers should catch these)
    "VaultClientError",
    "ConfigError",
    "AuthError",
    "TransportError",
    "DecodeError",
]
