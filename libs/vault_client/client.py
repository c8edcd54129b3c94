"""
Vault KV v2 read client.

VaultClient authenticates exactly once, at construction, using the strategy
selected by ``config.auth_method``, and keeps the resulting bearer token for
its whole lifetime. There is no token renewal: re-authentication means
constructing a new client.

Path convention:
    Input path: "myapp/database"
    Request:    GET {address}/v1/secret/data/myapp/database
    (the KV v2 engine is expected at the "secret" mount)

Usage Example:
    >>> config = load_vault_config("conf/vault.properties")
    >>> with VaultClient(config) as client:
    ...     record = client.get_secret("myapp/database")
    ...     password = client.get_secret_value("myapp/database", "password")

Security:
    - Secret values and tokens are never logged (paths only)
    - The token lives in memory only
"""

import logging
from types import TracebackType
from typing import Final

from libs.vault_client.auth import get_auth_strategy, vault_headers
from libs.vault_client.config import VaultConfig
from libs.vault_client.exceptions import AuthError
from libs.vault_client.response import OperationKind, SecretRecord, decode
from libs.vault_client.transport import HttpTransport, Timeouts

logger = logging.getLogger(__name__)

KV_MOUNT: Final[str] = "secret"


def clean_path(path: str) -> str:
    """Strip one leading slash so the path can be appended to the KV endpoint."""
    return path[1:] if path.startswith("/") else path


class VaultClient:
    """
    Authenticated reader for the KV v2 secrets engine.

    Thread Safety:
        The token is immutable after construction and the transport is
        thread-safe, so get_secret() may be called concurrently.
    """

    def __init__(self, config: VaultConfig, transport: HttpTransport | None = None) -> None:
        """
        Authenticate against Vault and keep the token.

        Args:
            config: Validated Vault configuration
            transport: HTTP transport to use. Default: a new HttpTransport
                honouring config.ssl_verify (closed by close())

        Raises:
            ConfigError: Unsupported auth method
            AuthError: Token acquisition failed
        """
        self._config = config
        self._owns_transport = transport is None
        self._transport = transport if transport is not None else HttpTransport(config.ssl_verify)
        self._timeouts = Timeouts(connect=config.open_timeout, read=config.read_timeout)

        if config.namespace:
            logger.info(
                "Vault namespace bound to client",
                extra={"namespace": config.namespace, "vault_url": config.address},
            )

        try:
            strategy = get_auth_strategy(config.auth_method, self._transport)
            token = strategy.authenticate(config)
            if not token:
                raise AuthError(
                    "Failed to obtain Vault token via authentication", method=config.auth_method
                )
        except Exception:
            if self._owns_transport:
                self._transport.close()
            raise
        self._token = token

        logger.info(
            "Vault client ready",
            extra={"vault_url": config.address, "auth_method": config.auth_method},
        )

    @property
    def token(self) -> str:
        return self._token

    @property
    def config(self) -> VaultConfig:
        return self._config

    def get_secret(self, path: str) -> SecretRecord:
        """
        Read the latest version of a KV v2 secret.

        Returns:
            Field name → value; empty when Vault's body could not be decoded

        Raises:
            TransportError: Non-2xx status (404 for a missing path, 403 for a
                denied policy), connection failure or timeout
        """
        url = f"{self._config.address}/v1/{KV_MOUNT}/data/{clean_path(path)}"
        logger.debug("Reading Vault secret", extra={"secret_path": path})
        response = self._transport.get(
            url,
            headers=vault_headers(self._config, self._token),
            timeouts=self._timeouts,
        )
        return decode(response.body, OperationKind.READ)

    def get_secret_value(self, path: str, key: str) -> str | None:
        return self.get_secret(path).get(key)

    def close(self) -> None:
        if self._owns_transport:
            self._transport.close()

    def __enter__(self) -> "VaultClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
