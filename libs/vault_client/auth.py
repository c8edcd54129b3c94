"""
Pluggable Vault authentication strategies.

Each strategy turns a VaultConfig into a bearer token:

    AuthStrategy (ABC)
    ├── TokenAuthStrategy   - "token":   static token from configuration
    ├── AppRoleAuthStrategy - "approle": POST auth/approle/login
    └── AwsIamAuthStrategy  - "awsiam":  SigV4-signed STS GetCallerIdentity,
                                         POST auth/aws/login

Strategies are stateless and single-shot: one attempt, no retries, no backoff.
A failure raises AuthError immediately; callers may retry by calling
authenticate() again.

Selection happens once, from the configured method name:
    >>> strategy = get_auth_strategy(config.auth_method, transport)
    >>> token = strategy.authenticate(config)
"""

import base64
import json
import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import ClassVar, Final

from libs.vault_client.config import VaultConfig
from libs.vault_client.credentials import resolve_credentials
from libs.vault_client.exceptions import AuthError, ConfigError, TransportError
from libs.vault_client.response import OperationKind, decode
from libs.vault_client.sigv4 import sign_request
from libs.vault_client.transport import HttpTransport, Timeouts

logger = logging.getLogger(__name__)

CLIENT_TOKEN: Final[str] = "client_token"
STS_REQUEST_BODY: Final[str] = "Action=GetCallerIdentity&Version=2011-06-15"
IAM_SERVER_ID_HEADER: Final[str] = "X-Vault-AWS-IAM-Server-Id"


def _b64(value: str) -> str:
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def vault_headers(config: VaultConfig, token: str | None = None) -> dict[str, str]:
    """Headers sent on every Vault call: token (if any), request marker, namespace."""
    headers = {"X-Vault-Request": "true"}
    if token:
        headers["X-Vault-Token"] = token
    if config.namespace:
        headers["X-Vault-Namespace"] = config.namespace
    return headers


class AuthStrategy(ABC):
    """
    Contract for all Vault authentication methods.

    Implementations MUST either return a non-empty token or raise AuthError;
    an empty string is never a valid result.
    """

    method: ClassVar[str]

    def __init__(self, transport: HttpTransport) -> None:
        self._transport = transport

    @abstractmethod
    def authenticate(self, config: VaultConfig) -> str:
        """
        Obtain a Vault token.

        Raises:
            AuthError: Required fields missing, login call failed, or the
                response carried no client token
        """

    def _login(self, config: VaultConfig, endpoint: str, payload: dict[str, str]) -> str:
        url = f"{config.address}/v1/{endpoint}"
        headers = vault_headers(config)
        headers["Content-Type"] = "application/json"
        try:
            response = self._transport.post(
                url,
                headers=headers,
                body=json.dumps(payload),
                timeouts=Timeouts(connect=config.open_timeout, read=config.read_timeout),
            )
        except TransportError as e:
            logger.error(
                "Vault login request failed",
                extra={"auth_method": self.method, "status_code": e.status_code},
            )
            raise AuthError(
                f"Vault login failed: {e.message}", method=self.method, path=endpoint
            ) from e

        token = decode(response.body, OperationKind.LOGIN).get(CLIENT_TOKEN)
        if not token:
            raise AuthError(
                "Vault login response did not contain a client token",
                method=self.method,
                path=endpoint,
            )
        logger.info("Authenticated to Vault", extra={"auth_method": self.method})
        return token


class TokenAuthStrategy(AuthStrategy):
    method = "token"

    def authenticate(self, config: VaultConfig) -> str:
        if not config.token:
            raise AuthError("Vault token not provided in configuration", method=self.method)
        return config.token


class AppRoleAuthStrategy(AuthStrategy):
    """AppRole login; secret_id is optional for roles created without one."""

    method = "approle"

    def authenticate(self, config: VaultConfig) -> str:
        if not config.approle_role_id:
            raise AuthError("AppRole authentication requires role_id", method=self.method)

        payload = {"role_id": config.approle_role_id}
        if config.approle_secret_id:
            payload["secret_id"] = config.approle_secret_id
        return self._login(config, "auth/approle/login", payload)


class AwsIamAuthStrategy(AuthStrategy):
    """
    AWS IAM login.

    Signs an STS GetCallerIdentity request with the caller's AWS credentials
    and hands the signed request (URL, body and headers, base64-encoded) to
    Vault, which replays it against STS to learn the caller's identity. The
    long-term AWS secret key never leaves the process.
    """

    method = "awsiam"

    def authenticate(self, config: VaultConfig) -> str:
        if not config.aws_role:
            raise AuthError("AWS authentication requires a role name", method=self.method)

        credentials = resolve_credentials(config)
        extra_headers = {}
        if config.aws_header_value:
            extra_headers[IAM_SERVER_ID_HEADER] = config.aws_header_value

        signed = sign_request(
            service=config.aws_service,
            region=config.aws_region,
            url=config.aws_endpoint,
            timestamp=datetime.now(UTC),
            headers=extra_headers,
            body=STS_REQUEST_BODY,
            credentials=credentials,
        )
        header_json = json.dumps(
            {name: [value] for name, value in signed.items() if name.lower() != "host"}
        )

        payload = {
            "role": config.aws_role,
            "iam_http_request_method": "POST",
            "iam_request_url": _b64(config.aws_endpoint),
            "iam_request_body": _b64(STS_REQUEST_BODY),
            "iam_request_headers": _b64(header_json),
        }
        return self._login(config, "auth/aws/login", payload)


AUTH_STRATEGIES: Final[dict[str, type[AuthStrategy]]] = {
    strategy.method: strategy
    for strategy in (TokenAuthStrategy, AppRoleAuthStrategy, AwsIamAuthStrategy)
}


def get_auth_strategy(method: str, transport: HttpTransport) -> AuthStrategy:
    """
    Select the strategy for a configured auth method name.

    Raises:
        ConfigError: Unknown method name
    """
    strategy_cls = AUTH_STRATEGIES.get(method.strip().lower())
    if strategy_cls is None:
        raise ConfigError(
            f"Unsupported auth method: '{method}'. "
            f"Valid options: {', '.join(sorted(AUTH_STRATEGIES))}"
        )
    return strategy_cls(transport)
