"""
Vault client configuration.

Configuration is read from a properties file and then overlaid with
environment variables, which always win. The result is an immutable pydantic
model.

The file holds ``key=value`` lines only; blank lines and ``#``/``!`` comments
are skipped. The ``key: value`` and ``key value`` forms are rejected with a
ConfigError naming the line. Values are taken verbatim (``${...}`` is not
expanded).

Property keys and their environment overrides:
    vault.address                   VAULT_ADDR
    vault.token                     VAULT_TOKEN
    vault.auth.method               VAULT_AUTH_METHOD
    vault.auth.approle.role_id      VAULT_AUTH_APPROLE_ROLE_ID
    vault.auth.approle.secret_id    VAULT_AUTH_APPROLE_SECRET_ID
    vault.auth.aws.role             VAULT_AUTH_AWS_ROLE
    vault.auth.aws.region           VAULT_AUTH_AWS_REGION
    vault.auth.aws.access_key       VAULT_AUTH_AWS_ACCESS_KEY
    vault.auth.aws.secret_key       VAULT_AUTH_AWS_SECRET_KEY
    vault.auth.aws.session_token    VAULT_AUTH_AWS_SESSION_TOKEN
    vault.auth.aws.header_value     VAULT_AUTH_AWS_HEADER_VALUE
    vault.auth.aws.endpoint         VAULT_AUTH_AWS_ENDPOINT
    vault.namespace                 VAULT_NAMESPACE
    vault.open_timeout              VAULT_OPEN_TIMEOUT
    vault.read_timeout              VAULT_READ_TIMEOUT
    vault.ssl_verify                VAULT_SSL_VERIFY

Only the address and the auth method are validated at load time. Fields a
given auth method needs (role id, AWS role, ...) are checked when that method
authenticates.

Example:
    >>> config = load_vault_config("conf/vault.properties")
    >>> config.address
    'https://vault.example.com:8200'
    >>> config.auth_method
    'approle'
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Final

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from libs.vault_client.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS: Final[str] = "http://127.0.0.1:8200"
DEFAULT_STS_ENDPOINT: Final[str] = "https://sts.amazonaws.com/"

# property key -> (model field, environment variable)
PROPERTY_MAP: Final[dict[str, tuple[str, str]]] = {
    "vault.address": ("address", "VAULT_ADDR"),
    "vault.token": ("token", "VAULT_TOKEN"),
    "vault.auth.method": ("auth_method", "VAULT_AUTH_METHOD"),
    "vault.auth.approle.role_id": ("approle_role_id", "VAULT_AUTH_APPROLE_ROLE_ID"),
    "vault.auth.approle.secret_id": ("approle_secret_id", "VAULT_AUTH_APPROLE_SECRET_ID"),
    "vault.auth.aws.role": ("aws_role", "VAULT_AUTH_AWS_ROLE"),
    "vault.auth.aws.region": ("aws_region", "VAULT_AUTH_AWS_REGION"),
    "vault.auth.aws.access_key": ("aws_access_key", "VAULT_AUTH_AWS_ACCESS_KEY"),
    "vault.auth.aws.secret_key": ("aws_secret_key", "VAULT_AUTH_AWS_SECRET_KEY"),
    "vault.auth.aws.session_token": ("aws_session_token", "VAULT_AUTH_AWS_SESSION_TOKEN"),
    "vault.auth.aws.header_value": ("aws_header_value", "VAULT_AUTH_AWS_HEADER_VALUE"),
    "vault.auth.aws.endpoint": ("aws_endpoint", "VAULT_AUTH_AWS_ENDPOINT"),
    "vault.namespace": ("namespace", "VAULT_NAMESPACE"),
    "vault.open_timeout": ("open_timeout", "VAULT_OPEN_TIMEOUT"),
    "vault.read_timeout": ("read_timeout", "VAULT_READ_TIMEOUT"),
    "vault.ssl_verify": ("ssl_verify", "VAULT_SSL_VERIFY"),
}

_TRUTHY_VALUES: Final[set[str]] = {"1", "true", "yes", "on"}
_FALSY_VALUES: Final[set[str]] = {"0", "false", "no", "off"}


class VaultConfig(BaseModel):
    """
    Immutable connection and authentication settings for one Vault server.

    Secret-bearing fields (token, AppRole secret id, AWS keys) are excluded
    from ``repr`` so that logging a config never leaks them.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    address: str = Field(default=DEFAULT_ADDRESS, description="Vault server base URL")
    auth_method: str = Field(description="Auth method: token, approle or awsiam")
    token: str | None = Field(default=None, repr=False)

    approle_role_id: str | None = None
    approle_secret_id: str | None = Field(default=None, repr=False)

    aws_role: str | None = None
    aws_region: str = "us-east-1"
    aws_service: str = "sts"
    aws_endpoint: str = DEFAULT_STS_ENDPOINT
    aws_access_key: str | None = Field(default=None, repr=False)
    aws_secret_key: str | None = Field(default=None, repr=False)
    aws_session_token: str | None = Field(default=None, repr=False)
    aws_header_value: str | None = Field(
        default=None, description="Value of the X-Vault-AWS-IAM-Server-Id header"
    )

    namespace: str | None = Field(default=None, description="Vault Enterprise namespace")
    open_timeout: int = Field(default=5, gt=0, description="Connect timeout in seconds")
    read_timeout: int = Field(default=30, gt=0, description="Read timeout in seconds")
    ssl_verify: bool = True

    @field_validator("address")
    @classmethod
    def _normalize_address(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Vault address must be specified")
        return value.rstrip("/")

    @field_validator("auth_method")
    @classmethod
    def _normalize_method(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("Vault auth method must be specified")
        return value

    @field_validator("ssl_verify", mode="before")
    @classmethod
    def _parse_flag(cls, value: object) -> object:
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in _TRUTHY_VALUES:
                return True
            if normalized in _FALSY_VALUES:
                return False
            raise ValueError(f"invalid boolean flag: {value!r}")
        return value


def _check_property_lines(path: Path) -> None:
    """Reject lines that are not ``key=value``, blank, or ``#``/``!`` comments."""
    for lineno, raw in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith(("#", "!")):
            continue
        key, sep, _value = line.partition("=")
        key = key.strip()
        if not sep or not key or any(ch.isspace() or ch == ":" for ch in key):
            # name only the key, the rest of the line may hold a secret
            words = line.split(":", 1)[0].split()
            name = words[0] if words else ""
            raise ConfigError(
                f"Invalid line {lineno} in Vault properties file '{path}': "
                f"expected key=value for '{name}'"
            )


def _read_properties(path: Path) -> dict[str, str]:
    if not path.is_file():
        raise ConfigError(f"Vault properties file '{path}' does not exist")
    _check_property_lines(path)
    # values are kept verbatim, no ${VAR} expansion
    values = dotenv_values(path, interpolate=False)
    return {key: value for key, value in values.items() if value is not None}


def build_vault_config(properties: Mapping[str, str]) -> VaultConfig:
    """
    Build a VaultConfig from property-keyed values.

    Blank values count as unset. A blank auth method falls back to "token"
    when a token is present; with neither set, ConfigError is raised.

    Raises:
        ConfigError: Missing address/method or an invalid value
    """
    fields: dict[str, str] = {}
    for key, (field_name, _env) in PROPERTY_MAP.items():
        value = properties.get(key)
        if value is not None and value.strip():
            fields[field_name] = value.strip()

    if "vault.address" in properties and "address" not in fields:
        raise ConfigError("Vault address must be specified (vault.address or VAULT_ADDR)")

    if "auth_method" not in fields:
        if not fields.get("token"):
            raise ConfigError(
                "Vault auth method must be specified (vault.auth.method or VAULT_AUTH_METHOD) "
                "when no token is configured"
            )
        fields["auth_method"] = "token"

    try:
        return VaultConfig(**fields)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"Invalid Vault configuration: {problems}") from e


def load_vault_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> VaultConfig:
    """
    Load configuration from an optional properties file plus the environment.

    Args:
        path: Properties file to read. None reads the environment only.
        environ: Environment mapping. Default: os.environ

    Returns:
        Validated, immutable VaultConfig

    Raises:
        ConfigError: File missing, address blank, no method and no token,
            unsupported values (non-numeric timeouts, bad flags)
    """
    env = os.environ if environ is None else environ
    properties: dict[str, str] = {}
    if path is not None:
        properties.update(_read_properties(Path(path)))
        logger.debug("Loaded Vault properties file", extra={"config_path": str(path)})

    for key, (_field, env_var) in PROPERTY_MAP.items():
        value = env.get(env_var)
        if value is not None:
            properties[key] = value

    return build_vault_config(properties)
