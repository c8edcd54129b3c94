"""
AWS credential resolution for the IAM auth method.

Resolution order:
    1. Static keys from VaultConfig (access key AND secret key non-empty),
       plus the session token when configured.
    2. The ambient boto3 provider chain (environment variables, shared
       credential/config files, container and instance metadata).

Credentials are resolved for a single signing operation and never cached or
persisted by this module.
"""

import logging
from dataclasses import dataclass, field

import boto3
from botocore.exceptions import BotoCoreError

from libs.vault_client.config import VaultConfig
from libs.vault_client.exceptions import AuthError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AwsCredentials:
    """AWS access key, secret key and optional session token."""

    access_key: str
    secret_key: str = field(repr=False)
    session_token: str | None = field(default=None, repr=False)


def _ambient_credentials() -> AwsCredentials:
    try:
        session_credentials = boto3.Session().get_credentials()
        if session_credentials is None:
            raise AuthError(
                "No AWS credentials found in environment, shared files or instance metadata",
                method="awsiam",
            )
        frozen = session_credentials.get_frozen_credentials()
    except BotoCoreError as e:
        raise AuthError(f"Failed to resolve AWS credentials: {e}", method="awsiam") from e

    if not frozen.access_key or not frozen.secret_key:
        raise AuthError("AWS provider chain returned incomplete credentials", method="awsiam")
    return AwsCredentials(
        access_key=frozen.access_key,
        secret_key=frozen.secret_key,
        session_token=frozen.token or None,
    )


def resolve_credentials(config: VaultConfig) -> AwsCredentials:
    """
    Resolve AWS credentials for signing the STS request.

    Args:
        config: Vault configuration with optional static AWS keys

    Returns:
        AwsCredentials for one signing operation

    Raises:
        AuthError: No credentials available (cause chained when the provider
            chain itself failed)
    """
    if config.aws_access_key and config.aws_secret_key:
        logger.debug("Using static AWS credentials from configuration")
        return AwsCredentials(
            access_key=config.aws_access_key,
            secret_key=config.aws_secret_key,
            session_token=config.aws_session_token or None,
        )

    logger.debug("Static AWS keys not configured, using ambient provider chain")
    return _ambient_credentials()
