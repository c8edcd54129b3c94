"""Shared fixtures for Vault client tests."""

import pytest

from libs.vault_client.config import VaultConfig
from libs.vault_client.transport import HttpTransport

VAULT_ADDR = "http://vault.test:8200"


@pytest.fixture()
def token_config() -> VaultConfig:
    return VaultConfig(address=VAULT_ADDR, auth_method="token", token="s.test_token")


@pytest.fixture()
def approle_config() -> VaultConfig:
    return VaultConfig(
        address=VAULT_ADDR,
        auth_method="approle",
        approle_role_id="7b646921-d109-ade8-3980-a3bde1be4572",
        approle_secret_id="1d4daf9f-bf63-b146-57ce-322a8ff4c025",
    )


@pytest.fixture()
def awsiam_config() -> VaultConfig:
    return VaultConfig(
        address=VAULT_ADDR,
        auth_method="awsiam",
        aws_role="dev-role-iam",
        aws_access_key="AKIDEXAMPLE",
        aws_secret_key="wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY",
        aws_header_value="vault.example.com",
    )


@pytest.fixture()
def transport():
    with HttpTransport() as http:
        yield http
