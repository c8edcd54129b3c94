"""Tests for VaultClient (one-shot authentication and KV v2 reads)."""

import httpx
import pytest

from libs.vault_client.client import VaultClient, clean_path
from libs.vault_client.exceptions import AuthError, ConfigError, TransportError

READ_URL = "http://vault.test:8200/v1/secret/data/myapp/database"
SECRET_BODY = {
    "data": {
        "data": {"username": "admin", "password": "secret123"},
        "metadata": {"created_time": "2023-01-01T00:00:00Z", "version": 1},
    }
}


class TestVaultClientInitialization:
    @pytest.mark.unit()
    def test_token_method_needs_no_remote_call(self, token_config, transport, respx_mock) -> None:
        client = VaultClient(token_config, transport=transport)

        assert client.token == "s.test_token"
        assert len(respx_mock.calls) == 0

    @pytest.mark.unit()
    def test_approle_authenticates_once(self, approle_config, transport, respx_mock) -> None:
        login = respx_mock.post("http://vault.test:8200/v1/auth/approle/login").mock(
            return_value=httpx.Response(200, json={"auth": {"client_token": "s.approle"}})
        )
        respx_mock.get(READ_URL).mock(return_value=httpx.Response(200, json=SECRET_BODY))

        client = VaultClient(approle_config, transport=transport)
        client.get_secret("myapp/database")
        client.get_secret("myapp/database")

        assert client.token == "s.approle"
        assert login.call_count == 1

    @pytest.mark.unit()
    def test_token_is_read_only(self, token_config, transport) -> None:
        client = VaultClient(token_config, transport=transport)

        with pytest.raises(AttributeError):
            client.token = "s.other"  # type: ignore[misc]

    @pytest.mark.unit()
    def test_auth_failure_raises(self, token_config, transport) -> None:
        config = token_config.model_copy(update={"token": ""})

        with pytest.raises(AuthError):
            VaultClient(config, transport=transport)

    @pytest.mark.unit()
    def test_unsupported_method_raises(self, token_config, transport) -> None:
        config = token_config.model_copy(update={"auth_method": "ldap"})

        with pytest.raises(ConfigError):
            VaultClient(config, transport=transport)


class TestVaultClientGetSecret:
    @pytest.mark.unit()
    def test_get_secret_request_and_record(self, token_config, transport, respx_mock) -> None:
        route = respx_mock.get(READ_URL).mock(return_value=httpx.Response(200, json=SECRET_BODY))
        client = VaultClient(token_config, transport=transport)

        record = client.get_secret("myapp/database")

        assert record == {"username": "admin", "password": "secret123"}
        headers = route.calls.last.request.headers
        assert headers["X-Vault-Token"] == "s.test_token"
        assert headers["X-Vault-Request"] == "true"
        assert "X-Vault-Namespace" not in headers

    @pytest.mark.unit()
    def test_leading_slash_removed(self, token_config, transport, respx_mock) -> None:
        route = respx_mock.get(READ_URL).mock(return_value=httpx.Response(200, json=SECRET_BODY))
        client = VaultClient(token_config, transport=transport)

        client.get_secret("/myapp/database")

        assert route.called

    @pytest.mark.unit()
    def test_namespace_header(self, token_config, transport, respx_mock) -> None:
        route = respx_mock.get(READ_URL).mock(return_value=httpx.Response(200, json=SECRET_BODY))
        config = token_config.model_copy(update={"namespace": "team-a"})
        client = VaultClient(config, transport=transport)

        client.get_secret("myapp/database")

        assert route.calls.last.request.headers["X-Vault-Namespace"] == "team-a"

    @pytest.mark.unit()
    def test_config_timeouts_used(self, token_config, transport, respx_mock) -> None:
        route = respx_mock.get(READ_URL).mock(return_value=httpx.Response(200, json=SECRET_BODY))
        config = token_config.model_copy(update={"open_timeout": 3, "read_timeout": 11})
        client = VaultClient(config, transport=transport)

        client.get_secret("myapp/database")

        timeout = route.calls.last.request.extensions["timeout"]
        assert timeout["connect"] == 3
        assert timeout["read"] == 11

    @pytest.mark.unit()
    def test_missing_secret_raises_transport_error(
        self, token_config, transport, respx_mock
    ) -> None:
        respx_mock.get(READ_URL).mock(return_value=httpx.Response(404, json={"errors": []}))
        client = VaultClient(token_config, transport=transport)

        with pytest.raises(TransportError) as exc_info:
            client.get_secret("myapp/database")

        assert exc_info.value.status_code == 404

    @pytest.mark.unit()
    def test_malformed_body_yields_empty_record(self, token_config, transport, respx_mock) -> None:
        respx_mock.get(READ_URL).mock(return_value=httpx.Response(200, text="{ invalid json }"))
        client = VaultClient(token_config, transport=transport)

        assert client.get_secret("myapp/database") == {}

    @pytest.mark.unit()
    def test_get_secret_value(self, token_config, transport, respx_mock) -> None:
        respx_mock.get(READ_URL).mock(return_value=httpx.Response(200, json=SECRET_BODY))
        client = VaultClient(token_config, transport=transport)

        assert client.get_secret_value("myapp/database", "password") == "secret123"
        assert client.get_secret_value("myapp/database", "absent") is None


class TestVaultClientLifecycle:
    @pytest.mark.unit()
    def test_injected_transport_not_closed(self, token_config, transport, respx_mock) -> None:
        respx_mock.get(READ_URL).mock(return_value=httpx.Response(200, json=SECRET_BODY))

        with VaultClient(token_config, transport=transport):
            pass

        # still usable after the client is closed
        assert transport.get(READ_URL).status_code == 200

    @pytest.mark.unit()
    def test_owned_transport_built_from_config(self, token_config) -> None:
        with VaultClient(token_config) as client:
            assert client.config is token_config

    @pytest.mark.unit()
    @pytest.mark.parametrize(
        ("path", "expected"),
        [("/a/b", "a/b"), ("a/b", "a/b"), ("//a", "/a"), ("", "")],
    )
    def test_clean_path(self, path, expected) -> None:
        assert clean_path(path) == expected
