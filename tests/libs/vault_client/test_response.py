"""
Tests for libs/vault_client/response.py - Vault envelope decoding.

Test Organization:
    - TestDecodeRead: KV v2 read envelopes
    - TestDecodeLogin: auth envelopes
    - TestDecodeFailures: malformed input degrades to an empty record
"""

import pytest

from libs.vault_client.response import OperationKind, decode, parse_response


class TestDecodeRead:
    @pytest.mark.unit()
    def test_fields_extracted_metadata_ignored(self) -> None:
        body = (
            '{"data":{"data":{"username":"admin","password":"secret123"},'
            '"metadata":{"created_time":"2023-01-01T00:00:00Z"}}}'
        )

        record = decode(body, OperationKind.READ)

        assert dict(record) == {"username": "admin", "password": "secret123"}
        assert len(record) == 2

    @pytest.mark.unit()
    def test_null_fields_dropped(self) -> None:
        record = decode('{"data":{"data":{"valid":"ok","nullValue":null}}}', OperationKind.READ)

        assert dict(record) == {"valid": "ok"}

    @pytest.mark.unit()
    def test_non_string_values_stringified(self) -> None:
        body = b'{"data":{"data":{"port":5432,"enabled":true,"ratio":0.5,"opts":{"a":1},"tags":["x"]}}}'

        record = decode(body, OperationKind.READ)

        assert record == {
            "port": "5432",
            "enabled": "true",
            "ratio": "0.5",
            "opts": '{"a":1}',
            "tags": '["x"]',
        }

    @pytest.mark.unit()
    def test_non_ascii_kept_verbatim_in_structured_values(self) -> None:
        body = '{"data":{"data":{"name":"Zürich","opts":{"city":"Zürich"},"tags":["東京"]}}}'

        record = decode(body.encode("utf-8"), OperationKind.READ)

        assert record["name"] == "Zürich"
        assert record["opts"] == '{"city":"Zürich"}'
        assert record["tags"] == '["東京"]'

    @pytest.mark.unit()
    def test_metadata_available_through_parse_response(self) -> None:
        body = '{"data":{"data":{"k":"v"},"metadata":{"version":3,"deletion_time":""}}}'

        response = parse_response(body, OperationKind.READ)

        assert response.metadata == {"version": "3", "deletion_time": ""}
        assert response.data == {"k": "v"}

    @pytest.mark.unit()
    def test_record_is_read_only(self) -> None:
        record = decode('{"data":{"data":{"k":"v"}}}', OperationKind.READ)

        with pytest.raises(TypeError):
            record["k"] = "changed"  # type: ignore[index]

    @pytest.mark.unit()
    def test_accepts_operation_name_string(self) -> None:
        assert decode('{"data":{"data":{"k":"v"}}}', "read") == {"k": "v"}


class TestDecodeLogin:
    @pytest.mark.unit()
    def test_auth_object_flattened(self) -> None:
        body = (
            '{"auth":{"client_token":"s.new","accessor":"acc","policies":["default"],'
            '"lease_duration":2764800,"metadata":null}}'
        )

        record = decode(body, OperationKind.LOGIN)

        assert record["client_token"] == "s.new"
        assert record["policies"] == '["default"]'
        assert record["lease_duration"] == "2764800"
        assert "metadata" not in record

    @pytest.mark.unit()
    def test_read_envelope_has_no_auth(self) -> None:
        assert decode('{"data":{"data":{"k":"v"}}}', OperationKind.LOGIN) == {}


class TestDecodeFailures:
    @pytest.mark.unit()
    @pytest.mark.parametrize(
        "body",
        [
            "{ invalid json }",
            "",
            "[]",
            '"just a string"',
            '{"data": null}',
            '{"data": {"data": "not an object"}}',
            '{"errors": ["permission denied"]}',
        ],
    )
    def test_malformed_or_unexpected_yields_empty_record(self, body: str) -> None:
        assert decode(body, OperationKind.READ) == {}

    @pytest.mark.unit()
    def test_malformed_login_yields_empty_record(self) -> None:
        assert decode("{ invalid json }", OperationKind.LOGIN) == {}

    @pytest.mark.unit()
    def test_invalid_utf8_yields_empty_record(self) -> None:
        assert decode(b"\xff\xfe\x00", OperationKind.READ) == {}
