"""
AWS Signature Version 4 request signing.

Produces the signed header set for the STS GetCallerIdentity request that
Vault's AWS IAM auth method replays to prove the caller's identity. The
signer is a pure function of its inputs: the same service, region, URL,
timestamp, headers, body and credentials always give the same Authorization
header.

Algorithm (https://docs.aws.amazon.com/IAM/latest/UserGuide/create-signed-request.html):
    1. payload hash = hex(sha256(body))
    2. add host, content headers, X-Amz-Date, x-amz-content-sha256 (+ token)
    3. canonical request (headers sorted case-insensitively)
    4. credential scope = date/region/service/aws4_request
    5. string to sign
    6. signing key = HMAC chain over date, region, service, "aws4_request"
    7. signature = hex(HMAC(signing key, string to sign))
    8. Authorization header

Example:
    >>> headers = sign_request(
    ...     service="sts",
    ...     region="us-east-1",
    ...     url="https://sts.amazonaws.com/",
    ...     timestamp=datetime.now(UTC),
    ...     headers={"X-Vault-AWS-IAM-Server-Id": "vault.example.com"},
    ...     body="Action=GetCallerIdentity&Version=2011-06-15",
    ...     credentials=AwsCredentials("AKIA...", "secret"),
    ... )
    >>> headers["Authorization"].startswith("AWS4-HMAC-SHA256 Credential=")
    True
"""

import hashlib
import hmac
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Final
from urllib.parse import urlsplit

from libs.vault_client.credentials import AwsCredentials

ALGORITHM: Final[str] = "AWS4-HMAC-SHA256"
AMZ_DATE_FORMAT: Final[str] = "%Y%m%dT%H%M%SZ"
DATE_STAMP_FORMAT: Final[str] = "%Y%m%d"
FORM_CONTENT_TYPE: Final[str] = "application/x-www-form-urlencoded; charset=utf-8"


def sha256_hex(data: str | bytes) -> str:
    """Lowercase hex SHA-256 digest of a UTF-8 string or raw bytes."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def _hmac_sha256(key: bytes, data: str) -> bytes:
    return hmac.new(key, data.encode("utf-8"), hashlib.sha256).digest()


def derive_signing_key(secret_key: str, date_stamp: str, region: str, service: str) -> bytes:
    """Derive the SigV4 signing key from the secret key and credential scope."""
    k_date = _hmac_sha256(("AWS4" + secret_key).encode("utf-8"), date_stamp)
    k_region = _hmac_sha256(k_date, region)
    k_service = _hmac_sha256(k_region, service)
    return _hmac_sha256(k_service, "aws4_request")


def _sorted_items(headers: Mapping[str, str]) -> list[tuple[str, str]]:
    return sorted(headers.items(), key=lambda item: item[0].lower())


def signed_header_names(headers: Mapping[str, str]) -> str:
    """Semicolon-joined, sorted, lower-case header names."""
    return ";".join(sorted(name.lower() for name in headers))


def canonical_request(
    method: str,
    uri_path: str,
    headers: Mapping[str, str],
    payload_hash: str,
) -> str:
    """
    Build the SigV4 canonical request.

    The query string line is always empty: the STS call carries its
    parameters in the POST body.
    """
    canonical_headers = "".join(
        f"{name.lower()}:{value.strip()}\n" for name, value in _sorted_items(headers)
    )
    return (
        f"{method}\n{uri_path or '/'}\n\n"
        f"{canonical_headers}\n"
        f"{signed_header_names(headers)}\n"
        f"{payload_hash}"
    )


def credential_scope(date_stamp: str, region: str, service: str) -> str:
    return f"{date_stamp}/{region}/{service}/aws4_request"


def string_to_sign(amz_date: str, scope: str, canonical: str) -> str:
    return f"{ALGORITHM}\n{amz_date}\n{scope}\n{sha256_hex(canonical)}"


def sign_request(
    *,
    service: str,
    region: str,
    url: str,
    timestamp: datetime,
    headers: Mapping[str, str],
    body: str,
    credentials: AwsCredentials,
    method: str = "POST",
) -> dict[str, str]:
    """
    Sign a request with AWS Signature Version 4.

    Args:
        service: AWS service name (e.g. "sts")
        region: AWS region of the credential scope (e.g. "us-east-1")
        url: Full request URL; host and path are taken from it
        timestamp: Signing time; naive datetimes are treated as UTC
        headers: Caller-supplied headers to sign in addition to the required
            ones (e.g. X-Vault-AWS-IAM-Server-Id)
        body: Raw request body
        credentials: Access key, secret key and optional session token
        method: HTTP method. Default: "POST"

    Returns:
        Header name → value, ordered case-insensitively by name. Includes
        "host" plus "Authorization", "X-Amz-Date" and "x-amz-content-sha256".
    """
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    timestamp = timestamp.astimezone(UTC)
    amz_date = timestamp.strftime(AMZ_DATE_FORMAT)
    date_stamp = timestamp.strftime(DATE_STAMP_FORMAT)

    parts = urlsplit(url)
    payload_hash = sha256_hex(body)

    signed: dict[str, str] = {
        "Content-Type": FORM_CONTENT_TYPE,
        "Content-Length": str(len(body.encode("utf-8"))),
    }
    signed.update(headers)
    signed["host"] = parts.hostname or ""
    signed["X-Amz-Date"] = amz_date
    signed["x-amz-content-sha256"] = payload_hash
    if credentials.session_token:
        signed["x-amz-security-token"] = credentials.session_token

    scope = credential_scope(date_stamp, region, service)
    canonical = canonical_request(method, parts.path, signed, payload_hash)
    signing_key = derive_signing_key(credentials.secret_key, date_stamp, region, service)
    signature = hmac.new(
        signing_key, string_to_sign(amz_date, scope, canonical).encode("utf-8"), hashlib.sha256
    ).hexdigest()

    signed["Authorization"] = (
        f"{ALGORITHM} Credential={credentials.access_key}/{scope}, "
        f"SignedHeaders={signed_header_names(signed)}, Signature={signature}"
    )
    return dict(_sorted_items(signed))
