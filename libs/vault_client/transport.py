"""
Minimal synchronous HTTP transport for Vault and STS calls.

Wraps a single httpx.Client. Each call makes exactly one attempt; there is no
retry or backoff here, the caller decides whether to try again.

Success is a status in [200, 300). Anything else, as well as connection
failures and timeouts, raises TransportError.

Example:
    >>> with HttpTransport(verify=True) as transport:
    ...     response = transport.get(
    ...         "https://vault.example.com:8200/v1/secret/data/myapp",
    ...         headers={"X-Vault-Token": token},
    ...         timeouts=Timeouts(connect=5, read=30),
    ...     )
    ...     response.json()
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import TracebackType
from typing import Any

import httpx

from libs.vault_client.exceptions import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Timeouts:
    """Connect and read timeouts in seconds."""

    connect: int = 5
    read: int = 30

    def to_httpx(self) -> httpx.Timeout:
        return httpx.Timeout(connect=self.connect, read=self.read, write=self.read, pool=self.connect)


@dataclass(frozen=True)
class TransportResponse:
    """Status code and raw body of a successful HTTP call."""

    status_code: int
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.body)


class HttpTransport:
    """
    GET/POST client with header injection and status classification.

    Thread Safety:
        httpx.Client is safe to share between threads, so one transport can
        serve concurrent secret reads.
    """

    def __init__(self, verify: bool = True, client: httpx.Client | None = None) -> None:
        """
        Args:
            verify: Verify TLS certificates. Default: True
            client: Pre-built httpx.Client (tests inject one with a mock transport)
        """
        self._client = client if client is not None else httpx.Client(verify=verify)

    def get(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        timeouts: Timeouts | None = None,
    ) -> TransportResponse:
        return self._send("GET", url, headers, None, timeouts)

    def post(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: str | bytes | None = None,
        timeouts: Timeouts | None = None,
    ) -> TransportResponse:
        return self._send("POST", url, headers, body, timeouts)

    def _send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None,
        body: str | bytes | None,
        timeouts: Timeouts | None,
    ) -> TransportResponse:
        request_headers = {name: value for name, value in (headers or {}).items() if value}
        timeouts = timeouts or Timeouts()
        try:
            response = self._client.request(
                method,
                url,
                headers=request_headers,
                content=body,
                timeout=timeouts.to_httpx(),
            )
        except httpx.TimeoutException as e:
            logger.warning(
                "HTTP request timed out",
                extra={"method": method, "url": url, "error_type": type(e).__name__},
            )
            raise TransportError(f"HTTP {method} to {url} timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.warning(
                "HTTP request failed",
                extra={"method": method, "url": url, "error_type": type(e).__name__},
            )
            raise TransportError(f"I/O error during HTTP {method} to {url}: {e}") from e

        if not 200 <= response.status_code < 300:
            raise TransportError(
                f"HTTP {method} failed with status code: {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        return TransportResponse(status_code=response.status_code, body=response.content)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
