"""
Vault Client Exception Hierarchy.

This module defines all exceptions raised by the Vault client, giving callers
clear error semantics for configuration, authentication, transport and
decoding failures.

Exception hierarchy:
    VaultClientError (base)
    ├── ConfigError - Missing or invalid configuration value
    ├── AuthError - Authentication call failed or yielded no token
    ├── TransportError - Non-2xx status, I/O failure or timeout
    └── DecodeError - Malformed Vault JSON (absorbed by the decoder)

Messages carry paths, auth methods and status codes only. Secret values and
tokens are never placed in exceptions.
"""


class VaultClientError(Exception):
    """
    Base exception for all Vault client errors.

    Attributes:
        message: Human-readable error message (MUST NOT include secret values)
        path: Secret path or Vault endpoint the error relates to, if any

    Example:
        >>> try:
        ...     record = client.get_secret("myapp/db")
        ... except VaultClientError as e:
        ...     logger.error("Vault error", extra={"path": e.path})
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        """
        Format error message with path context.

        Example:
            >>> str(VaultClientError("Timeout", "myapp/db"))
            'Timeout (path: myapp/db)'
        """
        if self.path:
            return f"{self.message} (path: {self.path})"
        return self.message


class ConfigError(VaultClientError):
    """
    Raised when a required configuration value is missing or invalid.

    Fatal: surfaced to the caller immediately and never retried.

    Common causes:
        - vault.address set to an empty string
        - Neither vault.auth.method nor vault.token configured
        - Unsupported auth method name (e.g. "kerberos")
        - Non-numeric timeout values
    """


class AuthError(VaultClientError):
    """
    Raised when authentication fails or does not produce a usable token.

    Fatal for the VaultClient being constructed; re-authentication requires a
    new client.

    Attributes:
        method: Auth method that failed ("token", "approle", "awsiam")

    Example:
        >>> raise AuthError("AppRole authentication requires role_id", method="approle")
    """

    def __init__(self, message: str, method: str | None = None, path: str | None = None) -> None:
        super().__init__(message, path=path)
        self.method = method

    def __str__(self) -> str:
        base = super().__str__()
        if self.method:
            return f"{base} [method: {self.method}]"
        return base


class TransportError(VaultClientError):
    """
    Raised when an HTTP call fails.

    Covers non-2xx responses, connection failures, timeouts and other I/O
    errors. Never retried internally; the caller owns retry policy.

    Attributes:
        status_code: HTTP status for non-2xx responses, None for I/O failures
        body: Response body for non-2xx responses (Vault error payload)
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
        path: str | None = None,
    ) -> None:
        super().__init__(message, path=path)
        self.status_code = status_code
        self.body = body


class DecodeError(VaultClientError):
    """
    Raised internally when a Vault response body cannot be decoded.

    The response decoder absorbs this error and yields an empty record, since
    secret consumers must degrade gracefully instead of crashing the host.
    """
