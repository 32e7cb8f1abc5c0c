"""Exception types raised by aiopreq."""

from __future__ import annotations

from typing import Any

# Status reported for every connection or timeout failure
GATEWAY_TIMEOUT = 504


class AiopreqError(Exception):
    """Base class for all aiopreq errors."""


class ConfigurationError(AiopreqError, ValueError):
    """
    Raised when request input is missing or malformed.

    Always raised before any network attempt is made and never retried.
    """


class RequestError(AiopreqError):
    """
    Raised when a request could not produce a response.

    Attributes:
        status: Numeric status (504 for connection and timeout failures)
        message: Human-readable description of the failure
        cause: Underlying exception, kept for diagnostics
        uri: Requested URI
        method: HTTP method of the request
    """

    def __init__(
        self,
        status: int,
        message: str,
        *,
        cause: BaseException | None = None,
        uri: str | None = None,
        method: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.message = message
        self.cause = cause
        self.uri = uri
        self.method = method

    def __str__(self) -> str:
        return f"{self.status}: {self.message}"

    def __repr__(self) -> str:
        return f"RequestError(status={self.status!r}, message={self.message!r}, uri={self.uri!r})"

    def to_dict(self) -> dict[str, Any]:
        """Convert the error to a problem-style dictionary."""
        return {
            "type": "internal_http_error",
            "status": self.status,
            "description": self.message,
            "uri": self.uri,
            "method": self.method,
        }
