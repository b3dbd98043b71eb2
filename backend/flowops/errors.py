"""
Error taxonomy shared by the dispatcher, the poller and the providers.

Every failure that reaches a client is an OperationError and is rendered
as {"error": message, "code": code, "details": details?}.
"""

from __future__ import annotations

from typing import Any


class OperationError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    default_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, code: str | None = None, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class ValidationError(OperationError):
    """A required field is missing or the body is malformed. Raised before any remote call."""

    status_code = 400
    default_code = "INVALID_REQUEST"


class AuthError(OperationError):
    status_code = 401
    default_code = "NOT_AUTHENTICATED"


class NotFoundError(OperationError):
    status_code = 404
    default_code = "NOT_FOUND"


class UpstreamError(OperationError):
    """A remote provider returned a non-success status or reported a failed job."""

    status_code = 502
    default_code = "UPSTREAM_ERROR"


class ParseError(OperationError):
    """A provider response was not well-formed where structured output was expected."""

    status_code = 502
    default_code = "PARSE_ERROR"


class OperationTimeoutError(OperationError):
    """The poll ceiling was reached before the remote job resolved."""

    status_code = 504
    default_code = "TIMEOUT"


class DownloadError(OperationError):
    """The remote job completed but its artifact could not be fetched."""

    status_code = 502
    default_code = "DOWNLOAD_ERROR"


class ConfigurationError(OperationError):
    status_code = 500
    default_code = "CONFIGURATION_ERROR"
