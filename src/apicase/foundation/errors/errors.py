"""Standardized error handling for api calls.

Every failure raised by apicase derives from ApiException and carries an
ErrorCode, so filters can intercept and translate failures uniformly.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Self

if TYPE_CHECKING:
    import httpx


class ErrorCode(StrEnum):
    """Standard error codes for api failures."""
    CONFIGURATION = "CONFIGURATION"
    UNSUPPORTED_SIGNATURE = "UNSUPPORTED_SIGNATURE"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    TOKEN_ACQUISITION = "TOKEN_ACQUISITION"
    RESPONSE_STATUS = "RESPONSE_STATUS"
    TIMEOUT = "TIMEOUT"
    UNKNOWN = "UNKNOWN"


class ApiException(Exception):
    """Base exception for all apicase failures."""

    code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code.value}, message={self.message!r})"


class ConfigurationError(ApiException):
    """Required configuration (host, token endpoint, provider) is missing or invalid."""

    code = ErrorCode.CONFIGURATION


class UnsupportedSignature(ApiException):
    """Interface method shape cannot be compiled into a descriptor."""

    code = ErrorCode.UNSUPPORTED_SIGNATURE

    def __init__(self, method: str, reason: str) -> None:
        self.method = method
        self.reason = reason
        super().__init__(f"Unsupported method signature {method}: {reason}")


class UnsupportedType(ApiException):
    """No key-value converter accepts the value's type."""

    code = ErrorCode.UNSUPPORTED_TYPE

    def __init__(self, data_type: type, message: str | None = None) -> None:
        self.data_type = data_type
        super().__init__(message or f"Unsupported type for key-value conversion: {data_type.__qualname__}")


class TokenAcquisitionError(ApiException):
    """Credential source returned no usable token."""

    code = ErrorCode.TOKEN_ACQUISITION

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        error: str | None = None,
        error_description: str | None = None,
    ) -> None:
        self.provider = provider
        self.error = error
        self.error_description = error_description
        super().__init__(message)

    @classmethod
    def from_remote(cls, provider: str, error: str | None, description: str | None) -> Self:
        """Create from an OAuth error response."""
        detail = f"{error}: {description}" if description else (error or "unknown error")
        return cls(f"[{provider}] token request failed ({detail})", provider=provider, error=error,
                   error_description=description)


class ResponseStatusError(ApiException):
    """Response status is outside 2xx on a path that requires success."""

    code = ErrorCode.RESPONSE_STATUS

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.status_code = response.status_code
        super().__init__(f"Response status code does not indicate success: {response.status_code} "
                         f"({response.reason_phrase})")


class ApiTimeoutError(ApiException):
    """Call did not complete within its configured timeout."""

    code = ErrorCode.TIMEOUT

    def __init__(self, action: str, timeout: float) -> None:
        self.action = action
        self.timeout = timeout
        super().__init__(f"[{action}] Execution timed out after {timeout}s")
