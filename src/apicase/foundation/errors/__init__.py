"""Unified error handling for apicase.

- ErrorCode: Standard error codes for call failures
- ApiException: Base exception carrying a code
- Taxonomy: configuration, signature, type conversion, token, status, timeout
"""

from .errors import (
    ApiException,
    ApiTimeoutError,
    ConfigurationError,
    ErrorCode,
    ResponseStatusError,
    TokenAcquisitionError,
    UnsupportedSignature,
    UnsupportedType,
)

__all__ = [
    "ErrorCode", "ApiException",
    "ConfigurationError", "UnsupportedSignature", "UnsupportedType",
    "TokenAcquisitionError", "ResponseStatusError", "ApiTimeoutError",
]
