"""Foundation layer: errors, configuration and formatters."""

from .config import ApicaseSettings, clear_settings_cache, configure_logging, get_settings
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
from .formats import FormatOptions, JsonFormatter, KeyValue, KeyValueFormatter, XmlFormatter

__all__ = [
    "ApicaseSettings", "clear_settings_cache", "configure_logging", "get_settings",
    "ErrorCode", "ApiException", "ConfigurationError", "UnsupportedSignature", "UnsupportedType",
    "TokenAcquisitionError", "ResponseStatusError", "ApiTimeoutError",
    "FormatOptions", "KeyValue", "KeyValueFormatter", "JsonFormatter", "XmlFormatter",
]
