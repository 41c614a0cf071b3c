"""Configuration management using pydantic-settings.

Provides environment-based configuration with type safety and validation.
"""

from .settings import (
    DEFAULT_DATETIME_FORMAT,
    ApicaseSettings,
    FormatSettings,
    HttpSettings,
    LoggingSettings,
    OAuthSettings,
    clear_settings_cache,
    configure_logging,
    get_settings,
)

__all__ = [
    "DEFAULT_DATETIME_FORMAT",
    "ApicaseSettings",
    "FormatSettings",
    "HttpSettings",
    "LoggingSettings",
    "OAuthSettings",
    "clear_settings_cache",
    "configure_logging",
    "get_settings",
]
