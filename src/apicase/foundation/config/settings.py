"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated defaults for http clients, key-value and json
formatting, OAuth token caching and logging.

Example:
    >>> from apicase.foundation.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.http.timeout)
    None
    >>> print(settings.logging.level)
    INFO

    # Or with environment variables:
    # APICASE_HTTP_HOST=https://api.example.com
    # APICASE_FORMAT_USE_CAMEL_CASE=true
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, NonNegativeFloat, PositiveFloat, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"


class HttpSettings(BaseSettings):
    """HTTP client default configuration."""

    model_config = SettingsConfigDict(
        env_prefix="APICASE_HTTP_",
        extra="ignore",
    )

    host: str | None = Field(default=None, description="Default base address for relative paths")
    timeout: PositiveFloat | None = Field(default=None, description="Default per-call timeout in seconds")
    user_agent: str = "apicase/1.0"
    use_default_user_agent: bool = True

    @field_validator("host", mode="before")
    @classmethod
    def _validate_host(cls, v: str | None) -> str | None:
        """Only absolute http(s) hosts are accepted."""
        if not v:
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError("host must start with http:// or https://")
        return v


class FormatSettings(BaseSettings):
    """Key-value and json formatting defaults."""

    model_config = SettingsConfigDict(
        env_prefix="APICASE_FORMAT_",
        extra="ignore",
    )

    use_camel_case: bool = False
    ignore_null_property: bool = False
    datetime_format: str = Field(default=DEFAULT_DATETIME_FORMAT, min_length=1)
    max_depth: PositiveInt = Field(default=64, description="Recursion ceiling for nested values")


class OAuthSettings(BaseSettings):
    """Token caching configuration."""

    model_config = SettingsConfigDict(
        env_prefix="APICASE_OAUTH_",
        extra="ignore",
    )

    expiry_skew: NonNegativeFloat = Field(
        default=60.0,
        description="Seconds before expires_in at which a token counts as expired",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="APICASE_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_content: bool = False
    max_content_length: Annotated[int, Field(ge=0)] = 2048


class ApicaseSettings(BaseSettings):
    """Root settings for apicase.

    Loads configuration from environment variables with APICASE_ prefix.

    Example environment variables:
        APICASE_HTTP_HOST=https://api.example.com
        APICASE_HTTP_TIMEOUT=10
        APICASE_FORMAT_DATETIME_FORMAT=%Y-%m-%d
        APICASE_OAUTH_EXPIRY_SKEW=30
        APICASE_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="APICASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    http: HttpSettings = Field(default_factory=HttpSettings)
    format: FormatSettings = Field(default_factory=FormatSettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> ApicaseSettings:
    """Get the global settings instance (cached)."""
    return ApicaseSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()


def configure_logging(settings: LoggingSettings | None = None) -> logging.Logger:
    """Apply the configured level to the `apicase` logger tree."""
    cfg = settings or get_settings().logging
    root = logging.getLogger("apicase")
    root.setLevel(cfg.level)
    return root
