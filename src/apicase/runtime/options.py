"""Per-client options."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, field_validator

from ..foundation.config import ApicaseSettings, get_settings
from ..foundation.formats import (
    FormatOptions,
    JsonFormatter,
    JsonSerializer,
    KeyValueFormatter,
    KeyValueSerializer,
    XmlFormatter,
    XmlSerializer,
)


class HttpApiOptions(BaseModel):
    """Options shared by every call of one api client.

    Attributes:
        http_host: Base address; falls back to the client's base_url
        format_options: Naming, null and datetime options for formatters
        use_default_user_agent: Send `user_agent` when no User-Agent was set
        validate_arguments: Validate argument values against their annotations
        timeout: Default per-call timeout in seconds
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    http_host: str | None = None
    format_options: FormatOptions = Field(default_factory=FormatOptions)
    key_value_formatter: KeyValueSerializer = Field(default_factory=KeyValueFormatter, repr=False)
    json_formatter: JsonSerializer = Field(default_factory=JsonFormatter, repr=False)
    xml_formatter: XmlSerializer = Field(default_factory=XmlFormatter, repr=False)
    use_default_user_agent: bool = True
    user_agent: str = "apicase/1.0"
    validate_arguments: bool = False
    timeout: PositiveFloat | None = None

    @field_validator("http_host", mode="before")
    @classmethod
    def _validate_host(cls, v: str | None) -> str | None:
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("http_host must start with http:// or https://")
        return v or None

    @classmethod
    def from_settings(cls, settings: ApicaseSettings | None = None, **overrides: object) -> HttpApiOptions:
        cfg = settings or get_settings()
        values: dict[str, object] = {
            "http_host": cfg.http.host,
            "format_options": FormatOptions.from_settings(cfg.format),
            "use_default_user_agent": cfg.http.use_default_user_agent,
            "user_agent": cfg.http.user_agent,
            "timeout": cfg.http.timeout,
        }
        return cls(**{**values, **overrides})
