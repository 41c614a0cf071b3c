"""Tests for settings, options and body formatters."""

from datetime import datetime

import pytest
from pydantic import BaseModel, ValidationError

from apicase.foundation.config import (
    ApicaseSettings,
    HttpSettings,
    clear_settings_cache,
    configure_logging,
    get_settings,
)
from apicase.foundation.errors import ErrorCode, UnsupportedSignature, UnsupportedType
from apicase.foundation.formats import FormatOptions, JsonFormatter, XmlFormatter
from apicase.runtime import HttpApiOptions


class Profile(BaseModel):
    UserName: str
    Nickname: str | None = None
    Joined: datetime


@pytest.fixture(autouse=True)
def fresh_settings() -> object:
    clear_settings_cache()
    yield
    clear_settings_cache()


# ─────────────────────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────────────────────


def test_defaults() -> None:
    settings = ApicaseSettings()

    assert settings.http.host is None
    assert settings.http.timeout is None
    assert settings.format.use_camel_case is False
    assert settings.format.max_depth == 64
    assert settings.oauth.expiry_skew == 60.0
    assert settings.logging.level == "INFO"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APICASE_HTTP_HOST", "https://env.example.com")
    monkeypatch.setenv("APICASE_FORMAT_USE_CAMEL_CASE", "true")
    monkeypatch.setenv("APICASE_LOG_LEVEL", "DEBUG")

    settings = get_settings()
    assert settings.http.host == "https://env.example.com"
    assert settings.format.use_camel_case is True
    assert get_settings() is settings

    options = HttpApiOptions.from_settings(settings)
    assert options.http_host == "https://env.example.com"
    assert options.format_options.use_camel_case is True
    assert configure_logging(settings.logging).level == 10


def test_invalid_host_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APICASE_HTTP_HOST", "ftp://nope")
    with pytest.raises(ValidationError):
        HttpSettings()
    with pytest.raises(ValidationError):
        HttpApiOptions(http_host="api.example.com")


def test_options_overrides() -> None:
    options = HttpApiOptions.from_settings(ApicaseSettings(), validate_arguments=True, user_agent="custom/2")
    assert options.validate_arguments is True
    assert options.user_agent == "custom/2"


def test_error_codes() -> None:
    assert UnsupportedSignature("Api.get", "bad").code is ErrorCode.UNSUPPORTED_SIGNATURE
    assert UnsupportedType(int).code is ErrorCode.UNSUPPORTED_TYPE
    assert "int" in str(UnsupportedType(int))


# ─────────────────────────────────────────────────────────────────────────────
# Body formatters
# ─────────────────────────────────────────────────────────────────────────────


def test_json_naming_nulls_and_dates() -> None:
    profile = Profile(UserName="laojiu", Joined=datetime(2010, 10, 10))
    options = FormatOptions(use_camel_case=True, ignore_null_property=True, datetime_format="%Y-%m-%d")

    assert JsonFormatter().serialize(profile, options) == '{"userName":"laojiu","joined":"2010-10-10"}'
    assert JsonFormatter().serialize(None) is None


def test_json_deserialize_typed() -> None:
    formatter = JsonFormatter()
    assert formatter.deserialize(b'{"UserName":"a","Joined":"2010-10-10T00:00:00"}', Profile) == Profile(
        UserName="a", Joined=datetime(2010, 10, 10)
    )
    assert formatter.deserialize(b"", Profile) is None
    assert formatter.deserialize(b"[1,2]", object) == [1, 2]


def test_xml_roundtrip_through_model() -> None:
    formatter = XmlFormatter()
    text = formatter.serialize({"id": 1, "tags": ["a", "b"]}, root="user")

    assert text is not None
    assert text.endswith("<user><id>1</id><tags><item>a</item><item>b</item></tags></user>")
    assert formatter.deserialize(text.encode(), object) == {"id": "1", "tags": ["a", "b"]}
