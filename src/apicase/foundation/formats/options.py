"""Format options and the closed set of simple types.

Simple types are rendered to a single textual value wherever apicase writes
text: path segments, query strings, headers, form fields. Rendering then
parsing with the same FormatOptions reproduces an equal value.
"""

from __future__ import annotations

import types
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Annotated, Union, get_args, get_origin
from uuid import UUID

import httpx
from pydantic import AnyUrl, BaseModel, ConfigDict, Field, PositiveInt, TypeAdapter

from ..config import DEFAULT_DATETIME_FORMAT, FormatSettings, get_settings

# Order matters: bool before int, datetime before date
SIMPLE_TYPES: tuple[type, ...] = (
    bool, int, float, Decimal, str,
    datetime, date, time,
    UUID, httpx.URL, AnyUrl, Enum,
)


class FormatOptions(BaseModel):
    """Options consumed by the key-value and json formatters.

    Attributes:
        use_camel_case: Apply camel_case() to member names
        ignore_null_property: Skip members whose value is None
        datetime_format: strftime pattern for date/datetime values; aware
            datetimes get their utc offset appended unless it contains %z
        max_depth: Recursion ceiling for nested values
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    use_camel_case: bool = False
    ignore_null_property: bool = False
    datetime_format: str = Field(default=DEFAULT_DATETIME_FORMAT, min_length=1)
    max_depth: PositiveInt = 64

    @classmethod
    def from_settings(cls, settings: FormatSettings | None = None) -> FormatOptions:
        cfg = settings or get_settings().format
        return cls(
            use_camel_case=cfg.use_camel_case,
            ignore_null_property=cfg.ignore_null_property,
            datetime_format=cfg.datetime_format,
            max_depth=cfg.max_depth,
        )

    def with_datetime_format(self, datetime_format: str | None) -> FormatOptions:
        """Return self when unchanged, else a copy using `datetime_format`."""
        if not datetime_format or datetime_format == self.datetime_format:
            return self
        return self.model_copy(update={"datetime_format": datetime_format})

    def format_name(self, name: str) -> str:
        return camel_case(name) if self.use_camel_case else name


def camel_case(name: str) -> str:
    """Lowercase the leading run of capitals, keeping acronyms readable.

    >>> camel_case("Name"), camel_case("ID"), camel_case("IDCard"), camel_case("name")
    ('name', 'id', 'idCard', 'name')
    """
    if not name or not name[0].isupper():
        return name

    chars = list(name)
    for i, ch in enumerate(chars):
        if i == 1 and not ch.isupper():
            break
        has_next = i + 1 < len(chars)
        if i > 0 and has_next and not chars[i + 1].isupper():
            if chars[i + 1].isspace():
                chars[i] = ch.lower()
            break
        chars[i] = ch.lower()
    return "".join(chars)


def unwrap_optional(tp: object) -> object:
    """Strip `Annotated[...]` and `X | None` down to X."""
    if get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    if get_origin(tp) in (Union, types.UnionType):
        args = [a for a in get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def is_simple_type(tp: object) -> bool:
    real = unwrap_optional(tp)
    return isinstance(real, type) and issubclass(real, SIMPLE_TYPES)


def is_simple_value(value: object) -> bool:
    return isinstance(value, SIMPLE_TYPES)


def render_simple(value: object, options: FormatOptions) -> str:
    """Render one simple value as text."""
    match value:
        case bool():
            return "true" if value else "false"
        case Enum():
            return render_simple(value.value, options) if is_simple_value(value.value) else str(value.value)
        case datetime() | date():
            return _render_date(value, options.datetime_format)
        case time():
            return value.isoformat()
        case str():
            return value
        case _:
            return str(value)


def parse_simple(text: str, tp: type, options: FormatOptions) -> object:
    """Parse text produced by render_simple() back into `tp`."""
    real = unwrap_optional(tp)
    if not isinstance(real, type):
        raise TypeError(f"Not a simple type: {tp!r}")
    if issubclass(real, Enum):
        for member in real:
            if render_simple(member, options) == text:
                return member
        raise ValueError(f"{text!r} is not a valid {real.__qualname__}")
    if issubclass(real, bool):
        if text.lower() not in ("true", "false"):
            raise ValueError(f"{text!r} is not a valid bool")
        return text.lower() == "true"
    if issubclass(real, datetime):
        return _parse_datetime(text, options.datetime_format)
    if issubclass(real, date):
        return _parse_datetime(text, options.datetime_format).date()
    if issubclass(real, time):
        return time.fromisoformat(text)
    if issubclass(real, (str, int, float, Decimal, UUID, httpx.URL)):
        return real(text)
    return TypeAdapter(real).validate_python(text)


def _render_date(value: date, fmt: str) -> str:
    # strftime drops the leading zeros of years below 1000, which strptime's %Y rejects
    if value.year < 1000:
        fmt = fmt.replace("%Y", f"{value.year:04d}")
    text = value.strftime(fmt)
    if isinstance(value, datetime) and value.utcoffset() is not None and "%z" not in fmt:
        text += value.strftime("%z")
    return text


def _parse_datetime(text: str, fmt: str) -> datetime:
    try:
        return datetime.strptime(text, fmt)
    except ValueError:
        if "%z" in fmt:
            raise
    return datetime.strptime(text, fmt + "%z")
