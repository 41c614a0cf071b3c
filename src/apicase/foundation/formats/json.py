"""JSON formatter on orjson with pydantic validation for typed results."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Set
from datetime import date, datetime
from functools import lru_cache
from typing import Any, Protocol, runtime_checkable

import orjson
from pydantic import BaseModel, TypeAdapter
from pydantic_core import to_jsonable_python

from .options import FormatOptions


@runtime_checkable
class JsonSerializer(Protocol):
    """Formatter contract for json bodies and json results."""

    def serialize(self, value: object, options: FormatOptions | None = None) -> str | None: ...
    def deserialize(self, text: str | bytes, tp: object) -> object: ...


@lru_cache(maxsize=256)
def type_adapter(tp: Any) -> TypeAdapter[Any]:
    """Cached TypeAdapter per target type (construction is the expensive part)."""
    return TypeAdapter(tp)


class JsonFormatter:
    """Default JsonSerializer.

    Member names follow options.use_camel_case, None members are dropped when
    options.ignore_null_property is set, and date/datetime values are
    rendered with options.datetime_format.

    Example:
        >>> JsonFormatter().serialize({"UserName": "laojiu"}, FormatOptions(use_camel_case=True))
        '{"userName":"laojiu"}'
    """

    __slots__ = ()

    def serialize(self, value: object, options: FormatOptions | None = None) -> str | None:
        if value is None:
            return None
        return self.serialize_bytes(value, options).decode()

    def serialize_bytes(self, value: object, options: FormatOptions | None = None) -> bytes:
        prepared = _prepare(value, options or FormatOptions())
        return orjson.dumps(prepared, default=to_jsonable_python, option=orjson.OPT_NON_STR_KEYS)

    def deserialize(self, text: str | bytes, tp: object) -> object:
        if not text:
            return None
        data = orjson.loads(text)
        if tp is object or tp is Any:
            return data
        return type_adapter(tp).validate_python(data)


def _prepare(value: object, options: FormatOptions) -> object:
    """Walk the value applying naming, null and datetime options."""
    match value:
        case BaseModel():
            return _prepare_mapping(value.model_dump(mode="python", by_alias=True), options)
        case _ if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return _prepare_mapping({f.name: getattr(value, f.name) for f in dataclasses.fields(value)}, options)
        case Mapping():
            return _prepare_mapping(value, options)
        case list() | tuple() | Set():
            return [_prepare(item, options) for item in value]
        case datetime() | date():
            return value.strftime(options.datetime_format)
        case _:
            return value


def _prepare_mapping(mapping: Mapping[Any, object], options: FormatOptions) -> dict[str, object]:
    return {
        options.format_name(str(k)): _prepare(v, options)
        for k, v in mapping.items()
        if not (v is None and options.ignore_null_property)
    }
