"""Recursive key-value conversion for query strings, headers and forms.

Values are flattened by an immutable, ordered tuple of converters. Each
converter either returns the pairs for its value or None to defer to the
next one; the chain ends in a terminal that raises UnsupportedType.

Naming:
    - Top-level object members use their bare (optionally camelCased) name
    - Nested members use `parent.member`
    - Enumerable elements repeat the parent name: `tag=a&tag=b`

Example:
    >>> formatter = KeyValueFormatter()
    >>> formatter.serialize("user", {"name": "laojiu", "tags": ["a", "b"]}, FormatOptions())
    [KeyValue(key='name', value='laojiu'), KeyValue(key='tags', value='a'), KeyValue(key='tags', value='b')]
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import NamedTuple, Protocol, runtime_checkable

from pydantic import BaseModel

from ..errors import UnsupportedType
from .options import FormatOptions, is_simple_value, render_simple


class KeyValue(NamedTuple):
    """One flattened (key, value) pair."""
    key: str
    value: str


@dataclass(frozen=True, slots=True)
class ConvertContext:
    """State for one node of the conversion. A child node gets a new instance."""

    name: str
    value: object
    depth: int
    options: FormatOptions

    def child(self, name: str, value: object) -> ConvertContext:
        return ConvertContext(name, value, self.depth + 1, self.options)

    @property
    def data_type(self) -> type:
        return type(self.value)


Recurse = Callable[[ConvertContext], list[KeyValue]]
Converter = Callable[[ConvertContext, Recurse], "list[KeyValue] | None"]


@runtime_checkable
class KeyValueSerializer(Protocol):
    """Formatter contract: flatten one named value into key-value pairs."""

    def serialize(self, name: str, value: object, options: FormatOptions) -> list[KeyValue]: ...


# ─────────────────────────────────────────────────────────────────────────────
# Converters
# ─────────────────────────────────────────────────────────────────────────────


def convert_null(ctx: ConvertContext, recurse: Recurse) -> list[KeyValue] | None:
    return [] if ctx.value is None else None


def convert_simple(ctx: ConvertContext, recurse: Recurse) -> list[KeyValue] | None:
    if not is_simple_value(ctx.value):
        return None
    return [KeyValue(ctx.name, render_simple(ctx.value, ctx.options))]


def convert_key_value(ctx: ConvertContext, recurse: Recurse) -> list[KeyValue] | None:
    if not isinstance(ctx.value, KeyValue):
        return None
    value = ctx.value.value
    text = render_simple(value, ctx.options) if is_simple_value(value) else str(value)
    return [KeyValue(ctx.value.key, text)]


def convert_enumerable(ctx: ConvertContext, recurse: Recurse) -> list[KeyValue] | None:
    value = ctx.value
    if not isinstance(value, Iterable) or isinstance(value, (str, bytes, bytearray, Mapping, BaseModel)):
        return None
    pairs: list[KeyValue] = []
    for item in value:
        pairs.extend(recurse(ctx.child(ctx.name, item)))
    return pairs


def convert_properties(ctx: ConvertContext, recurse: Recurse) -> list[KeyValue] | None:
    members = _members(ctx.value)
    if members is None:
        return None
    options = ctx.options
    pairs: list[KeyValue] = []
    for member, member_value in members:
        if member_value is None and options.ignore_null_property:
            continue
        member = options.format_name(member)
        name = member if ctx.depth == 0 else f"{ctx.name}.{member}"
        pairs.extend(recurse(ctx.child(name, member_value)))
    return pairs


def _members(value: object) -> Iterator[tuple[str, object]] | None:
    """Public readable members in declaration order, or None if value has none."""
    if isinstance(value, BaseModel):
        fields = type(value).model_fields
        return ((f.alias or name, getattr(value, name)) for name, f in fields.items())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return ((f.name, getattr(value, f.name)) for f in dataclasses.fields(value))
    if isinstance(value, Mapping):
        return ((str(k), v) for k, v in value.items())
    if callable(value) or not hasattr(value, "__dict__"):
        return None
    return _object_members(value)


def _object_members(value: object) -> Iterator[tuple[str, object]]:
    for name, member in vars(value).items():
        if not name.startswith("_"):
            yield name, member
    seen: set[str] = set()
    for klass in reversed(type(value).__mro__):
        for name, attr in vars(klass).items():
            if isinstance(attr, property) and not name.startswith("_") and name not in seen:
                seen.add(name)
                yield name, getattr(value, name)


DEFAULT_CONVERTERS: tuple[Converter, ...] = (
    convert_null,
    convert_simple,
    convert_key_value,
    convert_enumerable,
    convert_properties,
)


# ─────────────────────────────────────────────────────────────────────────────
# Formatter
# ─────────────────────────────────────────────────────────────────────────────


class KeyValueFormatter:
    """Default KeyValueSerializer built on an ordered converter chain.

    Args:
        converters: Converters tried in order before the not-supported terminal
    """

    __slots__ = ("_converters",)

    def __init__(self, converters: Sequence[Converter] = DEFAULT_CONVERTERS) -> None:
        self._converters = tuple(converters)

    @property
    def converters(self) -> tuple[Converter, ...]:
        return self._converters

    def serialize(self, name: str, value: object, options: FormatOptions | None = None) -> list[KeyValue]:
        return self._convert(ConvertContext(name, value, 0, options or FormatOptions()))

    def _convert(self, ctx: ConvertContext) -> list[KeyValue]:
        if ctx.depth > ctx.options.max_depth:
            raise UnsupportedType(
                ctx.data_type,
                f"Maximum conversion depth {ctx.options.max_depth} exceeded at '{ctx.name}' "
                f"({ctx.data_type.__qualname__}); the value may be self-referencing",
            )
        for converter in self._converters:
            if (pairs := converter(ctx, self._convert)) is not None:
                return pairs
        raise UnsupportedType(ctx.data_type)


def header_name(name: str) -> str:
    """Header names use hyphens where python names use underscores."""
    return name.replace("_", "-")
