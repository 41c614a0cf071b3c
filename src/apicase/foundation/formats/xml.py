"""XML formatter on xml.etree.

Objects map to one element per member, sequences to repeated elements and
simple values to element text. Deserialization builds the same shape back
into a dict and lets pydantic validate it into the target type.
"""

from __future__ import annotations

import dataclasses
import xml.etree.ElementTree as ET
from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel

from ..errors import UnsupportedType
from .json import type_adapter
from .options import FormatOptions, is_simple_value, render_simple

ITEM_TAG = "item"


@runtime_checkable
class XmlSerializer(Protocol):
    """Formatter contract for xml bodies and xml results."""

    def serialize(self, value: object, root: str | None = None, options: FormatOptions | None = None) -> str | None: ...
    def deserialize(self, text: str | bytes, tp: object) -> object: ...


class XmlFormatter:
    """Default XmlSerializer."""

    __slots__ = ("encoding",)

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def serialize(self, value: object, root: str | None = None, options: FormatOptions | None = None) -> str | None:
        if value is None:
            return None
        opts = options or FormatOptions()
        element = ET.Element(root or type(value).__name__)
        _fill(element, value, opts, 0)
        body = ET.tostring(element, encoding="unicode")
        return f'<?xml version="1.0" encoding="{self.encoding}"?>{body}'

    def deserialize(self, text: str | bytes, tp: object) -> object:
        if not text:
            return None
        element = ET.fromstring(text)
        if tp is ET.Element:
            return element
        data = _read(element)
        if tp is object or tp is Any:
            return data
        return type_adapter(tp).validate_python(data)


def _fill(element: ET.Element, value: object, options: FormatOptions, depth: int) -> None:
    if depth > options.max_depth:
        raise UnsupportedType(type(value), f"Maximum xml depth {options.max_depth} exceeded at <{element.tag}>")
    if value is None:
        return
    if is_simple_value(value):
        element.text = render_simple(value, options)
        return
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="python", by_alias=True)
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    if isinstance(value, Mapping):
        for key, member in value.items():
            if member is None and options.ignore_null_property:
                continue
            _fill(ET.SubElement(element, options.format_name(str(key))), member, options, depth + 1)
        return
    if isinstance(value, Iterable) and not isinstance(value, (str, bytes, bytearray)):
        for item in value:
            _fill(ET.SubElement(element, ITEM_TAG), item, options, depth + 1)
        return
    raise UnsupportedType(type(value))


def _read(element: ET.Element) -> object:
    children = list(element)
    if not children:
        return element.text
    tags = [child.tag for child in children]
    if all(tag == ITEM_TAG for tag in tags):
        return [_read(child) for child in children]
    result: dict[str, object] = {}
    for child in children:
        value = _read(child)
        if child.tag in result:
            existing = result[child.tag]
            result[child.tag] = [*existing, value] if isinstance(existing, list) else [existing, value]
        else:
            result[child.tag] = value
    return result
