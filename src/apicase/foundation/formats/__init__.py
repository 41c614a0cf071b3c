"""Formatter contracts and their default implementations.

- FormatOptions: camelCase, null skipping, datetime format, depth ceiling
- KeyValueFormatter: recursive converter chain for query/header/form pairs
- JsonFormatter: orjson + pydantic TypeAdapter
- XmlFormatter: xml.etree based
"""

from .json import JsonFormatter, JsonSerializer, type_adapter
from .keyvalue import (
    DEFAULT_CONVERTERS,
    ConvertContext,
    Converter,
    KeyValue,
    KeyValueFormatter,
    KeyValueSerializer,
    header_name,
)
from .options import (
    SIMPLE_TYPES,
    FormatOptions,
    camel_case,
    is_simple_type,
    is_simple_value,
    parse_simple,
    render_simple,
    unwrap_optional,
)
from .xml import XmlFormatter, XmlSerializer

__all__ = [
    # Options & simple types
    "FormatOptions", "camel_case", "SIMPLE_TYPES", "is_simple_type", "is_simple_value",
    "render_simple", "parse_simple", "unwrap_optional",
    # Key-value
    "KeyValue", "KeyValueFormatter", "KeyValueSerializer", "ConvertContext", "Converter",
    "DEFAULT_CONVERTERS", "header_name",
    # Json / Xml
    "JsonFormatter", "JsonSerializer", "type_adapter",
    "XmlFormatter", "XmlSerializer",
]
