"""Parameter binding behaviors, attached with `typing.Annotated`.

Example:
    >>> class UserApi:
    ...     @http_get("/users/{id}")
    ...     async def get_user(self, id: int, fields: Annotated[list[str], PathQuery()]) -> User: ...
    ...
    ...     @http_post("/users")
    ...     async def create(self, user: Annotated[User, FormContent()]) -> User: ...
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from ..foundation.errors import UnsupportedSignature
from ..foundation.formats import FormatOptions, KeyValue, header_name, render_simple
from .base import ApiParameterAttribute

if TYPE_CHECKING:
    from ..descriptors import ActionIdentity, ParameterDescriptor
    from ..runtime.contexts import ParameterContext

JSON_MEDIA_TYPE = "application/json"
XML_MEDIA_TYPE = "application/xml"


class _Formatted(ApiParameterAttribute):
    """Binding that renders values with an optional datetime format override."""

    def __init__(self, *, datetime_format: str | None = None) -> None:
        self.datetime_format = datetime_format

    def format_options(self, ctx: ParameterContext) -> FormatOptions:
        return ctx.options.format_options.with_datetime_format(self.datetime_format)

    def key_values(self, ctx: ParameterContext) -> list[KeyValue]:
        return ctx.options.key_value_formatter.serialize(ctx.parameter.name, ctx.value, self.format_options(ctx))


class PathQuery(_Formatted):
    """Fills `{name}` path placeholders; pairs without a placeholder go to the query string."""

    async def on_request(self, ctx: ParameterContext) -> None:
        request = ctx.request
        for pair in self.key_values(ctx):
            if not request.replace_path_value(pair.key, pair.value):
                request.query.append(pair)


class Uri(ApiParameterAttribute):
    """The argument is the request uri: absolute replaces it, relative resolves against the host."""

    def validate(self, parameter: ParameterDescriptor, identity: ActionIdentity) -> None:
        if parameter.index != 0:
            raise UnsupportedSignature(str(identity), f"Uri parameter '{parameter.name}' must be the first parameter")

    async def on_request(self, ctx: ParameterContext) -> None:
        if ctx.value is None:
            raise ValueError(f"Uri parameter '{ctx.parameter.name}' must not be None")
        ctx.request.resolve(str(ctx.value))


class Header(_Formatted):
    """Single header from a simple value; the name defaults to the parameter name."""

    def __init__(self, name: str | None = None, *, datetime_format: str | None = None) -> None:
        super().__init__(datetime_format=datetime_format)
        self.name = name

    async def on_request(self, ctx: ParameterContext) -> None:
        name = self.name or header_name(ctx.parameter.name)
        if ctx.value is None:
            ctx.request.headers.pop(name, None)
            return
        ctx.request.headers[name] = render_simple(ctx.value, self.format_options(ctx))

    def __repr__(self) -> str:
        return f"Header({self.name!r})"


class Headers(_Formatted):
    """Every member of the value becomes a header; `_` in names becomes `-`."""

    async def on_request(self, ctx: ParameterContext) -> None:
        headers = ctx.request.headers
        for pair in self.key_values(ctx):
            headers[header_name(pair.key)] = pair.value


class JsonContent(_Formatted):
    """Json request body."""

    async def on_request(self, ctx: ParameterContext) -> None:
        text = ctx.options.json_formatter.serialize(ctx.value, self.format_options(ctx))
        if text is not None:
            ctx.request.set_content(text.encode(), JSON_MEDIA_TYPE)


class XmlContent(_Formatted):
    """Xml request body; the root element defaults to the value's type name."""

    def __init__(self, root: str | None = None, *, datetime_format: str | None = None) -> None:
        super().__init__(datetime_format=datetime_format)
        self.root = root

    async def on_request(self, ctx: ParameterContext) -> None:
        text = ctx.options.xml_formatter.serialize(ctx.value, self.root, self.format_options(ctx))
        if text is not None:
            ctx.request.set_content(text.encode(), XML_MEDIA_TYPE)


class FormContent(_Formatted):
    """application/x-www-form-urlencoded fields."""

    async def on_request(self, ctx: ParameterContext) -> None:
        ctx.request.form.extend(self.key_values(ctx))


class FormDataText(_Formatted):
    """multipart/form-data text fields."""

    async def on_request(self, ctx: ParameterContext) -> None:
        ctx.request.form_data.extend(self.key_values(ctx))


class Timeout(ApiParameterAttribute):
    """Per-call transport timeout, in seconds or as a timedelta."""

    async def on_request(self, ctx: ParameterContext) -> None:
        value = ctx.value
        if value is None:
            return
        seconds = value.total_seconds() if isinstance(value, timedelta) else float(value)  # type: ignore[arg-type]
        if seconds <= 0:
            raise ValueError(f"Timeout parameter '{ctx.parameter.name}' must be positive")
        ctx.request.timeout = seconds
