"""Return behaviors decoding the response into the call's result."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from .base import ApiReturnAttribute

if TYPE_CHECKING:
    from ..runtime.contexts import ResponseContext

RAW_TYPES: tuple[object, ...] = (str, bytes, httpx.Response, None, type(None))


class RawReturn(ApiReturnAttribute):
    """Result is the response itself, its text, its bytes, or None."""

    async def decode(self, ctx: ResponseContext) -> object:
        response = ctx.response
        assert response is not None
        data_type = ctx.action.return_descriptor.data_type
        if data_type is httpx.Response:
            return response
        if data_type is str:
            return response.text
        if data_type is bytes:
            return response.content
        return None


class JsonReturn(ApiReturnAttribute):
    """Result is the json body validated into the return annotation."""

    accept = "application/json"

    async def decode(self, ctx: ResponseContext) -> object:
        response = ctx.response
        assert response is not None
        return ctx.options.json_formatter.deserialize(response.content, ctx.action.return_descriptor.data_type)


class XmlReturn(ApiReturnAttribute):
    """Result is the xml body validated into the return annotation."""

    accept = "application/xml"

    async def decode(self, ctx: ResponseContext) -> object:
        response = ctx.response
        assert response is not None
        return ctx.options.xml_formatter.deserialize(response.content, ctx.action.return_descriptor.data_type)
