"""Action behaviors: host, method and path, static headers, timeout."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from .base import HOST_ORDER, METHOD_ORDER, ApiActionAttribute

if TYPE_CHECKING:
    from ..runtime.contexts import RequestContext

GET_HEAD_METHODS: frozenset[str] = frozenset({"GET", "HEAD"})


class HttpHost(ApiActionAttribute):
    """Sets the base address the method path resolves against."""

    order = HOST_ORDER

    def __init__(self, host: str) -> None:
        if not host:
            raise ValueError("host must not be empty")
        if not httpx.URL(host).is_absolute_url:
            raise ValueError(f"host must be an absolute url: {host!r}")
        self.host = host

    async def on_request(self, ctx: RequestContext) -> None:
        ctx.request.uri = self.host

    def __repr__(self) -> str:
        return f"HttpHost({self.host!r})"


class HttpMethod(ApiActionAttribute):
    """Sets the http method and resolves the optional path against the host."""

    order = METHOD_ORDER

    def __init__(self, method: str, path: str | None = None) -> None:
        self.method = method.upper()
        self.path = path or None

    @property
    def is_get_or_head(self) -> bool:
        return self.method in GET_HEAD_METHODS

    async def on_request(self, ctx: RequestContext) -> None:
        request = ctx.request
        request.method = self.method
        if self.path is not None:
            request.resolve(self.path)

    def __repr__(self) -> str:
        return f"HttpMethod({self.method!r}, {self.path!r})"


class ActionHeader(ApiActionAttribute):
    """Static request header."""

    def __init__(self, name: str, value: str, *, order: int = 0) -> None:
        self.name = name
        self.value = value
        self.order = order

    async def on_request(self, ctx: RequestContext) -> None:
        ctx.request.headers[self.name] = self.value

    def __repr__(self) -> str:
        return f"ActionHeader({self.name!r}, {self.value!r})"


class ActionTimeout(ApiActionAttribute):
    """Transport timeout in seconds for every call of the action."""

    def __init__(self, seconds: float, *, order: int = 0) -> None:
        if seconds <= 0:
            raise ValueError("timeout must be positive")
        self.seconds = seconds
        self.order = order

    async def on_request(self, ctx: RequestContext) -> None:
        ctx.request.timeout = self.seconds

    def __repr__(self) -> str:
        return f"ActionTimeout({self.seconds})"
