"""Per-call request/response state.

A RequestContext and its ResponseContext belong to exactly one in-flight
call and are never shared across calls.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final
from urllib.parse import quote, urlencode, urljoin

import httpx

from ..foundation.errors import ConfigurationError
from ..foundation.formats import KeyValue

if TYPE_CHECKING:
    from ..descriptors import ActionDescriptor, ParameterDescriptor
    from .options import HttpApiOptions


class _Unset:
    __slots__ = ()

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Final = _Unset()

FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"


@dataclass(slots=True)
class HttpRequestMessage:
    """Outbound request under construction.

    `uri` stays a plain string until build() so `{name}` path placeholders
    survive until parameter binding has filled them.
    """

    method: str = "GET"
    uri: str | None = None
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    query: list[KeyValue] = field(default_factory=list)
    content: bytes | None = None
    form: list[KeyValue] = field(default_factory=list)
    form_data: list[KeyValue] = field(default_factory=list)
    timeout: float | None = None

    def require_uri(self) -> str:
        if self.uri is None:
            raise ConfigurationError("An http host is required: set HttpApiOptions.http_host, "
                                     "use @http_host or give the client a base_url")
        return self.uri

    def resolve(self, path: str) -> None:
        """Point uri at `path`, relative to the current uri when not absolute."""
        if httpx.URL(path).is_absolute_url:
            self.uri = path
        else:
            self.uri = urljoin(self.require_uri(), path)

    def replace_path_value(self, name: str, value: str) -> bool:
        """Fill `{name}` (case-insensitive) in the path. Returns whether it was found."""
        if self.uri is None:
            return False
        base, sep, query = self.uri.partition("?")
        pattern = re.compile(r"\{" + re.escape(name) + r"\}", re.IGNORECASE)
        replaced, count = pattern.subn(lambda _: quote(value, safe=""), base)
        if count:
            self.uri = f"{replaced}{sep}{query}"
        return bool(count)

    def set_content(self, content: bytes, media_type: str) -> None:
        self.content = content
        self.headers["Content-Type"] = media_type

    @property
    def url(self) -> httpx.URL:
        url = httpx.URL(self.require_uri())
        if not self.query:
            return url
        return url.copy_with(params=httpx.QueryParams([*url.params.multi_items(), *self.query]))

    def build(self, client: httpx.AsyncClient) -> httpx.Request:
        """Assemble the transport request."""
        content = self.content
        headers = httpx.Headers(self.headers)
        if self.form and content is None:
            content = urlencode(self.form).encode()
            headers.setdefault("Content-Type", FORM_MEDIA_TYPE)
        files = [(k, (None, v)) for k, v in self.form_data] or None
        kwargs: dict[str, object] = {}
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        return client.build_request(
            self.method, self.url, headers=headers,
            content=None if files else content,
            data=dict(self.form) if files and self.form else None,
            files=files,
            **kwargs,  # type: ignore[arg-type]
        )


@dataclass(slots=True)
class RequestContext:
    """State of one call's request phase.

    `properties` is a per-call bag filters can use to share state,
    e.g. a start time recorded before `next` and read after it.
    """

    action: ActionDescriptor
    arguments: tuple[object, ...]
    client: httpx.AsyncClient
    options: HttpApiOptions
    request: HttpRequestMessage
    properties: dict[str, object] = field(default_factory=dict)

    @property
    def action_name(self) -> str:
        return f"{self.action.identity.interface.__name__}.{self.action.identity.name}"


@dataclass(slots=True)
class ParameterContext:
    """One parameter's binding: the request context plus the supplied value."""

    request_context: RequestContext
    parameter: ParameterDescriptor
    value: object

    @property
    def request(self) -> HttpRequestMessage:
        return self.request_context.request

    @property
    def options(self) -> HttpApiOptions:
        return self.request_context.options


@dataclass(slots=True)
class ResponseContext:
    """State of one call's response phase."""

    request_context: RequestContext
    response: httpx.Response | None = None
    result: object = UNSET

    @property
    def has_result(self) -> bool:
        return self.result is not UNSET

    @property
    def action(self) -> ActionDescriptor:
        return self.request_context.action

    @property
    def options(self) -> HttpApiOptions:
        return self.request_context.options
