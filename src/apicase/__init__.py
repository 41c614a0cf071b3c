"""Apicase - declarative, type-checked http api clients.

Declare an interface as a class of `async def` stubs, describe each request
with decorators and `Annotated` parameter markers, and let apicase compile
and execute the calls through httpx.

Quick Start:
    >>> from typing import Annotated
    >>> from pydantic import BaseModel
    >>> from apicase import HttpApiFactory, Header, http_get, http_host
    >>>
    >>> class User(BaseModel):
    ...     id: int
    ...     name: str
    >>>
    >>> @http_host("https://api.example.com")
    ... class UserApi:
    ...     @http_get("/users/{id}")
    ...     async def get_user(self, id: int, trace: Annotated[str | None, Header("X-Trace")] = None) -> User: ...
    >>>
    >>> async with HttpApiFactory().create(UserApi) as api:
    ...     user = await api.get_user(1)

Filters:
    >>> from apicase import LoggingFilter, TimeoutFilter, use_filter
    >>>
    >>> @use_filter(LoggingFilter(order=1), TimeoutFilter(timeout_seconds=10, order=2))
    ... class UserApi: ...

OAuth:
    >>> from apicase.oauth import ClientCredentialsOptions, OAuthTokenFilter, TokenProviderFactory
    >>>
    >>> providers = TokenProviderFactory()
    >>> providers.add_client_credentials(UserApi, ClientCredentialsOptions(endpoint="https://auth.example.com/token"))
    >>>
    >>> @use_filter(OAuthTokenFilter(factory=providers))
    ... class UserApi: ...
"""

__version__ = "0.1.0"

from .foundation import (
    ApiException,
    ApiTimeoutError,
    ApicaseSettings,
    ConfigurationError,
    ErrorCode,
    FormatOptions,
    JsonFormatter,
    KeyValue,
    KeyValueFormatter,
    ResponseStatusError,
    TokenAcquisitionError,
    UnsupportedSignature,
    UnsupportedType,
    XmlFormatter,
    configure_logging,
    get_settings,
)
from .io import AsyncConcurrentCache, ConcurrentCache
from .attributes import (
    FormContent,
    FormDataText,
    Header,
    Headers,
    JsonContent,
    JsonReturn,
    PathQuery,
    RawReturn,
    Timeout,
    Uri,
    XmlContent,
    XmlReturn,
    header,
    http_delete,
    http_get,
    http_head,
    http_host,
    http_method,
    http_options,
    http_patch,
    http_post,
    http_put,
    returns,
    timeout,
    use_filter,
)
from .descriptors import ActionDescriptor, DescriptorRegistry
from .runtime import (
    ActionInvoker,
    ApiFilter,
    HttpApiFactory,
    HttpApiOptions,
    HttpApiProxy,
    LoggingFilter,
    Next,
    RequestContext,
    ResponseContext,
    TimeoutFilter,
)

__all__ = [
    "__version__",
    # Errors
    "ApiException", "ErrorCode", "ConfigurationError", "UnsupportedSignature", "UnsupportedType",
    "TokenAcquisitionError", "ResponseStatusError", "ApiTimeoutError",
    # Config
    "ApicaseSettings", "get_settings", "configure_logging",
    # Formats
    "FormatOptions", "KeyValue", "KeyValueFormatter", "JsonFormatter", "XmlFormatter",
    # Caches
    "ConcurrentCache", "AsyncConcurrentCache",
    # Declaration
    "http_host", "http_method", "http_get", "http_post", "http_put", "http_patch", "http_delete",
    "http_head", "http_options", "header", "timeout", "returns", "use_filter",
    "PathQuery", "Uri", "Header", "Headers", "JsonContent", "XmlContent", "FormContent",
    "FormDataText", "Timeout", "RawReturn", "JsonReturn", "XmlReturn",
    # Execution
    "ActionDescriptor", "DescriptorRegistry", "ActionInvoker", "HttpApiFactory", "HttpApiProxy",
    "HttpApiOptions", "RequestContext", "ResponseContext", "ApiFilter", "Next",
    "LoggingFilter", "TimeoutFilter",
]
