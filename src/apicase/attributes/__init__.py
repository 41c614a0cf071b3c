"""Behaviors declared on http api interfaces.

- Action behaviors: http_host, http_get/post/..., header, timeout (decorators)
- Parameter behaviors: PathQuery, Uri, Header, Headers, JsonContent, XmlContent,
  FormContent, FormDataText, Timeout (`Annotated` markers)
- Return behaviors: RawReturn, JsonReturn, XmlReturn (inferred, or set with returns())
- Filters: use_filter()
"""

from .action import GET_HEAD_METHODS, ActionHeader, ActionTimeout, HttpHost, HttpMethod
from .base import (
    HOST_ORDER,
    METHOD_ORDER,
    MIN_ORDER,
    ApiActionAttribute,
    ApiParameterAttribute,
    ApiReturnAttribute,
)
from .decorators import (
    ATTRIBUTES,
    attach,
    declared_behaviors,
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
from .parameter import (
    FormContent,
    FormDataText,
    Header,
    Headers,
    JsonContent,
    PathQuery,
    Timeout,
    Uri,
    XmlContent,
)
from .results import RAW_TYPES, JsonReturn, RawReturn, XmlReturn

__all__ = [
    # Base
    "ApiActionAttribute", "ApiParameterAttribute", "ApiReturnAttribute",
    "MIN_ORDER", "HOST_ORDER", "METHOD_ORDER",
    # Action
    "HttpHost", "HttpMethod", "ActionHeader", "ActionTimeout", "GET_HEAD_METHODS",
    # Decorators
    "ATTRIBUTES", "attach", "declared_behaviors",
    "http_host", "http_method", "http_get", "http_post", "http_put", "http_patch",
    "http_delete", "http_head", "http_options", "header", "timeout", "returns", "use_filter",
    # Parameter
    "PathQuery", "Uri", "Header", "Headers", "JsonContent", "XmlContent",
    "FormContent", "FormDataText", "Timeout",
    # Return
    "RawReturn", "JsonReturn", "XmlReturn", "RAW_TYPES",
]
