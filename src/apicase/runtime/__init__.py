"""Runtime: per-call contexts, filter pipeline, invoker and dispatcher."""

from .contexts import UNSET, HttpRequestMessage, ParameterContext, RequestContext, ResponseContext
from .options import HttpApiOptions
from .middleware import ApiFilter, LoggingFilter, Next, TimeoutFilter, compose
from .invoker import ActionInvoker, send
from .proxy import HttpApiFactory, HttpApiProxy

__all__ = [
    # Contexts
    "UNSET", "HttpRequestMessage", "RequestContext", "ParameterContext", "ResponseContext",
    # Options
    "HttpApiOptions",
    # Pipeline
    "ApiFilter", "Next", "compose", "LoggingFilter", "TimeoutFilter",
    # Execution
    "ActionInvoker", "send", "HttpApiFactory", "HttpApiProxy",
]
