"""Filter (middleware) pipeline wrapping each call.

Example:
    >>> from apicase.runtime.middleware import LoggingFilter, TimeoutFilter
    >>>
    >>> @use_filter(LoggingFilter(order=1), TimeoutFilter(timeout_seconds=10, order=2))
    ... class UserApi: ...
"""

from .middleware import ApiFilter, Next, compose
from .plugins import LoggingFilter, TimeoutFilter

__all__ = [
    # Core
    "ApiFilter",
    "Next",
    "compose",
    # Plugins
    "LoggingFilter",
    "TimeoutFilter",
]
