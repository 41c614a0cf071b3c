"""Built-in filter plugins for common cross-cutting concerns.

Retry and backoff are not built in; they are meant to be layered on as an
additional filter wrapping `next`.
"""

from .logging import LoggingFilter
from .timeout import TimeoutFilter

__all__ = [
    "LoggingFilter",
    "TimeoutFilter",
]
