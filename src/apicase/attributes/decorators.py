"""Decorators declaring behaviors on interfaces and their methods.

Decorators apply bottom-up; behaviors are recorded in top-down source order
so that equal order keys keep declaration order.

Example:
    >>> @http_host("https://api.example.com")
    ... class UserApi:
    ...     @http_get("/users/{id}")
    ...     @header("Accept-Language", "en")
    ...     @use_filter(LoggingFilter())
    ...     async def get_user(self, id: int) -> User: ...
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

from .action import ActionHeader, ActionTimeout, HttpHost, HttpMethod
from .base import ApiReturnAttribute

if TYPE_CHECKING:
    from ..runtime.middleware import ApiFilter

T = TypeVar("T")

ATTRIBUTES = "__apicase_attributes__"


def declared_behaviors(target: object) -> tuple[object, ...]:
    """Behaviors declared directly on a function or class (not inherited)."""
    own = vars(target).get(ATTRIBUTES) if hasattr(target, "__dict__") else None
    return tuple(own or ())


def attach(*behaviors: object) -> Callable[[T], T]:
    """Attach behaviors to an interface class or method."""
    def apply(target: T) -> T:
        setattr(target, ATTRIBUTES, [*behaviors, *declared_behaviors(target)])
        return target
    return apply


def http_host(host: str) -> Callable[[T], T]:
    return attach(HttpHost(host))


def http_method(method: str, path: str | None = None) -> Callable[[T], T]:
    return attach(HttpMethod(method, path))


def http_get(path: str | None = None) -> Callable[[T], T]:
    return http_method("GET", path)


def http_post(path: str | None = None) -> Callable[[T], T]:
    return http_method("POST", path)


def http_put(path: str | None = None) -> Callable[[T], T]:
    return http_method("PUT", path)


def http_patch(path: str | None = None) -> Callable[[T], T]:
    return http_method("PATCH", path)


def http_delete(path: str | None = None) -> Callable[[T], T]:
    return http_method("DELETE", path)


def http_head(path: str | None = None) -> Callable[[T], T]:
    return http_method("HEAD", path)


def http_options(path: str | None = None) -> Callable[[T], T]:
    return http_method("OPTIONS", path)


def header(name: str, value: str, *, order: int = 0) -> Callable[[T], T]:
    return attach(ActionHeader(name, value, order=order))


def timeout(seconds: float) -> Callable[[T], T]:
    return attach(ActionTimeout(seconds))


def returns(attribute: ApiReturnAttribute) -> Callable[[T], T]:
    """Override the return behavior inferred from the return annotation."""
    return attach(attribute)


def use_filter(*filters: ApiFilter) -> Callable[[T], T]:
    return attach(*filters)


__all__ = [
    "ATTRIBUTES", "attach", "declared_behaviors",
    "http_host", "http_method", "http_get", "http_post", "http_put", "http_patch",
    "http_delete", "http_head", "http_options",
    "header", "timeout", "returns", "use_filter",
]
